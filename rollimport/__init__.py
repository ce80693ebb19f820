"""
Bengali voter roll import.

Turns scanned or text-layer voter roll PDFs into structured voter records.
"""

__version__ = "0.1.0"
