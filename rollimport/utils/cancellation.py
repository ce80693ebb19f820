"""
Cooperative cancellation for background imports.
"""

from __future__ import annotations

import threading

from ..exceptions import ProcessingAbortedError


class CancellationToken:
    """
    Flag checked by the pipeline between pages.

    Cancelling does not interrupt a page in progress; the import stops at
    the next page boundary and the job ends as failed.
    """

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self, items_processed: int = 0, items_total: int = 0) -> None:
        if self._event.is_set():
            raise ProcessingAbortedError(items_processed=items_processed, items_total=items_total)
