# main.py

import sys

from rollimport.cli import main

if __name__ == "__main__":
    sys.exit(main())
