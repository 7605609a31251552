#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/sitemark/__main__.py
"""Allow ``python -m sitemark``."""

import sys

from sitemark.cli import main

if __name__ == "__main__":
    sys.exit(main())
