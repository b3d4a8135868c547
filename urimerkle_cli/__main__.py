"""
Module execution entry point.

Allows running with: python -m urimerkle_cli
"""

import sys
from urimerkle_cli.main import main

if __name__ == "__main__":
    sys.exit(main())
