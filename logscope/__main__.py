"""
Entry point for running logscope as a module.

This allows running the client with: python -m logscope
"""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
