"""
Main entry point for running the package as a module.

Usage:
    python -m resizer process --bucket uploads --key photos/cat.jpg
    python -m resizer replay --event notification.json
    python -m resizer validate
"""

import sys
from .cli import main

if __name__ == '__main__':
    sys.exit(main())
