"""
Cloud Cover Forecast - CLI entry point

Usage:
    python main.py                          # configured default location
    python main.py --lat 51.9 --lon -8.47   # explicit coordinates
    python main.py --location "Cork"        # geocoded place name
    python main.py --hours 72 --json        # full forecast as JSON
"""

import sys

from cloud_cover.cli import main

if __name__ == "__main__":
    sys.exit(main())
