"""
Main entry point script for PongSim.

This script serves as the executable entry point when running
PongSim from a source checkout.
"""

import sys
from pongsim.main import main

if __name__ == "__main__":
    sys.exit(main())
