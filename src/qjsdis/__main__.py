"""
Main entry point for the disassembler when run as a module.
"""

import sys
from qjsdis.qjsdis_cli import main

if __name__ == '__main__':
    sys.exit(main())
