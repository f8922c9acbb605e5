"""
elfnm Module Entry Point
=========================

Allows running the CLI via: python -m elfnm
"""

from elfnm.cli import main

if __name__ == "__main__":
    main()
