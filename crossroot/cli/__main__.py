"""
Entry point for running crossroot CLI as a module.

Usage: python -m crossroot.cli [command] [options]
"""

from .parser import main

if __name__ == "__main__":
    main()
