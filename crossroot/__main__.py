"""
Entry point for running crossroot CLI as a module.

Usage: python -m crossroot [command] [options]
"""

from crossroot.cli.parser import main

if __name__ == "__main__":
    main()
