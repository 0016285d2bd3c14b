"""
Entry point for running the winreskit CLI as a module.

Usage: python -m winreskit.cli [command] [options]
"""

from .parser import main

if __name__ == "__main__":
    main()
