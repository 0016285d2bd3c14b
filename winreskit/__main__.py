"""
Entry point for running winreskit as a module.

Usage: python -m winreskit [command] [options]
"""

from winreskit.cli.parser import main

if __name__ == "__main__":
    main()
