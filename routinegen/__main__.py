"""
Package entry point.

Allows running the application via:

    python -m routinegen

This simply forwards execution to routinegen.cli.main().
"""

from routinegen.cli import main

if __name__ == "__main__":
    main()
