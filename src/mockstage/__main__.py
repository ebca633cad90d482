"""
mockstage package entry point.

Allows running mockstage as a module:
    python -m mockstage
"""

from mockstage.cli import main

if __name__ == "__main__":
    main()
