"""Entry point for running adolinks as a module.

This allows running the application with:
    python -m adolinks [COMMAND] [OPTIONS]
"""

from adolinks.cli import app

if __name__ == "__main__":
    app()
