"""Entry point for running codegen as a module.

Usage:
    python -m codegen [command] [options]

Example:
    python -m codegen generate --project codegen.json
    python -m codegen check
"""

from codegen.cli import app

if __name__ == "__main__":
    app()
