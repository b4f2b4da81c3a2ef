"""Entry point for running the router as a module.

Usage:
    python -m inbox_router validate-config
    python -m inbox_router --help
"""

from dotenv import load_dotenv

load_dotenv()  # Load .env before any other imports that need env vars

from inbox_router.cli import main  # noqa: E402

if __name__ == "__main__":
    main()
