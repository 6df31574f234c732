"""Run the API server

Usage:
    python -m bookkeep
    # or
    uvicorn bookkeep.app:create_app --factory --reload --port 5000
"""
import argparse

import uvicorn

from bookkeep.config import config


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the Bookkeep API server")
    parser.add_argument("--host", type=str, default=config.HOST, help="Host to bind")
    parser.add_argument("--port", type=int, default=config.PORT, help="Port to bind")
    parser.add_argument("--reload", action="store_true", help="Reload on code changes")
    args = parser.parse_args()

    uvicorn.run(
        "bookkeep.app:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        reload=args.reload,
    )


if __name__ == "__main__":
    main()
