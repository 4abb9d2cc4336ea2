#!/usr/bin/env python3
"""Run the gitsheets HTTP API under uvicorn."""

import argparse
import os

import uvicorn


def main():
    """Parse server options and start uvicorn."""
    parser = argparse.ArgumentParser(
        description="Start the gitsheets API server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/start_api.py                  # 127.0.0.1:8000
  python scripts/start_api.py --port 9000
  python scripts/start_api.py --reload         # Auto-reload on changes
        """,
    )
    parser.add_argument("--host", default="127.0.0.1", help="Host to bind to (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=8000, help="Port to bind to (default: 8000)")
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload for development")
    parser.add_argument(
        "--log-level",
        default=os.getenv("LOG_LEVEL", "info").lower(),
        choices=["critical", "error", "warning", "info", "debug"],
        help="Log level (default: LOG_LEVEL or info)",
    )
    args = parser.parse_args()

    os.environ.setdefault("LOG_LEVEL", args.log_level.upper())
    print(f"Starting gitsheets API on http://{args.host}:{args.port} (docs at /docs)")

    uvicorn.run(
        "gitsheets.api.app:app",
        host=args.host,
        port=args.port,
        log_level=args.log_level,
        reload=args.reload,
    )


if __name__ == "__main__":
    main()
