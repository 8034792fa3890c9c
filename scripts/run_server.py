"""
Run the FastAPI server.

This script starts the Verdant API server using uvicorn.

Usage:
    python scripts/run_server.py [--port PORT] [--reload]

Options:
    --port PORT: Port to run the server on (default: 8000)
    --reload: Enable auto-reload for development (default: False)
    --host HOST: Host to bind to (default: 0.0.0.0)

Environment Variables:
    OPENAI_API_KEY: Narrative recommendations (falls back to MockNarrativeClient if not set)
    FINNHUB_API_KEY: Live prices (static catalog prices are used if not set)
"""

import argparse

import uvicorn


def main():
    parser = argparse.ArgumentParser(
        description="Run the Verdant API server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port to run the server on (default: 8000)",
    )
    parser.add_argument(
        "--host",
        type=str,
        default="0.0.0.0",
        help="Host to bind to (default: 0.0.0.0)",
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="info",
        choices=["critical", "error", "warning", "info", "debug", "trace"],
        help="Log level (default: info)",
    )

    args = parser.parse_args()

    print("=" * 80)
    print("VERDANT API SERVER")
    print("=" * 80)
    print(f"\nStarting server on http://{args.host}:{args.port}")
    print(f"   Mode: {'Development (auto-reload)' if args.reload else 'Production'}")
    print(f"\nAPI Documentation: http://localhost:{args.port}/docs")
    print(f"Main endpoint: POST http://localhost:{args.port}/api/calculate")
    print("\n" + "=" * 80 + "\n")

    uvicorn.run(
        "verdant.api:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=args.log_level,
    )


if __name__ == "__main__":
    main()
