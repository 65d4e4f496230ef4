#!/usr/bin/env python
"""
AcadEval - Application Entry Point

Usage:
    python run.py [--host HOST] [--port PORT] [--reload]

Examples:
    python run.py                    # Start with defaults
    python run.py --reload           # Start with auto-reload
    python run.py --port 8080        # Start on custom port
"""
import argparse
import uvicorn

from acadeval.config import settings


def main():
    parser = argparse.ArgumentParser(
        description="AcadEval API Server"
    )
    parser.add_argument(
        "--host",
        default=settings.HOST,
        help=f"Host to bind (default: {settings.HOST})"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=settings.PORT,
        help=f"Port to bind (default: {settings.PORT})"
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development"
    )

    args = parser.parse_args()

    print(f"""
╔══════════════════════════════════════════════════════════════╗
                      AcadEval API Server
╠══════════════════════════════════════════════════════════════╣
    Host: {args.host:<15}
    Port: {args.port:<15}
    Reload: {'Enabled' if args.reload else 'Disabled':<12}
    MongoDB: {settings.MONGO_DB_NAME:<15}
╠══════════════════════════════════════════════════════════════╣
    API Docs: http://{args.host}:{args.port}/docs
    ReDoc:    http://{args.host}:{args.port}/redoc
╚══════════════════════════════════════════════════════════════╝
    """)

    uvicorn.run(
        "acadeval.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level="info"
    )


if __name__ == "__main__":
    main()
