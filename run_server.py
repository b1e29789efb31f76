#!/usr/bin/env python
"""
Server Entry Point

Usage:
    Development:  python run_server.py --dev
    Production:   python run_server.py
"""

import argparse
import os


def run_dev_server():
    """Run development server with auto-reload."""
    import uvicorn
    
    uvicorn.run(
        "backoffice.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", 8000)),
        reload=True,
        reload_dirs=["backoffice"],
        log_level="debug",
        access_log=True,
    )


def run_prod_server():
    """Run production server with Uvicorn directly."""
    import uvicorn
    
    # a single worker: the store lives in process memory
    uvicorn.run(
        "backoffice.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", 8000)),
        workers=1,
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
        access_log=True,
        proxy_headers=True,
        forwarded_allow_ips="*",
        server_header=False,
    )


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Shop Back-Office API Server")
    parser.add_argument(
        "--dev",
        action="store_true",
        help="Run in development mode with auto-reload"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port to run on (default: 8000)"
    )
    
    args = parser.parse_args()
    os.environ["PORT"] = str(args.port)
    
    if args.dev:
        print("Starting development server...")
        run_dev_server()
    else:
        print("Starting production server with Uvicorn...")
        run_prod_server()
