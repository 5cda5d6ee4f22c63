#!/usr/bin/env python3
"""
promchart server - live Prometheus charts over HTTP

This is the main entry point that loads the configuration, creates the
FastAPI app and runs it with uvicorn.
"""

import argparse
import logging

import uvicorn

from .core.config import load_config
from .core.server import create_app


def main():
    """Main entry point for promchart server."""
    parser = argparse.ArgumentParser(description="promchart server")
    parser.add_argument("-c", "--config", help="Path to YAML config (default: $PROMCHART_CONFIG or ./config.yaml)")
    parser.add_argument("--host", help="Override listen host")
    parser.add_argument("--port", type=int, help="Override listen port")
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Override log level")
    args = parser.parse_args()

    # Load configuration
    config = load_config(args.config)
    if args.host:
        config.host = args.host
    if args.port:
        config.port = args.port
    if args.log_level:
        config.log_level = args.log_level

    logging.basicConfig(
        level=getattr(logging, config.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = create_app(config)

    uvicorn.run(app, host=config.host, port=config.port, reload=False, access_log=False)


if __name__ == "__main__":
    main()
