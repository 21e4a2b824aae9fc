#!/usr/bin/env python3
"""
HDFS Resource MCP Server: entry point.

An MCP server that resolves full or partial HDFS paths for alert attribute
auto-completion.
Canonical entry: from project root run `uv run python src/server.py` (or `uv run python src/app.py`).
"""

import logging
import sys

import config as config_module
from app import mcp

if __name__ == "__main__":
    # stdout carries the MCP stdio protocol, so logs go to stderr.
    logging.basicConfig(
        level=config_module.settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )
    try:
        mcp.run()
    except KeyboardInterrupt:
        print("\nServer stopped by user", file=sys.stderr)
        sys.exit(0)
    except Exception as e:
        print(f"Fatal error: {e}", file=sys.stderr)
        import traceback

        traceback.print_exc()
        sys.exit(1)
