"""
Main entry point for the scopels language server.

This file is executed when running: python -m scopels

By default the server talks to the editor over stdin/stdout using
JSON-RPC; --tcp serves a single client on a socket instead.
"""
import argparse
import os
import sys

from scopels.lsp.server import create_server


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="scopels", description="Scope-aware completion language server"
    )
    parser.add_argument("--tcp", action="store_true", help="Serve over TCP instead of stdio")
    parser.add_argument("--host", default="127.0.0.1", help="TCP host (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=2087, help="TCP port (default: 2087)")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None):
    """Start the language server."""
    args = parse_args(argv)

    # stdout carries the protocol; diagnostics go to stderr.
    if os.getenv("DEBUG"):
        print("scopels starting in DEBUG mode", file=sys.stderr)
        print("Waiting for debugger to attach on port 5678...", file=sys.stderr)
        try:
            import debugpy  # type: ignore
            debugpy.listen(("127.0.0.1", 5678))
            debugpy.wait_for_client()
            print("Debugger attached, continuing", file=sys.stderr)
        except ImportError:
            print("debugpy not available - install with: pip install scopels[debug]", file=sys.stderr)

    server = create_server()

    if args.tcp:
        server.start_tcp(args.host, args.port)
    else:
        server.start_io()


if __name__ == "__main__":
    main()
