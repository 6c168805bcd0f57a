#!/usr/bin/env python3
"""
Run the Codexsun server from a checkout.

Usage:
    python run.py              # API server + interactive console
    python run.py --check      # only check that APP_PORT is free

    # or with venv
    .venv/Scripts/python run.py
"""
import sys
import os

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), 'src'))


def run_server():
    """Run the API server with the console attached to stdin"""
    from codexsun.main import main
    main()


def run_check():
    """Check whether the configured port can be bound"""
    from codexsun.check_port import check_port
    check_port()


if __name__ == "__main__":
    if "--check" in sys.argv or "-c" in sys.argv:
        run_check()
    else:
        run_server()
