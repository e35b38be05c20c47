#!/usr/bin/env python3
"""
kubeprice web server entry point
"""

if __name__ == "__main__":
    from kubeprice.main import run_server

    run_server()
