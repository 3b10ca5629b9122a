"""
Run the admin backend under uvicorn. Intended to be run under systemd/supervisor.
"""

from __future__ import annotations

import argparse
import logging

import uvicorn


def main() -> int:
    parser = argparse.ArgumentParser(description="RTMCS admin backend")
    parser.add_argument("--host", type=str, default="0.0.0.0")
    parser.add_argument("-p", "--port", type=int, default=3004)
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(name)s %(levelname)s %(asctime)s %(message)s",
        datefmt="%m/%d/%Y %I:%M:%S %p",
    )
    uvicorn.run("admin_backend.app:app", host=args.host, port=args.port)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
