# start_app.py
"""Launch the printer relay as a standalone process."""

from __future__ import annotations

import argparse
import sys

import uvicorn
from dotenv import load_dotenv

import config
from printer_relay.app.obs import configure_logging


def main(argv: list[str] | None = None) -> None:
    """Load settings, configure logging, then serve the relay."""

    parser = argparse.ArgumentParser(description="Station printer relay")
    parser.add_argument("--host", help="Interface to bind (default from settings)")
    parser.add_argument("--port", type=int, help="Port to listen on")
    parser.add_argument("--log-level", help="Root log level, e.g. INFO or DEBUG")
    args = parser.parse_args(argv)

    load_dotenv()  # load environment variables from a .env file
    config.get_settings.cache_clear()
    settings = config.get_settings()

    configure_logging(args.log_level or settings.log_level)

    try:
        uvicorn.run(
            "printer_relay.app.main:app",
            host=args.host or settings.relay_host,
            port=args.port or settings.relay_port,
            log_config=None,
            access_log=False,
        )
    except ModuleNotFoundError as exc:
        missing = exc.name or str(exc)
        print(
            f"Missing dependency: {missing}. Install it with 'pip install {missing}'",
            file=sys.stderr,
        )
        raise SystemExit(1)


if __name__ == "__main__":
    main()
