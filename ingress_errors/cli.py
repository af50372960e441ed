from __future__ import annotations

import argparse
import sys

import uvicorn

from . import __version__
from .config import DEFAULT_LISTEN_ADDRESS, ConfigError, Settings
from .logging_conf import get_logger, setup_logging
from .main import create_app

logger = get_logger("cli")


def parse_args(argv: list[str]) -> argparse.Namespace:
    """Parse CLI arguments for the server."""
    parser = argparse.ArgumentParser(
        prog="ingress-nginx-errors",
        description="Default backend serving pre-rendered error pages",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    # Defaults of None fall through to LISTEN_ADDRESS / TEMPLATES_DIR / LOG_LEVEL.
    parser.add_argument(
        "-l",
        "--listen-address",
        default=None,
        help=f"Address to listen on (default: {DEFAULT_LISTEN_ADDRESS}).",
    )
    parser.add_argument(
        "-p",
        "--templates-dir",
        default=None,
        help="The path to the directory containing the template files.",
    )
    parser.add_argument("--log-level", default=None, help="Logging level (default: INFO).")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    try:
        settings = Settings.from_env(
            templates_dir=args.templates_dir,
            listen_address=args.listen_address,
            log_level=args.log_level,
        )
    except ConfigError as e:
        setup_logging("INFO")
        logger.error("config.invalid", extra={"event": "config_invalid", "error": str(e)})
        raise SystemExit(1)

    app = create_app(settings)
    logger.info(
        f"Listening on http://{settings.listen_address}",
        extra={"event": "listening", "address": settings.listen_address},
    )
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
