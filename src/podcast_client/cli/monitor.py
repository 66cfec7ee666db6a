"""CLI entry that reports the production service's reachability."""

from __future__ import annotations

import argparse
import logging
import threading
from pathlib import Path
from typing import Sequence

from podcast_client.cli.produce import print_event
from podcast_client.client.api import ApiClient
from podcast_client.client.config import load_client_config
from podcast_client.events import ApiConnected, ApiDisconnected
from podcast_client.utils.logging import configure_logging

LOGGER = logging.getLogger("podcast_client.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="podcast-client monitor",
        description="Watch the service health endpoint and print connect/disconnect events.",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        help="Optional path to a YAML config (defaults to var/settings/client.yaml).",
    )
    parser.add_argument("--server-url", help="Override server_url from the config.")
    parser.add_argument(
        "--once",
        action="store_true",
        help="Probe once and exit with 0 when healthy, 1 otherwise.",
    )
    parser.add_argument("--log-level", default="INFO", help="Python logging level (DEBUG, INFO, WARNING, ...).")
    return parser


def main(argv: Sequence[str] | None = None, client_factory=ApiClient.from_config) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    configure_logging(args.log_level)

    config, _, _ = load_client_config(args.config)
    if args.server_url:
        config.server_url = args.server_url.rstrip("/")

    with client_factory(config) as client:
        client.channel.subscribe(ApiConnected, print_event)
        client.channel.subscribe(ApiDisconnected, print_event)
        if args.once:
            return 0 if client.monitor.probe() else 1
        client.start()
        try:
            threading.Event().wait()
        except KeyboardInterrupt:
            LOGGER.info("Interrupted, shutting down…")
            return 130
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
