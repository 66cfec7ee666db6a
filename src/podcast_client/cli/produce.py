"""CLI entry that submits one production and waits for its outcome."""

from __future__ import annotations

import argparse
import json
import logging
import uuid
from pathlib import Path
from typing import Sequence

from podcast_client.client.api import ApiClient
from podcast_client.client.config import load_client_config
from podcast_client.client.errors import PodcastClientError
from podcast_client.client.submitter import ProductionState
from podcast_client.events import ClientEvent
from podcast_client.runtime.storage import logs_path
from podcast_client.utils.logging import attach_log_file, configure_logging, detach_log_file

LOGGER = logging.getLogger("podcast_client.cli")
EXIT_CODES = {
    ProductionState.COMPLETED: 0,
    ProductionState.FAILED: 1,
    ProductionState.CANCELLED: 2,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="podcast-client produce",
        description="Upload an introduction, an interview and a photo and wait for the produced episode.",
    )
    parser.add_argument("--title", required=True, help="Episode title.")
    parser.add_argument("--description", required=True, help="Episode description.")
    parser.add_argument("--intro", type=Path, required=True, help="Introduction media file.")
    parser.add_argument("--interview", type=Path, required=True, help="Interview media file (same type as --intro).")
    parser.add_argument("--photo", type=Path, required=True, help="Episode photo.")
    parser.add_argument("--job-id", help="Job identifier (defaults to a fresh UUID).")
    parser.add_argument("-o", "--output", type=Path, help="Download the produced media to this file.")
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        help="Optional path to a YAML config (defaults to var/settings/client.yaml).",
    )
    parser.add_argument("--server-url", help="Override server_url from the config.")
    parser.add_argument("--log-level", default="INFO", help="Python logging level (DEBUG, INFO, WARNING, ...).")
    parser.add_argument("--log-file", type=Path, help="Optional log file path (defaults to var/logs/client.log).")
    return parser


def print_event(event: ClientEvent) -> None:
    print(json.dumps(event.to_dict(), ensure_ascii=False), flush=True)


def main(argv: Sequence[str] | None = None, client_factory=ApiClient.from_config) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    configure_logging(args.log_level)
    log_path = attach_log_file(args.log_file or logs_path("client.log"))
    try:
        config, _, _ = load_client_config(args.config)
        if args.server_url:
            config.server_url = args.server_url.rstrip("/")
        job_id = args.job_id or str(uuid.uuid4())
        with client_factory(config) as client:
            client.channel.subscribe(ClientEvent, print_event)
            future = client.publish(
                args.title, args.description, args.intro, args.interview, args.photo, job_id=job_id
            )
            try:
                outcome = future.result()
            except KeyboardInterrupt:
                LOGGER.info("Interrupted, cancelling %s…", job_id)
                # close also stops a job that has not started polling yet
                client.close()
                future.result()
                return 130
            print(json.dumps(outcome.to_dict(), ensure_ascii=False), flush=True)
            if outcome.ok and args.output:
                client.download_media(outcome.media_uri, args.output)
            return EXIT_CODES[outcome.state]
    except PodcastClientError as exc:
        LOGGER.error("%s", exc)
        return 1
    finally:
        detach_log_file(log_path)


if __name__ == "__main__":
    raise SystemExit(main())
