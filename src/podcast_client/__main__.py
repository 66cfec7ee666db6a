"""Entry point for ``python -m podcast_client``."""

from __future__ import annotations

import sys

from podcast_client.cli import main

if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
