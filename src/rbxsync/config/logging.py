"""Shared logging helpers for rbxsync."""

from __future__ import annotations

import logging


def configure_logging(*, level: int = logging.INFO, force: bool = False) -> None:
    """Initialise the root logger once for CLI use.

    ``force=True`` reconfigures an already configured root logger, which the CLI
    needs when ``-v`` is passed after a default configuration was applied.
    """

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
