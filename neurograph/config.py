"""Environment-driven defaults for neurograph."""

from __future__ import annotations

import logging
import os

import numpy as np

SEED_ENV = "NEUROGRAPH_SEED"
LOG_LEVEL_ENV = "NEUROGRAPH_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "WARNING"


def default_seed() -> int | None:
    """Return the seed from ``NEUROGRAPH_SEED`` or ``None`` when unset."""

    raw = os.environ.get(SEED_ENV, "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{SEED_ENV} must be an integer, got {raw!r}") from exc


def default_rng() -> np.random.Generator:
    """Generator used for weight initialisation when none is injected."""

    return np.random.default_rng(default_seed())


def log_level() -> str:
    return os.environ.get(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL).strip().upper() or DEFAULT_LOG_LEVEL


def configure_logging(level: str | int | None = None) -> None:
    """Configure root logging for command line use."""

    logging.basicConfig(
        level=level if level is not None else log_level(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


__all__ = ["configure_logging", "default_rng", "default_seed", "log_level"]
