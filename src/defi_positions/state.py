"""Application state container."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .settings import TrackerSettings


@dataclass
class AppState:
    """Container for application-wide state and dependencies.

    Handed from the CLI callback to each command to avoid global state.
    """

    settings: TrackerSettings
    logger: logging.Logger
