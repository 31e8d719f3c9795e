"""Application state container."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .settings import ReportSettings


@dataclass
class AppState:
    """Container for application-wide state and dependencies.

    Passed explicitly to every command so no module reads an ambient
    client or "active market".
    """

    settings: ReportSettings
    logger: logging.Logger
