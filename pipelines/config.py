"""
Pipeline Configuration

Frozen per-pipeline metadata: naming for logs, the scoreboard window and
how many upstream requests may be in flight at once.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class PipelineConfig:
    """
    Attributes:
        name: Log name (e.g., "big_games")
        display_name: Human-readable name (e.g., "Big Games")
        description: One line on what the pipeline produces
        days_ahead: Scoreboard window override (None uses settings.days_ahead)
        max_in_flight: Cap on concurrent fetches during fan-out
    """

    name: str
    display_name: str
    description: str
    days_ahead: Optional[int] = None
    max_in_flight: int = 16

    def __post_init__(self):
        if not self.name:
            raise ValueError("Pipeline name is required")
        if self.days_ahead is not None and self.days_ahead < 1:
            raise ValueError("days_ahead must be positive")
        if self.max_in_flight < 1:
            raise ValueError("max_in_flight must be at least 1")
