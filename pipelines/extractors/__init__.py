"""
Data Extractors

Components for fetching data from upstream sources.
"""

from pipelines.extractors.base import BaseExtractor
from pipelines.extractors.espn import ESPNExtractor

__all__ = [
    "BaseExtractor",
    "ESPNExtractor",
]
