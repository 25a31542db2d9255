"""Ingest of normalized NFL data into the league database."""

from .manual import (
    IngestData,
    IngestDefenseGameStats,
    IngestGame,
    IngestGameEvent,
    IngestPlayerGameStats,
    IngestSummary,
    add_manual_bonus,
    process_manual_ingest,
)

__all__ = [
    "IngestData",
    "IngestDefenseGameStats",
    "IngestGame",
    "IngestGameEvent",
    "IngestPlayerGameStats",
    "IngestSummary",
    "add_manual_bonus",
    "process_manual_ingest",
]
