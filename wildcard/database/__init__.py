"""Database package initialization."""

from .connection import SessionLocal, engine, get_db, get_session, get_session_context
from .models import (
    Base,
    Conference,
    Game,
    GameEvent,
    LeagueSettings,
    LineupEntry,
    Player,
    PlayerGameStats,
    PlayerScore,
    RosterPlayer,
    ScoringRuleSet,
    Team,
    TeamDefenseGameStats,
    TeamScore,
)

__all__ = [
    "Base",
    "Conference",
    "Game",
    "GameEvent",
    "LeagueSettings",
    "LineupEntry",
    "Player",
    "PlayerGameStats",
    "PlayerScore",
    "RosterPlayer",
    "ScoringRuleSet",
    "SessionLocal",
    "Team",
    "TeamDefenseGameStats",
    "TeamScore",
    "engine",
    "get_db",
    "get_session",
    "get_session_context",
]
