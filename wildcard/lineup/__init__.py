"""Lineups: slots, lock policy, slot assignment, lineup views and stat lines."""

from .assignment import AssignResult, BenchResult, assign_slot, bench_player
from .locks import LockPolicy, LockStatus, evaluate_lock
from .slots import SLOT_ELIGIBILITY, Slot, parse_slot
from .statline import generate_stat_line
from .views import GameInfo, LineupPlayer, LineupView, get_team_lineup

__all__ = [
    "SLOT_ELIGIBILITY",
    "AssignResult",
    "BenchResult",
    "GameInfo",
    "LineupPlayer",
    "LineupView",
    "LockPolicy",
    "LockStatus",
    "Slot",
    "assign_slot",
    "bench_player",
    "evaluate_lock",
    "generate_stat_line",
    "get_team_lineup",
    "parse_slot",
]
