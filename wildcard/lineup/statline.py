"""Compact box-score summaries for lineup and matchup views.

    QB   "22/31 287y 2TD 1INT • Rush 4-18"
    RB   "18-96 1TD • Rec 3-22"
    WR   "7-112 1TD"
    K    "FG 3/4 (52L) • XP 2/2"
    DEF  "PA 13 • Yds 287 • Sack 4 • INT 2"

An empty string means nothing to report yet.
"""

from typing import Any

from ..scoring.engine import stat_value

SEPARATOR = " • "

DEFENSE_EXTRAS = (
    ("sacks", "Sack"),
    ("interceptions", "INT"),
    ("fumble_recoveries", "FR"),
    ("defense_tds", "TD"),
    ("return_tds", "Ret TD"),
    ("safeties", "Safety"),
)

DEFENSE_FIELDS = ("points_allowed", "yards_allowed", "blocked_kicks") + tuple(f for f, _ in DEFENSE_EXTRAS)


def _td_suffix(tds: int) -> str:
    return f" {tds}TD" if tds > 0 else ""


def _rushing(stats: Any, prefix: str = "") -> str | None:
    yards = stat_value(stats, "rush_yards")
    tds = stat_value(stats, "rush_tds")
    if yards > 0 or tds > 0:
        return f"{prefix}{stat_value(stats, 'rush_attempts')}-{yards}{_td_suffix(tds)}"
    return None


def _receiving(stats: Any, prefix: str = "") -> str | None:
    receptions = stat_value(stats, "receptions")
    yards = stat_value(stats, "rec_yards")
    if receptions > 0 or yards > 0:
        return f"{prefix}{receptions}-{yards}{_td_suffix(stat_value(stats, 'rec_tds'))}"
    return None


def _passing(stats: Any) -> str | None:
    yards = stat_value(stats, "pass_yards")
    tds = stat_value(stats, "pass_tds")
    if yards <= 0 and tds <= 0:
        return None
    line = f"{stat_value(stats, 'pass_completions')}/{stat_value(stats, 'pass_attempts')} {yards}y{_td_suffix(tds)}"
    interceptions = stat_value(stats, "pass_interceptions")
    if interceptions > 0:
        line += f" {interceptions}INT"
    return line


def _kicking(stats: Any) -> list[str]:
    parts = []
    fg_made = sum(
        stat_value(stats, name) for name in ("fg_made_0_39", "fg_made_40_49", "fg_made_50_54", "fg_made_55_plus")
    )
    fg_total = fg_made + stat_value(stats, "fg_missed")
    if fg_total > 0:
        line = f"FG {fg_made}/{fg_total}"
        fg_long = stat_value(stats, "fg_long")
        if fg_long > 0:
            line += f" ({fg_long}L)"
        parts.append(line)

    xp_made = stat_value(stats, "xp_made")
    xp_total = xp_made + stat_value(stats, "xp_missed")
    if xp_total > 0:
        parts.append(f"XP {xp_made}/{xp_total}")
    return parts


def _defense(stats: Any) -> list[str]:
    if not any(stat_value(stats, name) for name in DEFENSE_FIELDS):
        return []
    parts = [f"PA {stat_value(stats, 'points_allowed')}", f"Yds {stat_value(stats, 'yards_allowed')}"]
    for name, label in DEFENSE_EXTRAS:
        value = stat_value(stats, name)
        if value > 0:
            parts.append(f"{label} {value}")
    return parts


def generate_stat_line(position: str, stats: Any = None, defense_stats: Any = None) -> str:
    """Build the stat line for a player or defense.

    Args:
        position: QB, RB, WR, TE, K or DEF
        stats: Player box score (ignored for DEF)
        defense_stats: Team defense box score (DEF only)
    """
    if position == "DEF":
        return SEPARATOR.join(_defense(defense_stats)) if defense_stats is not None else ""

    if stats is None:
        return ""

    if position == "QB":
        parts = [_passing(stats), _rushing(stats, prefix="Rush ")]
    elif position == "RB":
        parts = [_rushing(stats), _receiving(stats, prefix="Rec ")]
    elif position in ("WR", "TE"):
        parts = [_receiving(stats), _rushing(stats, prefix="Rush ")]
    elif position == "K":
        parts = _kicking(stats)
    else:
        parts = []

    return SEPARATOR.join(p for p in parts if p)
