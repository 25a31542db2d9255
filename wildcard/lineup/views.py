"""Read-only lineup view: a team's slots and bench for a week.

Each player carries its lock status, its NFL game (opponent, kickoff,
score) when one is scheduled, and its stat line once stats are in.
"""

from dataclasses import dataclass
from dataclasses import field
from datetime import datetime
from typing import Any

from sqlalchemy.orm import Session

from ..database.models import Game
from ..database.models import LineupEntry
from ..database.models import Player
from ..database.models import PlayerGameStats
from ..database.models import RosterPlayer
from ..database.models import Team
from ..database.models import TeamDefenseGameStats
from ..exceptions import NotFoundError
from ..league import as_utc
from .locks import LockPolicy
from .locks import find_game
from .slots import STARTER_SLOTS
from .statline import generate_stat_line


@dataclass
class GameInfo:
    game_id: str
    opponent: str  # "vs DAL" at home, "@ DAL" away
    kickoff_time: datetime
    status: str
    home_team: str
    away_team: str
    home_score: int | None = None
    away_score: int | None = None
    spread_home: float | None = None
    total: float | None = None


@dataclass
class LineupPlayer:
    roster_player_id: str
    player_id: str
    display_name: str
    position: str
    nfl_team: str
    slot: str | None
    is_locked: bool
    lock_reason: str | None = None
    game: GameInfo | None = None
    stat_line: str = ""


@dataclass
class LineupView:
    team_id: str
    team_name: str
    conference_name: str | None
    week: int
    slots: dict[str, LineupPlayer | None] = field(default_factory=dict)
    bench: list[LineupPlayer] = field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        return all(player is not None for player in self.slots.values())


def game_info(game: Game | None, nfl_team: str) -> GameInfo | None:
    if game is None:
        return None
    is_home = game.home_team_abbr == nfl_team
    return GameInfo(
        game_id=game.id,
        opponent=f"vs {game.away_team_abbr}" if is_home else f"@ {game.home_team_abbr}",
        kickoff_time=as_utc(game.kickoff_time),
        status=game.status,
        home_team=game.home_team_abbr,
        away_team=game.away_team_abbr,
        home_score=game.home_score,
        away_score=game.away_score,
        spread_home=_as_float(game.spread_home),
        total=_as_float(game.total),
    )


def _as_float(value: Any) -> float | None:
    return None if value is None else float(value)


def _stat_line(session: Session, player: Player, game: Game | None) -> str:
    if game is None:
        return ""
    if player.position == "DEF":
        defense = (
            session.query(TeamDefenseGameStats).filter_by(defense_team_abbr=player.nfl_team, game_id=game.id).first()
        )
        return generate_stat_line(player.position, defense_stats=defense)
    stats = session.query(PlayerGameStats).filter_by(player_id=player.id, game_id=game.id).first()
    return generate_stat_line(player.position, stats=stats)


def get_team_lineup(
    session: Session,
    team_id: str,
    week: int,
    lock_policy: LockPolicy | None = None,
) -> LineupView:
    """Build the lineup view for one team and week.

    Raises:
        NotFoundError: the team does not exist
    """
    team = session.get(Team, team_id)
    if team is None:
        raise NotFoundError(f"Team {team_id} not found")

    policy = lock_policy or LockPolicy.for_league(session)

    rows = (
        session.query(RosterPlayer, Player, LineupEntry)
        .join(Player, RosterPlayer.player_id == Player.id)
        .outerjoin(
            LineupEntry,
            (LineupEntry.roster_player_id == RosterPlayer.id) & (LineupEntry.week == week),
        )
        .filter(RosterPlayer.team_id == team_id)
        .order_by(Player.position, Player.display_name)
        .all()
    )

    view = LineupView(
        team_id=team.id,
        team_name=team.name,
        conference_name=team.conference.name if team.conference else None,
        week=week,
        slots={slot.value: None for slot in STARTER_SLOTS},
    )

    for roster_player, player, entry in rows:
        status = policy.is_locked(player.nfl_team, week)
        game = None if player.nfl_team in policy.unlocked_markers else find_game(session, player.nfl_team, week)
        slot = entry.slot if entry is not None else None

        lineup_player = LineupPlayer(
            roster_player_id=roster_player.id,
            player_id=player.id,
            display_name=player.display_name,
            position=player.position,
            nfl_team=player.nfl_team,
            slot=slot,
            is_locked=status.locked,
            lock_reason=status.reason,
            game=game_info(game, player.nfl_team),
            stat_line=_stat_line(session, player, game),
        )

        if slot in view.slots:
            view.slots[slot] = lineup_player
        else:
            view.bench.append(lineup_player)

    return view
