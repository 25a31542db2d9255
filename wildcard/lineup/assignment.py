"""Slot assignment: moving roster players into and out of starting slots.

Both operations run inside the caller's transaction. An assignment into an
occupied slot benches the occupant and starts the new player as one unit of
work: the eviction is flushed first so the (team, week, slot) unique
constraint never sees two claimants, and if anything fails the caller's
rollback undoes both writes.

Lock handling:
- A locked player cannot be moved in, moved out, or swapped out
- `override=True` bypasses locks for league administrators; every bypass is
  logged as an audit line and reported in the result
"""

import logging
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..database.models import LineupEntry
from ..database.models import Player
from ..database.models import RosterPlayer
from ..exceptions import ConflictError
from ..exceptions import ForbiddenError
from ..exceptions import InvalidArgumentError
from ..exceptions import NotFoundError
from .locks import LockPolicy
from .slots import eligible_positions
from .slots import is_eligible
from .slots import parse_slot

logger = logging.getLogger(__name__)


@dataclass
class AssignResult:
    player_name: str
    slot: str
    swapped_out_name: str | None = None
    override_used: bool = False


@dataclass
class BenchResult:
    player_name: str
    override_used: bool = False


def _resolve_roster_player(session: Session, team_id: str, roster_player_id: str) -> RosterPlayer:
    roster_player = session.query(RosterPlayer).filter_by(id=roster_player_id, team_id=team_id).first()
    if roster_player is None:
        raise NotFoundError("Player not found on this team roster")
    return roster_player


def _lineup_entry(session: Session, roster_player_id: str, week: int) -> LineupEntry | None:
    return (
        session.query(LineupEntry)
        .filter_by(roster_player_id=roster_player_id, week=week)
        .with_for_update()
        .first()
    )


def _check_player_lock(policy: LockPolicy, player: Player, week: int, override: bool) -> bool:
    """Raise if the player is locked; return True when an override was needed."""
    status = policy.is_locked(player.nfl_team, week)
    if not status.locked:
        return False
    if not override:
        raise ForbiddenError(f"Cannot modify lineup: {status.reason}")
    logger.warning(f"Lock override: moved {player.display_name} ({player.nfl_team}) in week {week} ({status.reason})")
    return True


def _flush(session: Session, slot: str, week: int) -> None:
    try:
        session.flush()
    except IntegrityError as e:
        logger.warning(f"Concurrent lineup change on {slot} slot in week {week}: {e}")
        raise ConflictError(f"{slot} slot was changed by another request, please retry") from e


def assign_slot(
    session: Session,
    team_id: str,
    roster_player_id: str,
    week: int,
    slot: str,
    override: bool = False,
    lock_policy: LockPolicy | None = None,
) -> AssignResult:
    """Start a roster player in a slot, benching the current occupant.

    Assigning a player to the slot they already hold succeeds without
    changes.

    Raises:
        NotFoundError: the roster player is not on this team
        ForbiddenError: the player or the occupant is locked (without override)
        InvalidArgumentError: unknown slot or ineligible position
        ConflictError: a concurrent assignment claimed the slot first
    """
    policy = lock_policy or LockPolicy.for_league(session)
    roster_player = _resolve_roster_player(session, team_id, roster_player_id)
    player = roster_player.player

    override_used = _check_player_lock(policy, player, week, override)

    target = parse_slot(slot)
    if not is_eligible(player.position, target):
        eligible = ", ".join(eligible_positions(target))
        raise InvalidArgumentError(f"{player.position} cannot be placed in {target.value} slot. Eligible: {eligible}")

    entry = _lineup_entry(session, roster_player.id, week)
    if entry is not None and entry.slot == target.value:
        return AssignResult(player_name=player.display_name, slot=target.value, override_used=override_used)

    occupant = (
        session.query(LineupEntry)
        .filter_by(team_id=roster_player.team_id, week=week, slot=target.value)
        .with_for_update()
        .first()
    )

    swapped_out_name = None
    if occupant is not None:
        occupant_player = occupant.roster_player.player
        status = policy.is_locked(occupant_player.nfl_team, week)
        if status.locked:
            if not override:
                raise ForbiddenError(f"Cannot swap: {occupant_player.display_name} is locked ({status.reason})")
            logger.warning(
                f"Lock override: swapped out {occupant_player.display_name} ({occupant_player.nfl_team}) "
                f"in week {week} ({status.reason})"
            )
            override_used = True

        occupant.slot = None
        occupant.is_starter = False
        swapped_out_name = occupant_player.display_name
        _flush(session, target.value, week)

    if entry is None:
        entry = LineupEntry(roster_player_id=roster_player.id, team_id=roster_player.team_id, week=week)
        session.add(entry)
    entry.slot = target.value
    entry.is_starter = True
    _flush(session, target.value, week)

    if swapped_out_name:
        logger.info(f"Week {week}: {player.display_name} -> {target.value}, {swapped_out_name} -> bench")
    else:
        logger.info(f"Week {week}: {player.display_name} -> {target.value}")

    return AssignResult(
        player_name=player.display_name,
        slot=target.value,
        swapped_out_name=swapped_out_name,
        override_used=override_used,
    )


def bench_player(
    session: Session,
    team_id: str,
    roster_player_id: str,
    week: int,
    override: bool = False,
    lock_policy: LockPolicy | None = None,
) -> BenchResult:
    """Move a roster player to the bench, creating the week's entry if needed.

    Raises:
        NotFoundError: the roster player is not on this team
        ForbiddenError: the player is locked (without override)
    """
    policy = lock_policy or LockPolicy.for_league(session)
    roster_player = _resolve_roster_player(session, team_id, roster_player_id)
    player = roster_player.player

    override_used = _check_player_lock(policy, player, week, override)

    entry = _lineup_entry(session, roster_player.id, week)
    if entry is None:
        entry = LineupEntry(roster_player_id=roster_player.id, team_id=roster_player.team_id, week=week)
        session.add(entry)
    entry.slot = None
    entry.is_starter = False
    session.flush()

    logger.info(f"Week {week}: {player.display_name} -> bench")
    return BenchResult(player_name=player.display_name, override_used=override_used)
