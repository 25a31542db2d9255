"""Starting lineup slots and the positions eligible for each."""

from enum import Enum

from ..exceptions import InvalidArgumentError


class Slot(str, Enum):
    """The 8 weekly starting slots, in display order."""

    QB = "QB"
    RB = "RB"
    WRTE = "WRTE"
    FLEX1 = "FLEX1"
    FLEX2 = "FLEX2"
    FLEX3 = "FLEX3"
    K = "K"
    DEF = "DEF"


SLOT_ELIGIBILITY: dict[Slot, tuple[str, ...]] = {
    Slot.QB: ("QB",),
    Slot.RB: ("RB",),
    Slot.WRTE: ("WR", "TE"),
    Slot.FLEX1: ("RB", "WR", "TE"),
    Slot.FLEX2: ("RB", "WR", "TE"),
    Slot.FLEX3: ("RB", "WR", "TE"),
    Slot.K: ("K",),
    Slot.DEF: ("DEF",),
}

STARTER_SLOTS = tuple(Slot)


def parse_slot(value: str | Slot) -> Slot:
    """Return the Slot for a name such as "WRTE".

    Raises:
        InvalidArgumentError: the name is not one of the 8 slots
    """
    try:
        return Slot(value)
    except ValueError:
        valid = ", ".join(s.value for s in STARTER_SLOTS)
        raise InvalidArgumentError(f"Invalid slot. Must be one of: {valid}") from None


def eligible_positions(slot: Slot) -> tuple[str, ...]:
    return SLOT_ELIGIBILITY[slot]


def is_eligible(position: str, slot: Slot) -> bool:
    return position in SLOT_ELIGIBILITY[slot]
