"""Custom exceptions for the Wildcard league core.

Every error raised by the service layer is one of these. They describe
conditions the caller can act on (a missing roster player, a locked lineup,
a bad slot name, missing scoring prerequisites); none of them signal an
internal engine failure. The API layer maps each class to an HTTP status and
the CLI maps them to a non-zero exit code.

Usage Examples:
- raise NotFoundError("Player not found on this team roster")
- raise ForbiddenError("Cannot modify lineup: Game has started")
- raise PreconditionFailedError("Cannot compute scores", details=[...])
"""


class WildcardError(Exception):
    """Base exception for Wildcard league errors."""

    status_code = 500


class NotFoundError(WildcardError):
    """Raised when a referenced roster player, team, player or game is absent."""

    status_code = 404


class ForbiddenError(WildcardError):
    """Raised when a lineup change is attempted on a locked player.

    Locks come from the league-wide lock time or from the player's NFL game
    having kicked off. Callers holding the administrative override can bypass
    the check explicitly.
    """

    status_code = 403


class InvalidArgumentError(WildcardError):
    """Raised for unrecognized slots, position/slot mismatches and empty payloads."""

    status_code = 400


class ConflictError(WildcardError):
    """Raised when a uniquely named record already exists."""

    status_code = 409


class PreconditionFailedError(WildcardError):
    """Raised when scores cannot be computed for a week.

    Carries the full list of missing prerequisites, not just the first one
    found, so an operator can fix everything in one pass.
    """

    status_code = 412

    def __init__(self, message: str, details: list[str] | None = None):
        super().__init__(message)
        self.message = message
        self.details = list(details or [])
