"""
Exceptions for rejected commands.

Every rejection is recovered locally: the command is dropped, state is left
as it was, and only the issuing connection is told why.
"""


class ErrorKind:
    AUTHORIZATION = "authorization"
    PHASE_VIOLATION = "phase_violation"
    TARGET_VIOLATION = "target_violation"
    ROLE_UNAVAILABLE = "role_unavailable"
    IDENTITY_CONFLICT = "identity_conflict"
    CAPACITY = "capacity"
    MALFORMED = "malformed"


class GameError(Exception):
    """Raised when a command cannot be applied to the current session."""

    kind = ErrorKind.PHASE_VIOLATION
    default_message = "Command rejected"

    def __init__(self, message: str = ""):
        self.message = message or self.default_message
        super().__init__(self.message)


# Authorization

class NotHost(GameError):
    kind = ErrorKind.AUTHORIZATION
    default_message = "Only the host can do that"


class HostOnlyForbidden(GameError):
    kind = ErrorKind.AUTHORIZATION
    default_message = "The host does not play"


class UnknownPlayer(GameError):
    kind = ErrorKind.AUTHORIZATION
    default_message = "Join the game first"


# Phase violations

class WrongPhase(GameError):
    kind = ErrorKind.PHASE_VIOLATION
    default_message = "Not allowed in the current phase"


class GamePaused(GameError):
    kind = ErrorKind.PHASE_VIOLATION
    default_message = "Game is paused until the host reconnects"


class RoleNotViewed(GameError):
    kind = ErrorKind.PHASE_VIOLATION
    default_message = "Please reveal your role first before clicking ready"


class NoActiveTimer(GameError):
    kind = ErrorKind.PHASE_VIOLATION
    default_message = "No timer is running"


# Target violations

class InvalidTarget(GameError):
    kind = ErrorKind.TARGET_VIOLATION
    default_message = "Invalid target"


class AlreadySaved(GameError):
    kind = ErrorKind.TARGET_VIOLATION
    default_message = "Doctor cannot save this person again"


class InvalidVote(GameError):
    kind = ErrorKind.TARGET_VIOLATION
    default_message = "You cannot vote for that player"


# Role availability

class DoctorUnavailable(GameError):
    kind = ErrorKind.ROLE_UNAVAILABLE
    default_message = "Doctor has been eliminated and cannot save anyone"


class DetectiveUnavailable(GameError):
    kind = ErrorKind.ROLE_UNAVAILABLE
    default_message = "Detective has been eliminated and cannot investigate anyone"


# Identity conflicts

class NameTaken(GameError):
    kind = ErrorKind.IDENTITY_CONFLICT
    default_message = "Player name already taken"


class GameInProgress(GameError):
    kind = ErrorKind.IDENTITY_CONFLICT
    default_message = "Game already in progress"


class AlreadyJoined(GameError):
    kind = ErrorKind.IDENTITY_CONFLICT
    default_message = "This connection has already joined under another name"


# Capacity

class NotEnoughPlayers(GameError):
    kind = ErrorKind.CAPACITY

    def __init__(self, minimum: int = 5):
        super().__init__(
            f"Need at least {minimum} people total (1 host + {minimum - 1} players) to start"
        )


# Boundary

class MalformedCommand(GameError):
    kind = ErrorKind.MALFORMED
    default_message = "Malformed command"
