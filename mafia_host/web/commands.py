"""
Inbound command models.

Socket payloads are untrusted: each event name maps to one pydantic model,
and anything that does not fit is rejected here with ``MalformedCommand``
before it can reach the session.
"""

from typing import Annotated, Any, Dict, Optional, Union, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, ValidationInfo, field_validator

from ..core.exceptions import MalformedCommand


class Command(BaseModel):
    model_config = ConfigDict(extra='forbid', populate_by_name=True, frozen=True)


# Lobby and role reveal

class JoinGame(Command):
    type: Literal["joinGame"] = "joinGame"
    name: str
    token: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _clean_name(cls, value: str, info: ValidationInfo) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Name cannot be empty")
        limit = (info.context or {}).get("max_name_length")
        if limit and len(value) > limit:
            raise ValueError(f"Name must be at most {limit} characters")
        return value


class StartGame(Command):
    type: Literal["startGame"] = "startGame"


class PlayerViewedRole(Command):
    type: Literal["playerViewedRole"] = "playerViewedRole"


class PlayerReady(Command):
    type: Literal["playerReady"] = "playerReady"


# Night

class StartNight(Command):
    type: Literal["godStartNight"] = "godStartNight"


class WakeMafia(Command):
    type: Literal["godWakeMafia"] = "godWakeMafia"


class MarkKill(Command):
    type: Literal["godMarkKill"] = "godMarkKill"
    player_id: str = Field(alias="playerId", min_length=1)


class WakeDoctor(Command):
    type: Literal["godWakeDoctor"] = "godWakeDoctor"


class MarkSave(Command):
    type: Literal["godMarkSave"] = "godMarkSave"
    player_id: str = Field(alias="playerId", min_length=1)


class WakeDetective(Command):
    type: Literal["godWakeDetective"] = "godWakeDetective"


class Investigate(Command):
    type: Literal["godInvestigate"] = "godInvestigate"
    player_id: str = Field(alias="playerId", min_length=1)


class StartDay(Command):
    type: Literal["godStartDay"] = "godStartDay"


# Voting

class StartTentativeVoting(Command):
    type: Literal["godStartTentativeVoting"] = "godStartTentativeVoting"


class StartFinalVoting(Command):
    type: Literal["godStartFinalVoting"] = "godStartFinalVoting"
    duration: Optional[int] = Field(None, gt=0, le=3600)


class StartVotingTimer(Command):
    type: Literal["godStartVotingTimer"] = "godStartVotingTimer"
    duration: Optional[int] = Field(None, gt=0, le=3600)


class ExtendTimer(Command):
    type: Literal["godExtendTimer"] = "godExtendTimer"
    seconds: Optional[int] = Field(None, gt=0, le=3600)


class EndVoting(Command):
    type: Literal["godEndVoting"] = "godEndVoting"


class PlayerVote(Command):
    type: Literal["playerVote"] = "playerVote"
    target_id: str = Field(alias="targetId", min_length=1)


# Session

class TransferHost(Command):
    type: Literal["transferHost"] = "transferHost"
    player_id: str = Field(alias="playerId", min_length=1)


class ResetGame(Command):
    type: Literal["resetGame"] = "resetGame"


class UpdateGameSettings(Command):
    # Unknown settings are ignored, not rejected
    model_config = ConfigDict(extra='ignore', populate_by_name=True, frozen=True)

    type: Literal["updateGameSettings"] = "updateGameSettings"
    allow_spectator_view: Optional[bool] = Field(None, alias="allowSpectatorView")


_COMMAND_MODELS = (
    JoinGame, StartGame, PlayerViewedRole, PlayerReady,
    StartNight, WakeMafia, MarkKill, WakeDoctor, MarkSave, WakeDetective, Investigate, StartDay,
    StartTentativeVoting, StartFinalVoting, StartVotingTimer, ExtendTimer, EndVoting, PlayerVote,
    TransferHost, ResetGame, UpdateGameSettings,
)

AnyCommand = Annotated[Union[_COMMAND_MODELS], Field(discriminator="type")]

_adapter = TypeAdapter(AnyCommand)

COMMAND_TYPES = frozenset(model.model_fields["type"].default for model in _COMMAND_MODELS)

# Events whose payload may be sent as a bare value instead of an object
_SCALAR_FIELDS: Dict[str, str] = {
    "joinGame": "name",
    "godMarkKill": "playerId",
    "godMarkSave": "playerId",
    "godInvestigate": "playerId",
    "playerVote": "targetId",
    "transferHost": "playerId",
    "godStartFinalVoting": "duration",
    "godStartVotingTimer": "duration",
    "godExtendTimer": "seconds",
}


def parse_command(event: str, payload: Any = None, max_name_length: Optional[int] = None) -> Command:
    """
    Validate a raw socket event into a command model.

    Raises:
        MalformedCommand: unknown event, or a payload of the wrong shape
    """
    if event not in COMMAND_TYPES:
        raise MalformedCommand(f"Unknown command: {event}")

    if payload is None:
        data: Dict[str, Any] = {}
    elif isinstance(payload, dict):
        data = dict(payload)
    elif isinstance(payload, (str, int)) and event in _SCALAR_FIELDS:
        data = {_SCALAR_FIELDS[event]: payload}
    else:
        raise MalformedCommand(f"Invalid payload for {event}")

    data["type"] = event
    try:
        return _adapter.validate_python(data, context={"max_name_length": max_name_length})
    except ValidationError as e:
        first = e.errors()[0]
        raise MalformedCommand(f"Invalid {event}: {first['msg']}") from e
