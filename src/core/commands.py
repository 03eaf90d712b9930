"""
Game Commands

Tagged command variants accepted by the coordinator, one class per
(game type, action) pair, each with a validated payload shape.
"""

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, Optional, Tuple, Type

from src.core.errors import InvalidArgumentError
from src.core.game_phases import GameType


@dataclass(frozen=True)
class GameCommand:
    """Base class for all game commands."""

    game_type: ClassVar[GameType]
    action: ClassVar[str]
    read_only: ClassVar[bool] = False

    @classmethod
    def from_payload(cls, payload: Dict[str, Any], validator) -> 'GameCommand':
        return cls()


# War

@dataclass(frozen=True)
class StartWarCommand(GameCommand):
    game_type: ClassVar[GameType] = GameType.WAR
    action: ClassVar[str] = 'start'

    players: Tuple[str, ...] = ()

    @classmethod
    def from_payload(cls, payload, validator):
        if 'players' not in payload:
            raise InvalidArgumentError("War game requires exactly 2 players")
        return cls(players=tuple(validator.validate_participant_list(payload['players'])))


@dataclass(frozen=True)
class PlayWarTurnCommand(GameCommand):
    game_type: ClassVar[GameType] = GameType.WAR
    action: ClassVar[str] = 'play'


@dataclass(frozen=True)
class WarStateCommand(GameCommand):
    game_type: ClassVar[GameType] = GameType.WAR
    action: ClassVar[str] = 'state'
    read_only: ClassVar[bool] = True


@dataclass(frozen=True)
class EndWarCommand(GameCommand):
    game_type: ClassVar[GameType] = GameType.WAR
    action: ClassVar[str] = 'end'


# Eretz-Ir

@dataclass(frozen=True)
class StartWordGameCommand(GameCommand):
    game_type: ClassVar[GameType] = GameType.ERATZ_IR
    action: ClassVar[str] = 'start'


@dataclass(frozen=True)
class StartRoundCommand(GameCommand):
    game_type: ClassVar[GameType] = GameType.ERATZ_IR
    action: ClassVar[str] = 'startRound'

    categories: Optional[Tuple[str, ...]] = None

    @classmethod
    def from_payload(cls, payload, validator):
        categories = validator.validate_categories(payload.get('categories'))
        return cls(categories=tuple(categories) if categories else None)


@dataclass(frozen=True)
class SaveAnswersCommand(GameCommand):
    game_type: ClassVar[GameType] = GameType.ERATZ_IR
    action: ClassVar[str] = 'saveAnswers'

    answers: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload, validator):
        if 'answers' not in payload:
            raise InvalidArgumentError("answers are required")
        return cls(answers=validator.validate_answers(payload['answers']))


@dataclass(frozen=True)
class StartCountdownCommand(GameCommand):
    game_type: ClassVar[GameType] = GameType.ERATZ_IR
    action: ClassVar[str] = 'startCountdown'


@dataclass(frozen=True)
class FinishRoundCommand(GameCommand):
    game_type: ClassVar[GameType] = GameType.ERATZ_IR
    action: ClassVar[str] = 'finishRound'


@dataclass(frozen=True)
class ResetWordGameCommand(GameCommand):
    game_type: ClassVar[GameType] = GameType.ERATZ_IR
    action: ClassVar[str] = 'resetGame'


@dataclass(frozen=True)
class WordGameStateCommand(GameCommand):
    game_type: ClassVar[GameType] = GameType.ERATZ_IR
    action: ClassVar[str] = 'state'
    read_only: ClassVar[bool] = True


COMMAND_TYPES: Dict[Tuple[GameType, str], Type[GameCommand]] = {
    (command.game_type, command.action): command
    for command in (
        StartWarCommand,
        PlayWarTurnCommand,
        WarStateCommand,
        EndWarCommand,
        StartWordGameCommand,
        StartRoundCommand,
        SaveAnswersCommand,
        StartCountdownCommand,
        FinishRoundCommand,
        ResetWordGameCommand,
        WordGameStateCommand,
    )
}


def supported_actions(game_type: GameType) -> List[str]:
    return [action for (gt, action) in COMMAND_TYPES if gt == game_type]


def parse_command(game_type: Any, action: Any, payload: Any,
                  validator) -> GameCommand:
    """
    Build the command variant for a (game type, action) pair.

    Raises:
        InvalidArgumentError: For unknown game types or actions, or a payload
            that does not match the variant's shape
    """
    try:
        game = GameType(game_type)
    except ValueError:
        raise InvalidArgumentError(f"Unsupported game type: {game_type}")

    if not isinstance(action, str):
        raise InvalidArgumentError("action must be a string")

    command_type = COMMAND_TYPES.get((game, action))
    if command_type is None:
        raise InvalidArgumentError(
            f"Unsupported action: {action}",
            {"game_type": game.value, "supported_actions": supported_actions(game)}
        )

    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise InvalidArgumentError("payload must be an object")

    return command_type.from_payload(payload, validator)
