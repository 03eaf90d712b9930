"""
Game Coordinator - Serializes commands per session and broadcasts the result.

This service handles:
- Membership changes (join, leave, disconnect) and their room updates
- Dispatching game commands to the card and word engines
- Round countdowns and their automatic resolution
- Broadcasting the full snapshot after every applied command

Every operation on a session runs under that session's lock, and the
broadcast happens before the lock is released, so clients receive
snapshots in the order commands were applied.
"""

import logging
from typing import Any, Dict, List, Optional

from src.config.game_settings import GameSettings
from src.core.commands import (
    EndWarCommand,
    FinishRoundCommand,
    GameCommand,
    PlayWarTurnCommand,
    ResetWordGameCommand,
    SaveAnswersCommand,
    StartCountdownCommand,
    StartRoundCommand,
    StartWarCommand,
    StartWordGameCommand,
    WarStateCommand,
    WordGameStateCommand,
)
from src.core.errors import InvalidArgumentError, InvalidStateError
from src.core.game_phases import GameType

logger = logging.getLogger(__name__)


class GameCoordinator:
    """Single entry point for everything that changes a session."""

    def __init__(self, session_directory, identity_service, card_game_engine, word_round_engine,
                 round_timer_service, broadcast_service, concurrency_control,
                 game_settings: Optional[GameSettings] = None):
        self.session_directory = session_directory
        self.identity_service = identity_service
        self.card_game_engine = card_game_engine
        self.word_round_engine = word_round_engine
        self.round_timer_service = round_timer_service
        self.broadcast_service = broadcast_service
        self.concurrency_control = concurrency_control
        self.game_settings = game_settings or GameSettings()

        self._handlers = {
            StartWarCommand: self._start_war,
            PlayWarTurnCommand: self._play_war_turn,
            WarStateCommand: self._no_op,
            EndWarCommand: self._end_war,
            StartWordGameCommand: self._start_word_game,
            StartRoundCommand: self._start_round,
            SaveAnswersCommand: self._save_answers,
            StartCountdownCommand: self._start_countdown,
            FinishRoundCommand: self._finish_round,
            ResetWordGameCommand: self._reset_word_game,
            WordGameStateCommand: self._no_op,
        }

    # Membership

    def join(self, session_id: str, participant_id: str) -> List[str]:
        """
        Add a participant to a session and broadcast the new membership.

        Raises:
            InvalidStateError: If the room is full
        """
        with self.concurrency_control.session_operation(session_id):
            participants = self.session_directory.join(session_id, participant_id)
            self._enter_room(session_id, participant_id)

            self.broadcast_service.broadcast_room_update(
                session_id, participants, f"{participant_id} joined the room"
            )
            self.broadcast_service.broadcast_game_state(
                session_id, GameType.ERATZ_IR, self.word_round_engine.get_state(session_id)
            )
            return participants

    def leave(self, session_id: str, participant_id: str) -> List[str]:
        """Remove a participant from a session and broadcast the new membership."""
        with self.concurrency_control.session_operation(session_id):
            was_member = self.session_directory.is_member(session_id, participant_id)
            participants = self.session_directory.leave(session_id, participant_id)
            self._exit_room(session_id, participant_id)

            if was_member:
                self.broadcast_service.broadcast_room_update(
                    session_id, participants, f"{participant_id} left the room"
                )
            return participants

    def disconnect(self, connection_id: str) -> List[str]:
        """
        Forget a dropped connection.

        The participant is purged from their sessions only when this was
        their last live connection. Game state is left untouched.

        Returns:
            Ids of the sessions the participant was removed from
        """
        participant_id = self.identity_service.unbind(connection_id)
        if participant_id is None:
            return []

        if self.identity_service.connections_for(participant_id):
            logger.debug(f"Participant {participant_id} still has live connections")
            return []

        affected = self.session_directory.purge(participant_id)
        for session_id in affected:
            with self.concurrency_control.session_operation(session_id):
                self.broadcast_service.broadcast_room_update(
                    session_id,
                    self.session_directory.list_participants(session_id),
                    f"{participant_id} disconnected"
                )
        return affected

    def list_participants(self, session_id: str, participant_id: str) -> List[str]:
        self._require_member(session_id, participant_id)
        return self.session_directory.list_participants(session_id)

    def _require_member(self, session_id: str, participant_id: str):
        if not self.session_directory.is_member(session_id, participant_id):
            raise InvalidStateError("not in room", {"room_id": session_id})

    def _enter_room(self, session_id: str, participant_id: str):
        for connection_id in self.identity_service.connections_for(participant_id):
            self.broadcast_service.add_connection_to_room(connection_id, session_id)

    def _exit_room(self, session_id: str, participant_id: str):
        for connection_id in self.identity_service.connections_for(participant_id):
            self.broadcast_service.remove_connection_from_room(connection_id, session_id)

    # Commands

    def execute(self, session_id: str, participant_id: str, command: GameCommand) -> Dict[str, Any]:
        """
        Apply a command to a session and broadcast the resulting snapshot.

        Returns:
            Dict with ``room_id``, ``game_type``, ``state`` and ``result``

        Raises:
            InvalidStateError: If the caller is not in the room, or the game forbids the action
            InvalidArgumentError: If the command does not fit the game
            NotFoundError: If the game does not exist
        """
        # Outsiders are turned away before a lock exists for the session
        self._require_member(session_id, participant_id)
        with self.concurrency_control.session_operation(session_id):
            self._require_member(session_id, participant_id)

            result = self._handlers[type(command)](session_id, participant_id, command)
            state = self._current_state(session_id, command.game_type, strict=command.read_only)

            if not command.read_only:
                self.broadcast_service.broadcast_game_state(session_id, command.game_type, state, result)

            return {
                "room_id": session_id,
                "game_type": command.game_type.value,
                "state": state,
                "result": result,
            }

    def get_room_state(self, session_id: str, participant_id: str) -> Dict[str, Any]:
        """Membership and every game's snapshot for a session, for one of its members."""
        self._require_member(session_id, participant_id)
        with self.concurrency_control.session_operation(session_id):
            self._require_member(session_id, participant_id)
            return {
                "room_id": session_id,
                "participants": self.session_directory.list_participants(session_id),
                "games": {
                    GameType.ERATZ_IR.value: self._current_state(session_id, GameType.ERATZ_IR),
                    GameType.WAR.value: self._current_state(session_id, GameType.WAR),
                },
            }

    def _current_state(self, session_id: str, game_type: GameType, strict: bool = False):
        if game_type == GameType.WAR:
            if not strict and not self.card_game_engine.has_game(session_id):
                return None
            return self.card_game_engine.get_state(session_id)
        return self.word_round_engine.get_state(session_id)

    def _no_op(self, session_id, participant_id, command):
        return None

    # War

    def _start_war(self, session_id: str, participant_id: str, command: StartWarCommand):
        outsiders = [p for p in command.players
                     if not self.session_directory.is_member(session_id, p)]
        if outsiders:
            raise InvalidArgumentError(
                "Players must be in the room",
                {"not_in_room": outsiders}
            )
        return self.card_game_engine.start(session_id, list(command.players))

    def _play_war_turn(self, session_id: str, participant_id: str, command: PlayWarTurnCommand):
        return self.card_game_engine.play_turn(session_id, participant_id)

    def _end_war(self, session_id: str, participant_id: str, command: EndWarCommand):
        return self.card_game_engine.end(session_id)

    # Eretz-Ir

    def _start_word_game(self, session_id: str, participant_id: str, command: StartWordGameCommand):
        return self.word_round_engine.start_game(session_id)

    def _start_round(self, session_id: str, participant_id: str, command: StartRoundCommand):
        result = self.word_round_engine.start_round(
            session_id, list(command.categories) if command.categories else None
        )
        self.round_timer_service.cancel(session_id)
        return result

    def _save_answers(self, session_id: str, participant_id: str, command: SaveAnswersCommand):
        result = self.word_round_engine.submit_answer(session_id, participant_id, command.answers)

        if result["all_submitted"]:
            result["round_finished"] = self._finish_round(session_id, participant_id, command)
        elif result["first_submission"] and self.game_settings.auto_countdown_on_first_submission:
            self._begin_countdown(session_id)
        return result

    def _start_countdown(self, session_id: str, participant_id: str, command: StartCountdownCommand):
        if not self.word_round_engine.is_playing_round(session_id):
            raise InvalidStateError("No round is being played")
        started = self._begin_countdown(session_id)
        return {
            "message": "Countdown started" if started else "Countdown already running",
            "countdown_started": started,
        }

    def _finish_round(self, session_id: str, participant_id: Optional[str], command: Optional[GameCommand]):
        result = self.word_round_engine.finish_round(session_id)
        self.round_timer_service.cancel(session_id)
        return result

    def _reset_word_game(self, session_id: str, participant_id: str, command: ResetWordGameCommand):
        self.round_timer_service.cancel(session_id)
        return self.word_round_engine.reset_game(session_id)

    # Countdown

    def _begin_countdown(self, session_id: str) -> bool:
        round_number = self.word_round_engine.current_round(session_id)
        started = self.round_timer_service.start(
            session_id,
            self.game_settings.round_countdown_seconds,
            lambda: self.on_countdown_expired(session_id, round_number),
        )
        if started:
            self.broadcast_service.broadcast_countdown_started(session_id, round_number)
        return started

    def on_countdown_expired(self, session_id: str, round_number: Optional[int]):
        """Finish the round the countdown was started for, if it is still being played."""
        try:
            with self.concurrency_control.session_operation(session_id):
                if not self.word_round_engine.is_playing_round(session_id):
                    logger.debug(f"Countdown expired in room {session_id} after the round finished")
                    return
                if self.word_round_engine.current_round(session_id) != round_number:
                    logger.debug(f"Countdown for round {round_number} in room {session_id} is stale")
                    return

                result = self.word_round_engine.finish_round(session_id)
                result["reason"] = "countdown_expired"
                logger.info(f"Round {round_number} in room {session_id} finished by countdown")
                self.broadcast_service.broadcast_game_state(
                    session_id, GameType.ERATZ_IR, self.word_round_engine.get_state(session_id), result
                )
        except Exception as e:
            logger.error(f"Error finishing round on countdown in room {session_id}: {e}")
