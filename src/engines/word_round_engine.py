"""
Word Round Engine for PartyRooms

Runs Eretz-Ir: rounds with a random prompt letter, per-participant answer
sheets, and scoring deferred to the end of each round.

    waiting --start_game--> in-progress --start_round--> playing-round
    playing-round --finish_round--> ended --start_round--> playing-round
    any --reset_game--> waiting
"""

import logging
import random
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from src.config.game_settings import GameSettings
from src.core.errors import InvalidArgumentError, InvalidStateError, NotFoundError
from src.core.game_phases import WordRoundStatus
from src.services.scoring_service import ScoringService
from src.services.session_directory import SessionDirectory

logger = logging.getLogger(__name__)


@dataclass
class _WordGame:
    status: WordRoundStatus = WordRoundStatus.WAITING
    round_number: int = 0
    letter: Optional[str] = None
    categories: List[str] = field(default_factory=list)
    participants: List[str] = field(default_factory=list)
    # Current round only
    answers: Dict[str, Dict[str, str]] = field(default_factory=dict)
    round_scores: Dict[str, int] = field(default_factory=dict)
    verdicts: Dict[str, Dict[str, bool]] = field(default_factory=dict)
    used_fallback: bool = False
    # Every participant ever in the game
    scores: Dict[str, int] = field(default_factory=dict)

    def add_participant(self, participant_id: str):
        if participant_id not in self.participants:
            self.participants.append(participant_id)
        self.scores.setdefault(participant_id, 0)


class WordRoundEngine:
    """Eretz-Ir state machine, one game per session."""

    def __init__(self, session_directory: SessionDirectory, scoring_service: ScoringService,
                 game_settings: Optional[GameSettings] = None,
                 rng: Optional[random.Random] = None):
        self.session_directory = session_directory
        self.scoring_service = scoring_service
        self.game_settings = game_settings or GameSettings()
        self._rng = rng or random.Random()
        self._games: Dict[str, _WordGame] = {}

    def has_game(self, session_id: str) -> bool:
        return session_id in self._games

    def _get_game(self, session_id: str) -> _WordGame:
        game = self._games.get(session_id)
        if game is None:
            raise NotFoundError("No game found for this room", {"room_id": session_id})
        return game

    def _get_or_create(self, session_id: str) -> _WordGame:
        game = self._games.get(session_id)
        if game is None:
            game = _WordGame()
            self._sync_participants(session_id, game)
            self._games[session_id] = game
        return game

    def _sync_participants(self, session_id: str, game: _WordGame):
        for participant_id in self.session_directory.list_participants(session_id):
            game.add_participant(participant_id)

    def start_game(self, session_id: str) -> Dict:
        """
        Move a waiting game to in-progress with everyone's score at zero.

        Raises:
            InvalidStateError: If the game is not waiting
            InvalidArgumentError: If too few participants are in the session
        """
        game = self._get_or_create(session_id)
        if game.status != WordRoundStatus.WAITING:
            raise InvalidStateError(
                "Game already started in this room",
                {"status": game.status.value}
            )

        participants = self.session_directory.list_participants(session_id)
        min_players = self.game_settings.min_players_required
        if len(participants) < min_players:
            raise InvalidArgumentError(
                f"At least {min_players} players are needed to start",
                {"min_players": min_players, "current_players": len(participants)}
            )

        game.participants = list(participants)
        game.scores = {pid: 0 for pid in participants}
        game.status = WordRoundStatus.IN_PROGRESS
        logger.info(f"Word game started in room {session_id} with {len(participants)} players")
        return {"message": "Game started", "participants": list(participants)}

    def start_round(self, session_id: str, categories: Optional[List[str]] = None) -> Dict:
        """
        Draw a letter and open a new round for answers.

        Raises:
            NotFoundError: If the session has no game
            InvalidStateError: Unless the game is in-progress or its last round ended
        """
        game = self._get_game(session_id)
        if game.status not in (WordRoundStatus.IN_PROGRESS, WordRoundStatus.ENDED):
            raise InvalidStateError(
                f"Cannot start a round while game is {game.status.value}",
                {"status": game.status.value}
            )

        self._sync_participants(session_id, game)
        game.letter = self._rng.choice(self.game_settings.letters)
        game.categories = list(categories) if categories else self.game_settings.default_categories
        game.round_number += 1
        game.answers = {}
        game.round_scores = {}
        game.verdicts = {}
        game.used_fallback = False
        game.status = WordRoundStatus.PLAYING_ROUND

        logger.info(f"Round {game.round_number} started in room {session_id} with letter {game.letter}")
        return {
            "message": f"Round {game.round_number} started with the letter {game.letter}",
            "round": game.round_number,
            "letter": game.letter,
            "categories": list(game.categories),
        }

    def submit_answer(self, session_id: str, participant_id: str, answers: Dict[str, str]) -> Dict:
        """
        Store a participant's answer sheet for the current round.

        A later submission from the same participant replaces the earlier one.

        Returns:
            Dict with ``first_submission`` and ``all_submitted`` flags

        Raises:
            NotFoundError: If the session has no game
            InvalidStateError: Outside playing-round
        """
        game = self._get_game(session_id)
        if game.status != WordRoundStatus.PLAYING_ROUND:
            raise InvalidStateError(
                "Answers can only be submitted while a round is being played",
                {"status": game.status.value}
            )

        first_submission = not game.answers
        game.add_participant(participant_id)
        game.answers[participant_id] = dict(answers)

        active = [pid for pid in game.participants
                  if self.session_directory.is_member(session_id, pid)]
        all_submitted = all(pid in game.answers for pid in active)

        logger.debug(f"Answers from {participant_id} saved in room {session_id}")
        return {
            "message": "Answers saved",
            "first_submission": first_submission,
            "all_submitted": all_submitted,
        }

    def finish_round(self, session_id: str) -> Dict:
        """
        Score the round and add each participant's result to their total.

        Raises:
            NotFoundError: If the session has no game
            InvalidStateError: Outside playing-round
        """
        game = self._get_game(session_id)
        if game.status != WordRoundStatus.PLAYING_ROUND:
            raise InvalidStateError(
                "No round is being played",
                {"status": game.status.value}
            )

        scoring = self.scoring_service.score_round(
            game.letter, game.answers, game.categories, game.participants
        )
        for participant_id, points in scoring.round_scores.items():
            game.scores[participant_id] = game.scores.get(participant_id, 0) + points

        game.round_scores = dict(scoring.round_scores)
        game.verdicts = scoring.verdicts
        game.used_fallback = scoring.used_fallback
        game.status = WordRoundStatus.ENDED

        logger.info(f"Round {game.round_number} finished in room {session_id}: {game.round_scores}")
        return {
            "message": f"Round {game.round_number} finished",
            "round_scores": dict(game.round_scores),
        }

    def reset_game(self, session_id: str) -> Dict:
        """Reinitialize the session's game to waiting with every score at zero."""
        game = _WordGame()
        self._sync_participants(session_id, game)
        self._games[session_id] = game
        logger.info(f"Word game reset in room {session_id}")
        return {"message": "Game reset"}

    def current_round(self, session_id: str) -> Optional[int]:
        game = self._games.get(session_id)
        return game.round_number if game else None

    def is_playing_round(self, session_id: str) -> bool:
        game = self._games.get(session_id)
        return game is not None and game.status == WordRoundStatus.PLAYING_ROUND

    def get_state(self, session_id: str) -> Dict:
        """
        Public snapshot, creating a waiting game for an unknown session.

        Answers, verdicts and round scores are only revealed once the round
        has ended; before that the snapshot lists who has submitted.
        """
        game = self._get_or_create(session_id)
        if game.status == WordRoundStatus.WAITING:
            self._sync_participants(session_id, game)

        ended = game.status == WordRoundStatus.ENDED
        return {
            "status": game.status.value,
            "round": game.round_number,
            "letter": game.letter,
            "categories": list(game.categories),
            "participants": list(game.participants),
            "submitted": list(game.answers.keys()),
            "answers": {pid: dict(a) for pid, a in game.answers.items()} if ended else None,
            "verdicts": {pid: dict(v) for pid, v in game.verdicts.items()} if ended else None,
            "round_scores": dict(game.round_scores) if ended else None,
            "used_fallback_scoring": game.used_fallback if ended else None,
            "scores": dict(game.scores),
        }
