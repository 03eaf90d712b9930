"""
Unit tests for the Eretz-Ir word round engine.
"""

import random

import pytest

from config_factory import load_config_from_dict
from src.config.game_settings import DEFAULT_LETTERS, GameSettings
from src.core.errors import InvalidArgumentError, InvalidStateError, NotFoundError
from src.engines.word_round_engine import WordRoundEngine
from src.services.scoring_service import ScoringService
from src.services.session_directory import SessionDirectory
from tests.helpers.fakes import StaticOracle


class TestWordRoundEngine:
    """Test the word game state machine."""

    def setup_method(self):
        """Set up test fixtures."""
        self.directory = SessionDirectory()
        self.scoring = ScoringService(timeout_seconds=1.0)
        self.engine = WordRoundEngine(self.directory, self.scoring, GameSettings(), rng=random.Random(7))

    def teardown_method(self):
        self.scoring.shutdown()

    def _join(self, *participants, room="r1"):
        for pid in participants:
            self.directory.join(room, pid)

    def _start_playing(self, *participants, categories=None):
        self._join(*participants)
        self.engine.start_game("r1")
        return self.engine.start_round("r1", categories)

    def test_state_creates_waiting_game(self):
        """Test that reading an unknown room yields a waiting game."""
        self._join("a", "b")

        state = self.engine.get_state("r1")

        assert state["status"] == "waiting"
        assert state["round"] == 0
        assert state["letter"] is None
        assert state["participants"] == ["a", "b"]
        assert state["scores"] == {"a": 0, "b": 0}
        assert self.engine.has_game("r1")

    def test_waiting_state_resyncs_participants(self):
        """Test that a waiting game picks up later joiners."""
        self._join("a")
        self.engine.get_state("r1")
        self._join("b")

        assert self.engine.get_state("r1")["participants"] == ["a", "b"]

    def test_start_game(self):
        """Test moving from waiting to in-progress."""
        self._join("a", "b")

        self.engine.start_game("r1")

        state = self.engine.get_state("r1")
        assert state["status"] == "in-progress"
        assert state["scores"] == {"a": 0, "b": 0}

    def test_start_game_needs_two_players(self):
        """Test that a lone participant cannot start."""
        self._join("a")

        with pytest.raises(InvalidArgumentError) as exc_info:
            self.engine.start_game("r1")

        assert exc_info.value.details == {"min_players": 2, "current_players": 1}
        assert self.engine.get_state("r1")["status"] == "waiting"

    def test_start_game_twice(self):
        """Test that an already started game cannot be started again."""
        self._join("a", "b")
        self.engine.start_game("r1")

        with pytest.raises(InvalidStateError):
            self.engine.start_game("r1")

    def test_start_round_without_game(self):
        """Test starting a round in a room that never had a game."""
        with pytest.raises(NotFoundError):
            self.engine.start_round("r1")

    def test_start_round_while_waiting(self):
        """Test that a round needs a started game."""
        self._join("a", "b")
        self.engine.get_state("r1")

        with pytest.raises(InvalidStateError):
            self.engine.start_round("r1")

    def test_start_round(self):
        """Test drawing a letter and opening a round."""
        result = self._start_playing("a", "b", categories=["city"])

        assert result["round"] == 1
        assert result["letter"] in DEFAULT_LETTERS
        assert result["categories"] == ["city"]
        state = self.engine.get_state("r1")
        assert state["status"] == "playing-round"
        assert state["letter"] == result["letter"]

    def test_start_round_default_categories(self):
        """Test that rounds fall back to the configured categories."""
        result = self._start_playing("a", "b")

        assert result["categories"] == ['עיר', 'ארץ', 'חי', 'צומח']

    def test_start_round_while_playing(self):
        """Test that a round cannot start over a running one."""
        self._start_playing("a", "b")

        with pytest.raises(InvalidStateError):
            self.engine.start_round("r1")

    def test_submit_outside_round(self):
        """Test that answers are rejected when no round is being played."""
        self._join("a", "b")
        self.engine.start_game("r1")

        with pytest.raises(InvalidStateError):
            self.engine.submit_answer("r1", "a", {"city": "x"})

    def test_submit_without_game(self):
        """Test submitting in a room with no game."""
        with pytest.raises(NotFoundError):
            self.engine.submit_answer("r1", "a", {"city": "x"})

    def test_submit_flags(self):
        """Test first-submission and all-submitted flags."""
        self._start_playing("a", "b", categories=["city"])

        first = self.engine.submit_answer("r1", "a", {"city": "x"})
        again = self.engine.submit_answer("r1", "a", {"city": "y"})
        last = self.engine.submit_answer("r1", "b", {"city": "z"})

        assert first["first_submission"] is True
        assert first["all_submitted"] is False
        assert again["first_submission"] is False
        assert last["all_submitted"] is True

    def test_all_submitted_ignores_departed_participants(self):
        """Test that someone who left does not hold up the round."""
        self._start_playing("a", "b", categories=["city"])
        self.directory.leave("r1", "b")

        result = self.engine.submit_answer("r1", "a", {"city": "x"})

        assert result["all_submitted"] is True

    def test_answers_hidden_until_round_ends(self):
        """Test that answers are only revealed in the ended state."""
        self._start_playing("a", "b", categories=["city"])
        self.engine.submit_answer("r1", "a", {"city": "x"})

        state = self.engine.get_state("r1")

        assert state["submitted"] == ["a"]
        assert state["answers"] is None
        assert state["round_scores"] is None

    def test_last_submission_wins(self):
        """Test that only the second of two submissions is scored."""
        self._start_playing("a", "b", categories=["city", "country"])
        self.engine.submit_answer("r1", "a", {"city": "x", "country": "y"})
        self.engine.submit_answer("r1", "a", {"city": "x", "country": ""})

        result = self.engine.finish_round("r1")

        assert result["round_scores"]["a"] == 1
        assert self.engine.get_state("r1")["answers"]["a"] == {"city": "x", "country": ""}

    def test_scenario_heuristic_scoring(self):
        """Test a full round scored by the non-empty heuristic."""
        self._join("a", "b")
        self.engine.start_game("r1")
        assert self.engine.get_state("r1")["status"] == "in-progress"

        round_info = self.engine.start_round("r1", ["city"])
        assert round_info["round"] == 1
        assert round_info["letter"] in DEFAULT_LETTERS

        self.engine.submit_answer("r1", "a", {"city": round_info["letter"] + "xyz"})
        result = self.engine.finish_round("r1")

        assert result["round_scores"] == {"a": 1, "b": 0}
        state = self.engine.get_state("r1")
        assert state["status"] == "ended"
        assert state["scores"] == {"a": 1, "b": 0}
        assert state["used_fallback_scoring"] is True

    def test_scores_accumulate_across_rounds(self):
        """Test that cumulative scores never decrease between rounds."""
        self._start_playing("a", "b", categories=["city"])
        self.engine.submit_answer("r1", "a", {"city": "x"})
        self.engine.finish_round("r1")

        self.engine.start_round("r1", ["city"])
        assert self.engine.get_state("r1")["submitted"] == []
        self.engine.submit_answer("r1", "a", {"city": "y"})
        self.engine.submit_answer("r1", "b", {"city": "z"})
        self.engine.finish_round("r1")

        state = self.engine.get_state("r1")
        assert state["round"] == 2
        assert state["scores"] == {"a": 2, "b": 1}
        assert state["round_scores"] == {"a": 1, "b": 1}

    def test_finish_round_twice(self):
        """Test that a second finish is rejected and awards nothing."""
        self._start_playing("a", "b", categories=["city"])
        self.engine.submit_answer("r1", "a", {"city": "x"})
        self.engine.finish_round("r1")

        with pytest.raises(InvalidStateError):
            self.engine.finish_round("r1")

        assert self.engine.get_state("r1")["scores"]["a"] == 1

    def test_finish_round_with_oracle(self):
        """Test that oracle verdicts decide the round score."""
        oracle = StaticOracle({
            "overall_valid": False,
            "errors": ["b is wrong"],
            "per_participant": {
                "a": {"city": True, "country": True},
                "b": {"city": False, "country": True},
            },
        })
        scoring = ScoringService(oracle=oracle, timeout_seconds=1.0)
        engine = WordRoundEngine(self.directory, scoring, GameSettings(), rng=random.Random(1))
        self._join("a", "b")
        engine.start_game("r1")
        engine.start_round("r1", ["city", "country"])
        engine.submit_answer("r1", "a", {"city": "x", "country": "y"})
        engine.submit_answer("r1", "b", {"city": "x", "country": "y"})

        result = engine.finish_round("r1")
        scoring.shutdown()

        assert result["round_scores"] == {"a": 2, "b": 1}
        state = engine.get_state("r1")
        assert state["verdicts"]["b"] == {"city": False, "country": True}
        assert state["used_fallback_scoring"] is False

    def test_late_joiner_added_on_submission(self):
        """Test that a participant who joined mid-game gets a score entry."""
        self._start_playing("a", "b", categories=["city"])
        self._join("c")

        self.engine.submit_answer("r1", "c", {"city": "x"})
        self.engine.finish_round("r1")

        assert self.engine.get_state("r1")["scores"]["c"] == 1

    def test_late_joiner_added_on_next_round(self):
        """Test that joiners are picked up when a round starts."""
        self._start_playing("a", "b", categories=["city"])
        self.engine.finish_round("r1")
        self._join("c")

        self.engine.start_round("r1")

        state = self.engine.get_state("r1")
        assert state["participants"] == ["a", "b", "c"]
        assert state["scores"]["c"] == 0

    @pytest.mark.parametrize("advance", [0, 1, 2, 3])
    def test_reset_from_any_state(self, advance):
        """Test that reset always yields waiting with zero scores."""
        self._join("a", "b")
        steps = [
            lambda: self.engine.start_game("r1"),
            lambda: self.engine.start_round("r1", ["city"]),
            lambda: (self.engine.submit_answer("r1", "a", {"city": "x"}),
                     self.engine.finish_round("r1")),
        ]
        self.engine.get_state("r1")
        for step in steps[:advance]:
            step()

        self.engine.reset_game("r1")

        state = self.engine.get_state("r1")
        assert state["status"] == "waiting"
        assert state["round"] == 0
        assert state["scores"] == {"a": 0, "b": 0}

    def test_reset_resyncs_participants(self):
        """Test that reset drops participants who left."""
        self._start_playing("a", "b", "c", categories=["city"])
        self.directory.leave("r1", "c")

        self.engine.reset_game("r1")

        assert self.engine.get_state("r1")["participants"] == ["a", "b"]

    def test_round_helpers(self):
        """Test current round and playing-round lookups."""
        assert self.engine.current_round("r1") is None
        assert not self.engine.is_playing_round("r1")

        self._start_playing("a", "b")

        assert self.engine.current_round("r1") == 1
        assert self.engine.is_playing_round("r1")

    def test_min_players_from_config(self):
        """Test that the minimum player count comes from configuration."""
        config = load_config_from_dict({'min_players_required': 3, 'environment': 'testing'})
        engine = WordRoundEngine(self.directory, self.scoring, GameSettings(config))
        self._join("a", "b")

        with pytest.raises(InvalidArgumentError):
            engine.start_game("r1")
