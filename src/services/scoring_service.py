"""
Scoring Service for PartyRooms

Judges word game answers through a pluggable scoring oracle, bounded by a
timeout, with a local heuristic when the oracle cannot give a usable verdict.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

logger = logging.getLogger(__name__)


class OracleUnavailableError(Exception):
    """Raised by an oracle that cannot judge answers right now."""
    pass


class MalformedVerdictError(Exception):
    """Raised when an oracle verdict does not have the expected shape."""
    pass


@dataclass
class OracleVerdict:
    overall_valid: bool
    errors: List[str] = field(default_factory=list)
    # participant -> category -> correct
    per_participant: Dict[str, Dict[str, bool]] = field(default_factory=dict)


@dataclass
class RoundScoring:
    round_scores: Dict[str, int]
    verdicts: Dict[str, Dict[str, bool]]
    used_fallback: bool
    errors: List[str] = field(default_factory=list)


class UnavailableScoringOracle:
    """Oracle used when no external judge is configured."""

    def validate(self, letter: str, answers: Mapping[str, Mapping[str, str]],
                 categories: List[str]) -> OracleVerdict:
        raise OracleUnavailableError("No scoring oracle configured")


class LetterRuleScoringOracle:
    """
    Local judge: an answer is correct when, reduced to letters and spaces,
    it starts with the round's letter.
    """

    @staticmethod
    def normalize_answer(answer: str) -> str:
        return ''.join(ch for ch in answer.strip() if ch.isalpha() or ch.isspace())

    def validate(self, letter: str, answers: Mapping[str, Mapping[str, str]],
                 categories: List[str]) -> OracleVerdict:
        per_participant = {}
        errors = []
        for participant_id, participant_answers in answers.items():
            results = {}
            for category in categories:
                normalized = self.normalize_answer(participant_answers.get(category) or '')
                results[category] = bool(normalized) and normalized[0] == letter
                if normalized and not results[category]:
                    errors.append(f"{participant_id}: '{normalized}' does not start with {letter}")
            per_participant[participant_id] = results

        return OracleVerdict(
            overall_valid=not errors,
            errors=errors,
            per_participant=per_participant,
        )


def create_scoring_oracle(name: str):
    """Build the oracle selected by configuration."""
    if name == 'letter':
        return LetterRuleScoringOracle()
    if name == 'none':
        return UnavailableScoringOracle()
    raise ValueError(f"Unknown scoring oracle: {name}")


class ScoringService:
    """Calculates round scores from oracle verdicts."""

    def __init__(self, oracle=None, timeout_seconds: float = 5.0):
        self.oracle = oracle or UnavailableScoringOracle()
        self.timeout_seconds = timeout_seconds
        self._executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix='scoring-oracle')

    def score_round(self, letter: str, answers: Mapping[str, Mapping[str, str]],
                    categories: List[str], participants: List[str]) -> RoundScoring:
        """
        Score one round. Never raises.

        Args:
            letter: The round's prompt letter
            answers: participant -> category -> submitted text
            categories: The round's categories
            participants: Everyone taking part in the round; non-submitters score 0

        Returns:
            RoundScoring with one entry per participant
        """
        answers = {pid: dict(a) for pid, a in answers.items()}
        used_fallback = False
        errors: List[str] = []

        try:
            verdict = self._normalized_verdict(self._call_oracle(letter, answers, categories))
            verdicts = self._checked_verdicts(verdict, answers, categories)
            errors = list(verdict.errors)
        except Exception as e:
            logger.warning(f"Scoring oracle failed, using local heuristic: {e!r}")
            verdicts = self.heuristic_verdicts(answers, categories)
            used_fallback = True

        round_scores = {pid: 0 for pid in participants}
        for participant_id, results in verdicts.items():
            round_scores[participant_id] = sum(1 for correct in results.values() if correct)

        return RoundScoring(
            round_scores=round_scores,
            verdicts=verdicts,
            used_fallback=used_fallback,
            errors=errors,
        )

    def _call_oracle(self, letter, answers, categories) -> OracleVerdict:
        future = self._executor.submit(self.oracle.validate, letter, answers, list(categories))
        try:
            return future.result(timeout=self.timeout_seconds)
        except FutureTimeoutError:
            future.cancel()
            raise OracleUnavailableError(
                f"Scoring oracle timed out after {self.timeout_seconds}s"
            )

    @staticmethod
    def _normalized_verdict(verdict: Any) -> OracleVerdict:
        """Accept the JSON object shape as well as an OracleVerdict."""
        if isinstance(verdict, dict):
            try:
                verdict = OracleVerdict(
                    overall_valid=verdict['overall_valid'],
                    errors=verdict.get('errors', []),
                    per_participant=verdict['per_participant'],
                )
            except (KeyError, TypeError) as e:
                raise MalformedVerdictError(f"Verdict is missing {e}")

        if not isinstance(verdict, OracleVerdict):
            raise MalformedVerdictError(f"Unexpected verdict type {type(verdict).__name__}")
        if not isinstance(verdict.overall_valid, bool) or not isinstance(verdict.errors, list):
            raise MalformedVerdictError("Verdict has malformed overall fields")
        if not isinstance(verdict.per_participant, dict):
            raise MalformedVerdictError("Verdict has no per-participant results")
        return verdict

    @staticmethod
    def _checked_verdicts(verdict: OracleVerdict, answers: Mapping[str, Mapping[str, str]],
                          categories: List[str]) -> Dict[str, Dict[str, bool]]:
        """Per-category results for every submitter, in the order of the round's categories."""
        checked = {}
        for participant_id in answers:
            results = verdict.per_participant.get(participant_id)
            if not isinstance(results, dict):
                raise MalformedVerdictError(f"Verdict has no results for {participant_id}")
            participant_results = {}
            for category in categories:
                correct = results.get(category, False)
                if not isinstance(correct, bool):
                    raise MalformedVerdictError(
                        f"Verdict for {participant_id}/{category} is not a boolean"
                    )
                participant_results[category] = correct
            checked[participant_id] = participant_results
        return checked

    @staticmethod
    def heuristic_verdicts(answers: Mapping[str, Mapping[str, str]],
                           categories: List[str]) -> Dict[str, Dict[str, bool]]:
        """An answer counts as correct when it is non-empty after trimming."""
        return {
            participant_id: {
                category: bool((participant_answers.get(category) or '').strip())
                for category in categories
            }
            for participant_id, participant_answers in answers.items()
        }

    def shutdown(self):
        self._executor.shutdown(wait=False)
