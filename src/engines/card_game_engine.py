"""
Card Game Engine for PartyRooms

Runs two-player War: deal, play turns onto a shared pile, resolve battles,
detect the winner. Games are kept private to the engine and only plain-dict
snapshots leave it.
"""

import logging
import random
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from src.core.errors import InvalidArgumentError, InvalidStateError, NotFoundError
from src.core.game_phases import CardGameStatus

logger = logging.getLogger(__name__)

SUITS = ('hearts', 'diamonds', 'clubs', 'spades')
RANKS = range(2, 15)  # 14 = Ace
DECK_SIZE = 52


@dataclass(frozen=True)
class Card:
    suit: str
    rank: int

    def to_dict(self) -> Dict:
        return {"suit": self.suit, "rank": self.rank}


@dataclass
class _WarGame:
    players: Tuple[str, str]
    hands: Dict[str, List[Card]]
    # (participant, card) plays since the last resolution
    pile: List[Tuple[str, Card]] = field(default_factory=list)
    status: CardGameStatus = CardGameStatus.ONGOING
    winner: Optional[str] = None

    def contributions(self, participant_id: str) -> int:
        return sum(1 for pid, _ in self.pile if pid == participant_id)

    def latest_card(self, participant_id: str) -> Card:
        for pid, card in reversed(self.pile):
            if pid == participant_id:
                return card
        raise LookupError(participant_id)

    def card_count(self) -> int:
        return sum(len(hand) for hand in self.hands.values()) + len(self.pile)


def build_deck() -> List[Card]:
    """All 52 cards, unshuffled, suit by suit."""
    return [Card(suit, rank) for suit in SUITS for rank in RANKS]


class CardGameEngine:
    """War game state machine, one game per session."""

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()
        self._games: Dict[str, _WarGame] = {}

    def has_game(self, session_id: str) -> bool:
        return session_id in self._games

    def _get_game(self, session_id: str) -> _WarGame:
        game = self._games.get(session_id)
        if game is None:
            raise NotFoundError(f"No game found in room {session_id}", {"room_id": session_id})
        return game

    def start(self, session_id: str, players: List[str]) -> Dict:
        """
        Deal a shuffled deck between exactly two participants.

        A finished game still held for the session is replaced.

        Raises:
            InvalidArgumentError: Unless exactly two distinct participants are given
            InvalidStateError: If a game is already being played in the session
        """
        if len(players) != 2 or players[0] == players[1]:
            raise InvalidArgumentError(
                "War game requires exactly 2 players",
                {"players": list(players)}
            )

        existing = self._games.get(session_id)
        if existing is not None and existing.status == CardGameStatus.ONGOING:
            raise InvalidStateError(f"Game already started in room {session_id}")

        deck = build_deck()
        self._rng.shuffle(deck)
        half = len(deck) // 2

        p1, p2 = players
        self._games[session_id] = _WarGame(
            players=(p1, p2),
            hands={p1: deck[:half], p2: deck[half:]},
        )
        logger.info(f"War game started in room {session_id} with players {p1}, {p2}")

        return {
            "message": f"Game started in room {session_id}",
            "players": [p1, p2],
            "cards_per_player": half,
        }

    def play_turn(self, session_id: str, participant_id: str) -> Dict:
        """
        Move the participant's top card onto the pile and resolve if due.

        A battle is resolved once both participants have put the same number
        of cards on the pile since it was last cleared. Equal ranks are a tie:
        the pile stays and both play again.

        Raises:
            NotFoundError: If the session has no game
            InvalidStateError: If the game is finished
            InvalidArgumentError: If the participant is not playing this game
        """
        game = self._get_game(session_id)
        if game.status == CardGameStatus.FINISHED:
            raise InvalidStateError("Game is already finished")
        if participant_id not in game.hands:
            raise InvalidArgumentError(
                f"Player {participant_id} is not playing in room {session_id}"
            )

        hand = game.hands[participant_id]
        if not hand:
            return {
                "message": f"Player {participant_id} has no cards left",
                "played": None,
                "tie": False,
                "battle_winner": None,
            }

        card = hand.pop(0)
        game.pile.append((participant_id, card))
        result = {
            "message": f"Player {participant_id} played a card",
            "played": card.to_dict(),
            "tie": False,
            "battle_winner": None,
        }

        p1, p2 = game.players
        p1_count, p2_count = game.contributions(p1), game.contributions(p2)
        if p1_count and p1_count == p2_count:
            c1, c2 = game.latest_card(p1), game.latest_card(p2)
            if c1.rank == c2.rank:
                result["message"] = "War! Tie occurred. Each player must play again."
                result["tie"] = True
            else:
                battle_winner = p1 if c1.rank > c2.rank else p2
                game.hands[battle_winner].extend(c for _, c in game.pile)
                game.pile = []
                result["message"] = f"{battle_winner} wins this battle!"
                result["battle_winner"] = battle_winner

        if not game.hands[p1] or not game.hands[p2]:
            # Only the participant who just played can have emptied their hand,
            # so the opponent always still holds cards and there are no draws
            game.status = CardGameStatus.FINISHED
            game.winner = p2 if not game.hands[p1] else p1
            result["message"] = f"{game.winner} wins the game!"
            logger.info(f"War game in room {session_id} finished, winner {game.winner}")

        result["status"] = game.status.value
        return result

    def get_state(self, session_id: str) -> Dict:
        """
        Public snapshot: hand sizes only, the pile and the winner.

        Raises:
            NotFoundError: If the session has no game
        """
        game = self._get_game(session_id)

        last_cards: Dict[str, List[Dict]] = {}
        for participant_id, card in game.pile:
            last_cards.setdefault(participant_id, []).append(card.to_dict())

        return {
            "status": game.status.value,
            "players": list(game.players),
            "hand_counts": {pid: len(hand) for pid, hand in game.hands.items()},
            "pile": [{"player_id": pid, "card": card.to_dict()} for pid, card in game.pile],
            "last_cards": last_cards,
            "winner": game.winner,
        }

    def end(self, session_id: str) -> Dict:
        """
        Finish and discard the session's game.

        Raises:
            NotFoundError: If the session has no game
        """
        game = self._get_game(session_id)
        game.status = CardGameStatus.FINISHED
        del self._games[session_id]
        logger.info(f"War game ended in room {session_id}")
        return {"message": f"Game ended in room {session_id}"}

    def card_count(self, session_id: str) -> int:
        """Cards held in both hands plus the pile."""
        return self._get_game(session_id).card_count()
