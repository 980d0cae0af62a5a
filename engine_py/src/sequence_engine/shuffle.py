"""
Card shuffling and dealing utilities.
"""

import random
from typing import List, Optional, Sequence, Tuple, Union

from .constants import (
    CARDS_PER_PLAYER_2_PLAYERS, CARDS_PER_PLAYER_3_PLAYERS,
    CARDS_PER_PLAYER_DEFAULT, RANKS, SUITS,
)
from .errors import EmptyDeckError
from .models import Card

Deck = Tuple[Card, ...]


def create_standard_deck() -> List[Card]:
    """Create a standard 52-card deck."""
    return [Card(suit=suit, rank=rank) for suit in SUITS for rank in RANKS]


def build_deck() -> Deck:
    """Create the 104-card draw deck (two standard decks)."""
    deck = create_standard_deck()
    return tuple(deck + deck)


def shuffle_deck(
    deck: Sequence[Card],
    seed: Optional[Union[int, random.Random]] = None
) -> Deck:
    """
    Shuffle a deck with Fisher-Yates.

    Args:
        deck: Cards to shuffle
        seed: Optional seed or Random instance for deterministic shuffling

    Returns:
        Shuffled copy of the deck
    """
    if isinstance(seed, random.Random):
        rng = seed
    elif seed is not None:
        rng = random.Random(seed)
    else:
        rng = random.Random()

    cards = list(deck)
    for i in range(len(cards) - 1, 0, -1):
        j = rng.randint(0, i)
        cards[i], cards[j] = cards[j], cards[i]
    return tuple(cards)


def deal_cards(
    deck: Sequence[Card],
    num_players: int,
    cards_per_player: int
) -> Tuple[List[Tuple[Card, ...]], Deck]:
    """
    Deal cards round-robin from the end of the deck.

    Args:
        deck: Shuffled deck of cards
        num_players: Number of hands to deal
        cards_per_player: Target hand size

    Returns:
        Tuple of (per-player hands, remaining deck)
    """
    remaining = list(deck)
    hands: List[List[Card]] = [[] for _ in range(num_players)]

    for _ in range(cards_per_player):
        for hand in hands:
            if remaining:
                hand.append(remaining.pop())

    return [tuple(hand) for hand in hands], tuple(remaining)


def draw_card(deck: Sequence[Card]) -> Tuple[Card, Deck]:
    """Draw the last card of the deck, returning it with the remaining deck."""
    if not deck:
        raise EmptyDeckError()
    return deck[-1], tuple(deck[:-1])


def get_cards_per_player(num_players: int) -> int:
    """Hand size for a given player count."""
    if num_players == 2:
        return CARDS_PER_PLAYER_2_PLAYERS
    if num_players == 3:
        return CARDS_PER_PLAYER_3_PLAYERS
    return CARDS_PER_PLAYER_DEFAULT


def format_hand(hand: Sequence[Card]) -> str:
    return ' '.join(card.code for card in hand)
