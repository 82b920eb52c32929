"""
Tiles of a double-six set, the deck, and dealing.

(placed in its own module as the board, the room and the scoring all need to import Tile)
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Optional, Sequence

from src.core.exceptions import InvalidTileError

# Double-six set: pips run from 0 to 6
MAX_PIPS = 6
HAND_SIZE = 7
NUM_HANDS = 4


@dataclass(frozen=True)
class Tile:
    """
    Unordered pair of pips.
    Stored canonically as (low, high), so Tile(6, 3) == Tile(3, 6) and both hash the same.
    """

    low: int
    high: int

    def __post_init__(self) -> None:
        for pip in (self.low, self.high):
            if not 0 <= pip <= MAX_PIPS:
                raise InvalidTileError(
                    f"Pip value {pip} outside of the double-six set (0-{MAX_PIPS})."
                )
        if self.low > self.high:
            low, high = self.high, self.low
            object.__setattr__(self, "low", low)
            object.__setattr__(self, "high", high)

    @classmethod
    def from_pips(cls, pips: Sequence[int]) -> Tile:
        """Wire format: [a, b] in any order"""
        if len(pips) != 2:
            raise InvalidTileError(f"A tile has exactly two pip values, got {list(pips)}.")
        return cls(int(pips[0]), int(pips[1]))

    def to_list(self) -> list[int]:
        return [self.low, self.high]

    @property
    def is_double(self) -> bool:
        return self.low == self.high

    @property
    def pip_sum(self) -> int:
        return self.low + self.high

    def has_pip(self, value: Optional[int]) -> bool:
        return value is not None and value in (self.low, self.high)

    def other_pip(self, value: int) -> int:
        """The pip on the opposite half of `value`. For a double this is `value` again."""
        if value == self.low:
            return self.high
        if value == self.high:
            return self.low
        raise InvalidTileError(f"Tile {self} has no half with {value} pips.")

    def __str__(self) -> str:
        return f"[{self.low}|{self.high}]"


DOUBLE_SIX = Tile(MAX_PIPS, MAX_PIPS)

# The 28 tiles, ordered [0|0], [0|1], [1|1], [0|2], ...
DOMINO_SET: tuple[Tile, ...] = tuple(
    Tile(low, high) for high in range(MAX_PIPS + 1) for low in range(high + 1)
)


def new_shuffled_deck(rng: Optional[random.Random] = None) -> list[Tile]:
    """
    Fresh copy of the full set in uniformly random order.
    ----

    Fisher-Yates: walk from the last index down to 1, swap with a uniformly chosen index <= i.
    """
    rng = rng or random.Random()
    deck = list(DOMINO_SET)
    for i in range(len(deck) - 1, 0, -1):
        j = rng.randint(0, i)
        deck[i], deck[j] = deck[j], deck[i]
    return deck


def deal(
    deck: Sequence[Tile], hands: int = NUM_HANDS, hand_size: int = HAND_SIZE
) -> list[list[Tile]]:
    """Consume the deck left to right: the first `hand_size` tiles go to seat 0, the next to seat 1, ..."""
    if len(deck) != hands * hand_size:
        raise ValueError(
            f"Cannot deal {hands} hands of {hand_size} from a deck of {len(deck)} tiles."
        )
    if len(set(deck)) != len(deck):
        raise ValueError("Deck contains duplicate tiles.")
    return [list(deck[i * hand_size : (i + 1) * hand_size]) for i in range(hands)]
