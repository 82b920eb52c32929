"""The Board implements all rules that affect the line of play (the tiles laid down so far and its two open ends)"""

from dataclasses import dataclass, field
from typing import Optional, Self, Sequence

from src.core.exceptions import IllegalMoveError
from src.core.shared_types import Side
from src.domino.tiles import MAX_PIPS, Tile


@dataclass(frozen=True)
class PlacedTile:
    """A tile as it lies on the board: `left` touches its left neighbour, `right` its right neighbour."""

    left: int
    right: int

    @property
    def tile(self) -> Tile:
        return Tile(self.left, self.right)

    def to_list(self) -> list[int]:
        return [self.left, self.right]


@dataclass
class Board:
    tiles: list[PlacedTile] = field(default_factory=list)

    @classmethod
    def from_list(cls, placed: Sequence[Sequence[int]]) -> Self:
        """
        Construct a board from its wire format: [[l, r], [l, r], ...] read left to right.
        Touching pips of neighbours must agree.
        """
        tiles = [PlacedTile(int(left), int(right)) for left, right in placed]
        for previous, following in zip(tiles, tiles[1:]):
            if previous.right != following.left:
                raise IllegalMoveError(
                    f"Tiles {previous.to_list()} and {following.to_list()} do not touch on equal pips."
                )
        return cls(tiles)

    def to_list(self) -> list[list[int]]:
        return [placed.to_list() for placed in self.tiles]

    def __len__(self) -> int:
        return len(self.tiles)

    @property
    def is_empty(self) -> bool:
        return not self.tiles

    @property
    def left_end(self) -> Optional[int]:
        return self.tiles[0].left if self.tiles else None

    @property
    def right_end(self) -> Optional[int]:
        return self.tiles[-1].right if self.tiles else None

    def ends(self) -> Optional[dict[str, int]]:
        """{'left': .., 'right': ..} or None for an empty board"""
        if self.is_empty:
            return None
        return {"left": self.tiles[0].left, "right": self.tiles[-1].right}

    def contains(self, tile: Tile) -> bool:
        return any(placed.tile == tile for placed in self.tiles)

    def pip_counts(self) -> dict[int, int]:
        """How often each pip value shows on the board (both halves of every tile count)."""
        counts = {pip: 0 for pip in range(MAX_PIPS + 1)}
        for placed in self.tiles:
            counts[placed.left] += 1
            counts[placed.right] += 1
        return counts

    # --- LEGALITY ---
    def playable_sides(
        self, tile: Tile, required_opener: Optional[Tile] = None
    ) -> list[Side]:
        """
        The side(s) the tile can go on. Empty list if it cannot be played at all.
        ----

        Empty board: only `required_opener` may open (if given), otherwise any tile --> [CENTER]
        """
        if self.is_empty:
            if required_opener is not None and tile != required_opener:
                return []
            return [Side.CENTER]

        sides: list[Side] = []
        if tile.has_pip(self.left_end):
            sides.append(Side.LEFT)
        if tile.has_pip(self.right_end):
            sides.append(Side.RIGHT)
        return sides

    def is_playable(self, tile: Tile, required_opener: Optional[Tile] = None) -> bool:
        return bool(self.playable_sides(tile, required_opener))

    # --- PLACEMENT ---
    def place(
        self,
        tile: Tile,
        side_hint: Optional[Side] = None,
        required_opener: Optional[Tile] = None,
    ) -> Side:
        """
        Lay the tile down and return the side that was used.
        ----

        1. Empty board: the tile becomes the whole line; its ends are its two pips. side_hint is ignored.
        2. Both ends fit and no hint given --> prefer the right end.
        3. Orient the tile so the matching pip touches the board.

        Raises IllegalMoveError (board untouched) if the tile fits no end, or the hint names an end it does not fit.
        """
        sides = self.playable_sides(tile, required_opener)
        if not sides:
            if self.is_empty:
                raise IllegalMoveError(
                    f"The first tile of this round must be {required_opener}, not {tile}."
                )
            raise IllegalMoveError(
                f"Tile {tile} fits neither open end ({self.left_end}, {self.right_end})."
            )

        if sides == [Side.CENTER]:
            self.tiles.append(PlacedTile(tile.low, tile.high))
            return Side.CENTER

        side = self._choose_side(tile, sides, side_hint)
        if side == Side.LEFT:
            assert self.left_end is not None  # for the type checker
            self.tiles.insert(0, PlacedTile(tile.other_pip(self.left_end), self.left_end))
        else:
            assert self.right_end is not None  # for the type checker
            self.tiles.append(PlacedTile(self.right_end, tile.other_pip(self.right_end)))
        return side

    def _choose_side(
        self, tile: Tile, sides: list[Side], side_hint: Optional[Side]
    ) -> Side:
        if side_hint is None or side_hint == Side.CENTER:
            return Side.RIGHT if Side.RIGHT in sides else Side.LEFT
        if side_hint not in sides:
            end = self.left_end if side_hint == Side.LEFT else self.right_end
            raise IllegalMoveError(
                f"Tile {tile} does not fit the {side_hint} end (open pip {end})."
            )
        return side_hint
