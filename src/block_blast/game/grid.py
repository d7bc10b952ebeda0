from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

import numpy as np

from .pieces import PieceType, shape_of


Coordinate = Tuple[int, int]


@dataclass
class ClearedRegions:
    """Full regions found on the board.

    Subgrids are given as (sub_x, sub_y) block indices, not cell coordinates.
    """

    rows: List[int] = field(default_factory=list)
    cols: List[int] = field(default_factory=list)
    subgrids: List[Tuple[int, int]] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.rows) + len(self.cols) + len(self.subgrids)

    def __bool__(self) -> bool:
        return self.total > 0


class GameGrid:
    """Square board of shape identifiers.

    The grid uses 0 for empty cells; any other value is the PieceType of the
    shape that filled the cell. Indexing is grid[y, x].
    """

    def __init__(self, size: int = 9, subgrid_size: int = 3) -> None:
        if size % subgrid_size != 0:
            raise ValueError(f"grid size {size} is not a multiple of subgrid size {subgrid_size}")
        self.size = int(size)
        self.subgrid_size = int(subgrid_size)
        self.grid = np.zeros((self.size, self.size), dtype=np.int8)

    def reset(self) -> None:
        self.grid.fill(0)

    def is_inside(self, x: int, y: int) -> bool:
        return 0 <= x < self.size and 0 <= y < self.size

    def is_empty(self, x: int, y: int) -> bool:
        return self.grid[y, x] == 0

    def cell(self, x: int, y: int) -> Optional[PieceType]:
        value = int(self.grid[y, x])
        return PieceType(value) if value else None

    def can_place(self, cells: Iterable[Coordinate]) -> bool:
        for x, y in cells:
            if not self.is_inside(x, y):
                return False
            if self.grid[y, x] != 0:
                return False
        return True

    def write(self, cells: Iterable[Coordinate], piece_type: PieceType) -> None:
        """Fill cells with `piece_type`. Assumes the cells were validated."""
        for x, y in cells:
            self.grid[y, x] = int(piece_type)

    def is_row_full(self, y: int) -> bool:
        return bool(np.all(self.grid[y, :] != 0))

    def is_col_full(self, x: int) -> bool:
        return bool(np.all(self.grid[:, x] != 0))

    def _subgrid_slice(self, sub_x: int, sub_y: int) -> Tuple[slice, slice]:
        n = self.subgrid_size
        return slice(sub_y * n, (sub_y + 1) * n), slice(sub_x * n, (sub_x + 1) * n)

    def is_subgrid_full(self, sub_x: int, sub_y: int) -> bool:
        return bool(np.all(self.grid[self._subgrid_slice(sub_x, sub_y)] != 0))

    def full_regions(self) -> ClearedRegions:
        blocks = self.size // self.subgrid_size
        return ClearedRegions(
            rows=[y for y in range(self.size) if self.is_row_full(y)],
            cols=[x for x in range(self.size) if self.is_col_full(x)],
            subgrids=[
                (sub_x, sub_y)
                for sub_y in range(blocks)
                for sub_x in range(blocks)
                if self.is_subgrid_full(sub_x, sub_y)
            ],
        )

    def clear(self, regions: ClearedRegions) -> int:
        """Empty every cell of the given regions and return how many cells were freed."""
        before = int(np.count_nonzero(self.grid))
        for y in regions.rows:
            self.grid[y, :] = 0
        for x in regions.cols:
            self.grid[:, x] = 0
        for sub_x, sub_y in regions.subgrids:
            self.grid[self._subgrid_slice(sub_x, sub_y)] = 0
        return before - int(np.count_nonzero(self.grid))

    def valid_origins(self, piece_type: PieceType) -> List[Coordinate]:
        shape = shape_of(piece_type)
        return [
            (x, y)
            for y in range(self.size)
            for x in range(self.size)
            if self.can_place(shape.cells_at(x, y))
        ]

    def filled_ratio(self) -> float:
        return float(np.count_nonzero(self.grid)) / float(self.size * self.size)

    def occupancy(self) -> np.ndarray:
        return (self.grid != 0).astype(np.int8)

    def clone_state(self) -> np.ndarray:
        return self.grid.copy()
