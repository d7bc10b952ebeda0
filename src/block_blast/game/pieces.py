from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, List, Tuple, Union

import numpy as np


Offset = Tuple[int, int]


class PieceType(IntEnum):
    # Values start at 1 so that 0 can mark an empty board cell
    SINGLE = 1
    HORIZONTAL_2 = 2
    HORIZONTAL_3 = 3
    HORIZONTAL_4 = 4
    HORIZONTAL_5 = 5
    VERTICAL_2 = 6
    VERTICAL_3 = 7
    VERTICAL_4 = 8
    VERTICAL_5 = 9
    SQUARE_2X2 = 10
    SQUARE_3X3 = 11
    L_SHAPE = 12
    L_SHAPE_MIRROR = 13
    L_SHAPE_LARGE = 14
    L_SHAPE_LARGE_MIRROR = 15
    T_SHAPE = 16
    Z_SHAPE = 17
    Z_SHAPE_MIRROR = 18
    U_SHAPE = 19
    CROSS = 20


@dataclass(frozen=True)
class PieceShape:
    """Fixed polyomino definition.

    Offsets are (dx, dy) relative to the top-left corner of the bounding box.
    """

    cells: Tuple[Offset, ...]
    width: int
    height: int
    color: str
    border_color: str

    @property
    def cell_count(self) -> int:
        return len(self.cells)

    def cells_at(self, origin_x: int, origin_y: int) -> List[Tuple[int, int]]:
        return [(origin_x + dx, origin_y + dy) for dx, dy in self.cells]

    def to_array(self) -> np.ndarray:
        mask = np.zeros((self.height, self.width), dtype=np.int8)
        for dx, dy in self.cells:
            mask[dy, dx] = 1
        return mask


def _hex_to_rgb(value: str) -> Tuple[int, int, int]:
    value = value.lstrip("#")
    return int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16)


BLUE = ("#3CA3DE", "#3B82AC")
PINK = ("#F555AD", "#BE3A82")
RED = ("#FA5053", "#DE3638")
ORANGE = ("#F99825", "#E06917")
GREEN = ("#86BD42", "#629E12")
PURPLE = ("#B57CE3", "#8A5BB6")
TEAL = ("#52CCBC", "#239E90")


def _shape(cells: List[Offset], width: int, height: int, colors: Tuple[str, str]) -> PieceShape:
    return PieceShape(tuple(cells), width, height, colors[0], colors[1])


BLOCK_SHAPES: Dict[PieceType, PieceShape] = {
    # Bars
    PieceType.SINGLE: _shape([(0, 0)], 1, 1, BLUE),
    PieceType.HORIZONTAL_2: _shape([(0, 0), (1, 0)], 2, 1, PINK),
    PieceType.HORIZONTAL_3: _shape([(0, 0), (1, 0), (2, 0)], 3, 1, RED),
    PieceType.HORIZONTAL_4: _shape([(0, 0), (1, 0), (2, 0), (3, 0)], 4, 1, ORANGE),
    PieceType.HORIZONTAL_5: _shape([(0, 0), (1, 0), (2, 0), (3, 0), (4, 0)], 5, 1, GREEN),
    PieceType.VERTICAL_2: _shape([(0, 0), (0, 1)], 1, 2, PINK),
    PieceType.VERTICAL_3: _shape([(0, 0), (0, 1), (0, 2)], 1, 3, RED),
    PieceType.VERTICAL_4: _shape([(0, 0), (0, 1), (0, 2), (0, 3)], 1, 4, ORANGE),
    PieceType.VERTICAL_5: _shape([(0, 0), (0, 1), (0, 2), (0, 3), (0, 4)], 1, 5, GREEN),
    # Squares
    PieceType.SQUARE_2X2: _shape([(0, 0), (1, 0), (0, 1), (1, 1)], 2, 2, PURPLE),
    PieceType.SQUARE_3X3: _shape(
        [(0, 0), (1, 0), (2, 0), (0, 1), (1, 1), (2, 1), (0, 2), (1, 2), (2, 2)], 3, 3, TEAL
    ),
    # L shapes
    PieceType.L_SHAPE: _shape([(0, 0), (0, 1), (0, 2), (1, 2)], 2, 3, BLUE),
    PieceType.L_SHAPE_MIRROR: _shape([(1, 0), (1, 1), (1, 2), (0, 2)], 2, 3, BLUE),
    PieceType.L_SHAPE_LARGE: _shape([(0, 0), (0, 1), (0, 2), (0, 3), (1, 3)], 2, 4, PINK),
    PieceType.L_SHAPE_LARGE_MIRROR: _shape([(1, 0), (1, 1), (1, 2), (1, 3), (0, 3)], 2, 4, PINK),
    PieceType.T_SHAPE: _shape([(1, 0), (0, 1), (1, 1), (2, 1)], 3, 2, RED),
    # Z / S
    PieceType.Z_SHAPE: _shape([(0, 0), (1, 0), (1, 1), (2, 1)], 3, 2, ORANGE),
    PieceType.Z_SHAPE_MIRROR: _shape([(1, 0), (2, 0), (0, 1), (1, 1)], 3, 2, ORANGE),
    PieceType.U_SHAPE: _shape([(0, 0), (2, 0), (0, 1), (1, 1), (2, 1)], 3, 2, GREEN),
    PieceType.CROSS: _shape([(1, 0), (0, 1), (1, 1), (2, 1), (1, 2)], 3, 3, PURPLE),
}


def _validate_catalog() -> None:
    missing = [t.name for t in PieceType if t not in BLOCK_SHAPES]
    if missing:
        raise RuntimeError(f"pieces without a shape definition: {missing}")
    for piece_type, shape in BLOCK_SHAPES.items():
        if len(set(shape.cells)) != len(shape.cells):
            raise RuntimeError(f"{piece_type.name} has duplicate offsets")
        for dx, dy in shape.cells:
            if not (0 <= dx < shape.width and 0 <= dy < shape.height):
                raise RuntimeError(f"{piece_type.name} offset {(dx, dy)} outside its bounding box")


_validate_catalog()


def all_piece_types() -> List[PieceType]:
    return list(PieceType)


def shape_of(piece_type: PieceType) -> PieceShape:
    return BLOCK_SHAPES[piece_type]


def cell_count(piece_type: PieceType) -> int:
    return BLOCK_SHAPES[piece_type].cell_count


def shape_rgb(piece_type: PieceType) -> Tuple[Tuple[int, int, int], Tuple[int, int, int]]:
    """(fill, border) colors of a piece as RGB tuples for pygame."""
    shape = BLOCK_SHAPES[piece_type]
    return _hex_to_rgb(shape.color), _hex_to_rgb(shape.border_color)


def parse_piece_type(value: Union[PieceType, int, str]) -> PieceType:
    """Resolve an int value or a name to a PieceType.

    Raises ValueError for anything that is not in the catalog.
    """
    if isinstance(value, PieceType):
        return value
    if isinstance(value, bool):
        raise ValueError(f"unknown piece type: {value!r}")
    if isinstance(value, (int, np.integer)):
        try:
            return PieceType(int(value))
        except ValueError:
            raise ValueError(f"unknown piece type: {value!r}") from None
    if isinstance(value, str):
        try:
            return PieceType[value.strip().upper()]
        except KeyError:
            raise ValueError(f"unknown piece type: {value!r}") from None
    raise ValueError(f"unknown piece type: {value!r}")
