"""Game module for Block Blast.

Exports the core game engine and supporting classes:
- PieceType / PieceShape: the fixed catalog of 20 polyomino shapes
- PieceBag: shuffle-bag piece supplier
- GameGrid: 9x9 board, placement checks and row/column/subgrid clearing
- ScoringRules: placement, combo and streak scoring
- FileHighScoreStorage / MemoryHighScoreStorage: high score persistence
- BlockBlastGame: game state and turn handling
"""

from .pieces import (
    BLOCK_SHAPES,
    PieceShape,
    PieceType,
    all_piece_types,
    cell_count,
    parse_piece_type,
    shape_of,
)
from .supplier import PieceBag
from .grid import ClearedRegions, GameGrid
from .rules import ClearScore, ScoringRules
from .storage import FileHighScoreStorage, HighScoreStorage, MemoryHighScoreStorage
from .core import BlockBlastGame, ClearResult, GameConfig, PlacementResult, ScoreEvent

__all__ = [
    "BLOCK_SHAPES",
    "PieceShape",
    "PieceType",
    "all_piece_types",
    "cell_count",
    "parse_piece_type",
    "shape_of",
    "PieceBag",
    "ClearedRegions",
    "GameGrid",
    "ClearScore",
    "ScoringRules",
    "FileHighScoreStorage",
    "HighScoreStorage",
    "MemoryHighScoreStorage",
    "BlockBlastGame",
    "ClearResult",
    "GameConfig",
    "PlacementResult",
    "ScoreEvent",
]
