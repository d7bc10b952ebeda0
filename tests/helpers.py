"""Shared builders for game tests."""
from __future__ import annotations

import random
from typing import Iterable, List, Optional, Tuple

from block_blast.game import BlockBlastGame, GameConfig, MemoryHighScoreStorage, PieceType


def make_game(seed: int = 0, storage: Optional[MemoryHighScoreStorage] = None) -> BlockBlastGame:
    return BlockBlastGame(GameConfig(random_seed=seed), storage=storage or MemoryHighScoreStorage())


def fill_cells(game: BlockBlastGame, cells: Iterable[Tuple[int, int]],
               piece_type: PieceType = PieceType.SINGLE) -> None:
    """Mark cells as occupied without going through placement."""
    for x, y in cells:
        game.grid.grid[y, x] = int(piece_type)


def offer(game: BlockBlastGame, pieces: List[PieceType]) -> None:
    game.available_pieces = list(pieces)


def random_board(game: BlockBlastGame, rng: random.Random, density: float = 0.4) -> None:
    size = game.grid.size
    for y in range(size):
        for x in range(size):
            game.grid.grid[y, x] = rng.randint(1, len(PieceType)) if rng.random() < density else 0
