"""Block Blast: a 9x9 block placement puzzle."""

from block_blast.game import BlockBlastGame, GameConfig, PieceType

__all__ = ["BlockBlastGame", "GameConfig", "PieceType"]
