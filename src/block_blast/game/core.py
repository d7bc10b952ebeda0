from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from .grid import ClearedRegions, Coordinate, GameGrid
from .pieces import PieceType, parse_piece_type, shape_of
from .rules import ClearScore, ScoringRules
from .storage import HighScoreStorage, MemoryHighScoreStorage
from .supplier import PieceBag


logger = logging.getLogger(__name__)

PieceLike = Union[PieceType, int, str]


@dataclass
class GameConfig:
    grid_size: int = 9
    subgrid_size: int = 3
    random_seed: Optional[int] = None
    max_episode_steps: int = 10000


@dataclass
class ScoreEvent:
    points: int
    kind: str
    details: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ClearResult:
    regions: ClearedRegions
    total_cleared: int
    streak: int
    score: ClearScore
    cells_cleared: int = 0
    event: Optional[ScoreEvent] = None


@dataclass
class PlacementResult:
    success: bool
    piece: Optional[PieceType] = None
    origin: Tuple[int, int] = (0, 0)
    reason: Optional[str] = None
    cells: List[Coordinate] = field(default_factory=list)
    placement_points: int = 0
    clear: Optional[ClearResult] = None
    refilled: bool = False
    game_over: bool = False
    events: List[ScoreEvent] = field(default_factory=list)

    @property
    def points(self) -> int:
        clear_points = self.clear.score.total_score if self.clear is not None else 0
        return self.placement_points + clear_points

    def __bool__(self) -> bool:
        return self.success


class BlockBlastGame:
    """9x9 block placement game.

    Each turn one of the offered pieces is placed on the board. Full rows,
    columns and 3x3 subgrids are cleared and scored; the tray is refilled
    once all offered pieces are used. The game ends when no offered piece
    fits anywhere.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rules: Optional[ScoringRules] = None,
        storage: Optional[HighScoreStorage] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.config = config or GameConfig()
        self.rules = rules or ScoringRules()
        self.storage = storage if storage is not None else MemoryHighScoreStorage()
        self.rng = rng or random.Random(self.config.random_seed)
        self.grid = GameGrid(self.config.grid_size, self.config.subgrid_size)
        self.bag = PieceBag(self.rng)

        self.score = 0
        self.high_score = self._load_high_score()
        self.streak = 0
        self.best_streak = 0
        self.game_over = False
        self.available_pieces: List[PieceType] = []
        self.total_pieces_placed = 0
        self.total_regions_cleared = 0

        self.generate_new_pieces()

    def _load_high_score(self) -> int:
        try:
            return max(0, int(self.storage.load()))
        except (OSError, TypeError, ValueError) as exc:
            logger.warning("Could not load high score, starting from 0: %s", exc)
            return 0

    def seed(self, seed: Optional[int]) -> None:
        """Reseed the piece supplier and start a fresh bag."""
        self.rng.seed(seed)
        self.bag.refill_bag()

    def generate_new_pieces(self) -> None:
        self.available_pieces = self.bag.draw_three()
        logger.debug("New pieces offered: %s", [p.name for p in self.available_pieces])

    def _resolve(self, piece: PieceLike) -> Optional[PieceType]:
        try:
            return parse_piece_type(piece)
        except ValueError:
            logger.warning("Rejected unknown piece type %r", piece)
            return None

    def is_valid_placement(self, piece: PieceLike, origin_x: int, origin_y: int) -> bool:
        piece_type = self._resolve(piece)
        if piece_type is None:
            return False
        return self.grid.can_place(shape_of(piece_type).cells_at(origin_x, origin_y))

    def can_place_anywhere(self, piece: PieceLike) -> bool:
        piece_type = self._resolve(piece)
        if piece_type is None:
            return False
        for y in range(self.grid.size):
            for x in range(self.grid.size):
                if self.is_valid_placement(piece_type, x, y):
                    return True
        return False

    def place_block(self, piece: PieceLike, origin_x: int, origin_y: int) -> PlacementResult:
        origin = (int(origin_x), int(origin_y))
        piece_type = self._resolve(piece)
        if piece_type is None:
            return PlacementResult(False, origin=origin, reason="unknown_piece", game_over=self.game_over)
        if piece_type not in self.available_pieces:
            logger.debug("%s is not among the offered pieces", piece_type.name)
            return PlacementResult(
                False, piece=piece_type, origin=origin, reason="not_offered", game_over=self.game_over
            )
        if not self.is_valid_placement(piece_type, *origin):
            logger.debug("%s does not fit at %s", piece_type.name, origin)
            return PlacementResult(
                False, piece=piece_type, origin=origin, reason="invalid", game_over=self.game_over
            )

        cells = shape_of(piece_type).cells_at(*origin)
        self.grid.write(cells, piece_type)
        # list.remove drops the first matching entry
        self.available_pieces.remove(piece_type)
        self.total_pieces_placed += 1

        placement_points = self.rules.placement_score(piece_type)
        events = [self.add_score(placement_points, "place")]

        clear = self._check_and_clear()
        if clear is not None:
            events.append(clear.event)

        refilled = False
        if not self.available_pieces:
            self.generate_new_pieces()
            refilled = True

        self.check_game_over()
        return PlacementResult(
            True,
            piece=piece_type,
            origin=origin,
            cells=cells,
            placement_points=placement_points,
            clear=clear,
            refilled=refilled,
            game_over=self.game_over,
            events=events,
        )

    def _check_and_clear(self) -> Optional[ClearResult]:
        regions = self.grid.full_regions()
        total = regions.total
        if total == 0:
            self.streak = 0
            return None

        self.streak += 1
        self.best_streak = max(self.best_streak, self.streak)
        score = self.rules.clear_score(total, self.streak)
        event = self.add_score(
            score.total_score,
            "clear",
            combo=total,
            combo_multiplier=score.combo_multiplier,
            streak_bonus=score.streak_bonus,
        )
        cells_cleared = self.grid.clear(regions)
        self.total_regions_cleared += total
        logger.debug(
            "Cleared rows=%s cols=%s subgrids=%s (streak %d, +%d)",
            regions.rows, regions.cols, regions.subgrids, self.streak, score.total_score,
        )
        return ClearResult(regions, total, self.streak, score, cells_cleared, event)

    def add_score(self, points: int, kind: str, **details: Any) -> ScoreEvent:
        self.score += points
        if self.score > self.high_score:
            self.high_score = self.score
            logger.debug("New high score: %d", self.high_score)
            try:
                self.storage.save(self.high_score)
            except OSError as exc:
                logger.warning("Could not save high score %d: %s", self.high_score, exc)
        return ScoreEvent(points, kind, details)

    def check_game_over(self) -> bool:
        if self.game_over:
            return True
        for piece_type in self.available_pieces:
            if self.can_place_anywhere(piece_type):
                return False
        self.game_over = True
        logger.info("Game over with score %d (high score %d)", self.score, self.high_score)
        return True

    def get_valid_actions(self) -> List[Tuple[int, int, int]]:
        """List of (slot, x, y) placements for every offered piece."""
        actions: List[Tuple[int, int, int]] = []
        for slot, piece_type in enumerate(self.available_pieces):
            for x, y in self.grid.valid_origins(piece_type):
                actions.append((slot, x, y))
        return actions

    def reset_game(self) -> None:
        self.score = 0
        self.streak = 0
        self.best_streak = 0
        self.game_over = False
        self.total_pieces_placed = 0
        self.total_regions_cleared = 0
        self.grid.reset()
        self.generate_new_pieces()

    def get_state(self) -> dict:
        return {
            "grid": self.grid.clone_state(),
            "available_pieces": list(self.available_pieces),
            "score": self.score,
            "high_score": self.high_score,
            "streak": self.streak,
            "game_over": self.game_over,
            "filled_ratio": self.grid.filled_ratio(),
        }

    def get_game_stats(self) -> dict:
        return {
            "final_score": self.score,
            "high_score": self.high_score,
            "pieces_placed": self.total_pieces_placed,
            "regions_cleared": self.total_regions_cleared,
            "best_streak": self.best_streak,
            "final_fill_ratio": self.grid.filled_ratio(),
            "avg_score_per_piece": self.score / max(1, self.total_pieces_placed),
        }
