from __future__ import annotations

import math
from dataclasses import dataclass

from .pieces import PieceType, cell_count


@dataclass
class ClearScore:
    base_score: int
    combo_multiplier: float
    combo_score: int
    streak_bonus: int
    total_score: int


@dataclass
class ScoringRules:
    points_per_region: int = 18
    combo_step: float = 0.5
    # Bonus for streaks of 2, 3, 4 and 5+ consecutive clearing placements
    streak_bonuses: tuple[int, int, int, int] = (10, 25, 45, 70)

    def placement_score(self, piece_type: PieceType) -> int:
        return cell_count(piece_type)

    def combo_multiplier(self, total_cleared: int) -> float:
        if total_cleared <= 1:
            return 1.0
        return 1 + (total_cleared - 1) * self.combo_step

    def combo_score(self, total_cleared: int) -> int:
        base = total_cleared * self.points_per_region
        return int(math.floor(base * self.combo_multiplier(total_cleared)))

    def streak_bonus(self, streak: int) -> int:
        if streak < 2:
            return 0
        index = min(streak, 1 + len(self.streak_bonuses)) - 2
        return self.streak_bonuses[index]

    def clear_score(self, total_cleared: int, streak: int) -> ClearScore:
        combo = self.combo_score(total_cleared)
        bonus = self.streak_bonus(streak)
        return ClearScore(
            base_score=total_cleared * self.points_per_region,
            combo_multiplier=self.combo_multiplier(total_cleared),
            combo_score=combo,
            streak_bonus=bonus,
            total_score=combo + bonus,
        )
