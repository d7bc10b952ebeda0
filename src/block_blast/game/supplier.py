from __future__ import annotations

import logging
import random
from typing import List, Optional

from .pieces import PieceType, all_piece_types


logger = logging.getLogger(__name__)


class PieceBag:
    """Shuffle-bag piece generator.

    Every shape is dealt exactly once per bag, so no shape can go missing for
    more than two bags in a row.
    """

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.rng = rng or random.Random()
        self.bag: List[PieceType] = []
        self.refill_bag()

    @property
    def remaining(self) -> int:
        return len(self.bag)

    def refill_bag(self) -> None:
        self.bag = all_piece_types()
        self._shuffle()
        logger.debug("Refilled piece bag with %d shapes", len(self.bag))

    def _shuffle(self) -> None:
        # Fisher-Yates
        for i in range(len(self.bag) - 1, 0, -1):
            j = self.rng.randrange(i + 1)
            self.bag[i], self.bag[j] = self.bag[j], self.bag[i]

    def draw_one(self) -> PieceType:
        if not self.bag:
            self.refill_bag()
        return self.bag.pop()

    def draw_three(self) -> List[PieceType]:
        # May cross a refill boundary
        return [self.draw_one(), self.draw_one(), self.draw_one()]
