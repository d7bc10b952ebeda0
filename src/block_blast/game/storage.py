from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Protocol, Union


logger = logging.getLogger(__name__)

HIGH_SCORE_KEY = "woodenBlocksHighScore"


class HighScoreStorage(Protocol):
    def load(self) -> int: ...

    def save(self, high_score: int) -> None: ...


class MemoryHighScoreStorage:
    """Keeps the high score for the lifetime of the process only."""

    def __init__(self, high_score: int = 0) -> None:
        self.high_score = int(high_score)
        self.saves = 0

    def load(self) -> int:
        return self.high_score

    def save(self, high_score: int) -> None:
        self.high_score = int(high_score)
        self.saves += 1


class FileHighScoreStorage:
    """JSON key/value file holding the high score as a decimal string.

    Read and write failures never propagate: a missing or unreadable file
    loads as 0, and a failed save is logged and ignored.
    """

    def __init__(self, path: Union[str, Path], key: str = HIGH_SCORE_KEY) -> None:
        self.path = Path(path)
        self.key = key

    def _read_payload(self) -> dict:
        with self.path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
        if not isinstance(payload, dict):
            raise ValueError("high score file does not hold an object")
        return payload

    def load(self) -> int:
        try:
            payload = self._read_payload()
        except FileNotFoundError:
            return 0
        except (OSError, ValueError) as exc:
            logger.warning("Could not read high score from %s: %s", self.path, exc)
            return 0
        raw = payload.get(self.key)
        if raw is None:
            return 0
        try:
            return max(0, int(raw))
        except (TypeError, ValueError):
            logger.warning("Ignoring malformed high score %r in %s", raw, self.path)
            return 0

    def save(self, high_score: int) -> None:
        # Keep other keys already stored in the file
        try:
            payload = self._read_payload()
        except (OSError, ValueError):
            payload = {}
        payload[self.key] = str(int(high_score))
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("w", encoding="utf-8") as handle:
                json.dump(payload, handle, indent=2)
        except OSError as exc:
            logger.warning("Could not save high score to %s: %s", self.path, exc)
