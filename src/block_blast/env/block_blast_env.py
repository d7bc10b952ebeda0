from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from block_blast.game import BlockBlastGame, GameConfig, PieceType
from block_blast.game.pieces import shape_rgb

SLOTS = 3


def _compute_action_mask(game: BlockBlastGame) -> np.ndarray:
    size = game.grid.size
    mask = np.zeros((SLOTS, size, size), dtype=np.bool_)
    for slot, x, y in game.get_valid_actions():
        mask[slot, y, x] = True
    return mask


class BlockBlastEnv(gym.Env):
    """Gymnasium view of a BlockBlastGame.

    Action is (slot, x, y): place the offered piece in `slot` with its
    top-left corner at (x, y). Invalid actions leave the game untouched and
    are penalized.
    """

    metadata = {"render_modes": ["rgb_array"], "render_fps": 30}

    def __init__(self, config: Optional[GameConfig] = None, render_mode: Optional[str] = None,
                 reward_weights: Optional[Dict[str, float]] = None,
                 invalid_action_penalty: float = -1.0,
                 step_penalty: float = 0.0,
                 terminal_penalty: float = 0.0) -> None:
        super().__init__()
        self.game = BlockBlastGame(config)
        self.render_mode = render_mode

        self.invalid_action_penalty = float(invalid_action_penalty)
        self.step_penalty = float(step_penalty)
        self.terminal_penalty = float(terminal_penalty)
        self.reward_weights: Dict[str, float] = {
            "points": 0.1,       # engine score gained (placement + clears)
            "regions": 1.0,      # per row/column/subgrid cleared
        }
        if reward_weights:
            self.reward_weights.update({k: float(v) for k, v in reward_weights.items()})

        size = self.game.grid.size
        self.observation_space = spaces.Dict(
            {
                "grid": spaces.Box(low=0, high=1, shape=(size, size), dtype=np.int8),
                "pieces": spaces.Box(low=-1, high=len(PieceType), shape=(SLOTS,), dtype=np.int8),
                "pieces_remaining": spaces.Discrete(SLOTS + 1),
            }
        )
        self.action_space = spaces.MultiDiscrete((SLOTS, size, size))

        self._steps = 0

    def _get_obs(self) -> Dict[str, Any]:
        pieces = np.full((SLOTS,), -1, dtype=np.int8)
        for i, piece_type in enumerate(self.game.available_pieces[:SLOTS]):
            pieces[i] = int(piece_type)
        return {
            "grid": self.game.grid.occupancy(),
            "pieces": pieces,
            "pieces_remaining": len(self.game.available_pieces),
        }

    def _get_info(self) -> Dict[str, Any]:
        return {
            "action_mask": _compute_action_mask(self.game),
            "valid_actions": self.game.get_valid_actions(),
            "score": self.game.score,
            "streak": self.game.streak,
            "steps": self._steps,
        }

    def get_action_mask(self) -> np.ndarray:
        return _compute_action_mask(self.game)

    def reset(self, *, seed: Optional[int] = None, options: Optional[dict] = None) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        super().reset(seed=seed)
        if seed is not None:
            self.game.seed(seed)
        self.game.reset_game()
        self._steps = 0
        return self._get_obs(), self._get_info()

    def step(self, action):
        slot, x, y = map(int, action)
        self._steps += 1

        reward_components: Dict[str, float] = {}
        gained = 0
        if 0 <= slot < len(self.game.available_pieces):
            result = self.game.place_block(self.game.available_pieces[slot], x, y)
        else:
            result = None

        if result:
            gained = result.points
            regions = result.clear.total_cleared if result.clear is not None else 0
            reward_components["points"] = self.reward_weights["points"] * float(gained)
            reward_components["regions"] = self.reward_weights["regions"] * float(regions)
        else:
            reward_components["invalid"] = self.invalid_action_penalty

        reward_components["step"] = self.step_penalty
        terminated = bool(self.game.game_over)
        truncated = self._steps >= self.game.config.max_episode_steps
        if terminated:
            reward_components["terminal"] = self.terminal_penalty

        reward = float(sum(reward_components.values()))
        info = self._get_info()
        info["reward_components"] = reward_components
        info["engine_score_delta"] = float(gained)
        return self._get_obs(), reward, terminated, truncated, info

    def render(self) -> Optional[np.ndarray]:
        if self.render_mode != "rgb_array":
            return None
        grid = self.game.grid.grid
        cell = 12
        h, w = grid.shape
        img = np.zeros((h * cell, w * cell, 3), dtype=np.uint8)
        for y in range(h):
            for x in range(w):
                value = int(grid[y, x])
                color = shape_rgb(PieceType(value))[0] if value else (30, 30, 36)
                img[y * cell : (y + 1) * cell - 1, x * cell : (x + 1) * cell - 1, :] = color
        return img

    def close(self) -> None:
        pass
