from __future__ import annotations

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from .block_blast_env import _compute_action_mask


class FlattenDiscreteActionWrapper(gym.ActionWrapper):
    """Exposes the (slot, x, y) placement action as a single Discrete index.

    Index ``i`` places tray slot ``i // size**2`` with its top-left corner at
    ``x = i % size``, ``y = (i // size) % size``. This is the C-order of the
    ``[slot, y, x]`` action mask, so ``get_action_mask()`` lines up with the
    flat indices. Indices pointing at an empty tray slot are always masked.
    """

    def __init__(self, env: gym.Env):
        super().__init__(env)
        assert isinstance(env.action_space, spaces.MultiDiscrete)
        slots, width, height = map(int, env.action_space.nvec)
        assert width == height, "board must be square"
        self.slots = slots
        self.size = width
        self.n = slots * width * height
        self.action_space = spaces.Discrete(self.n)

    def placement(self, index: int) -> tuple[int, int, int]:
        """Flat index -> (slot, x, y)."""
        slot, rest = divmod(int(index), self.size * self.size)
        y, x = divmod(rest, self.size)
        return slot, x, y

    def index_of(self, slot: int, x: int, y: int) -> int:
        return (slot * self.size + y) * self.size + x

    def action(self, action: int):  # type: ignore[override]
        return np.array(self.placement(action), dtype=np.int64)

    def get_action_mask(self) -> np.ndarray:
        return _compute_action_mask(self.env.unwrapped.game).reshape(-1)


class ResampleInvalidActionWrapper(gym.Wrapper):
    """Swaps an illegal flat placement for a random legal one.

    Lets vanilla PPO train without masking: the agent never pays the invalid
    action penalty while at least one offered piece still fits. Once nothing
    fits the episode has already terminated, so the action passes through.
    """

    def step(self, action):  # type: ignore[override]
        mask = self.get_action_mask()
        index = int(action)
        if 0 <= index < mask.shape[0] and not mask[index]:
            legal = np.flatnonzero(mask)
            if legal.size:
                action = int(self.np_random.choice(legal))
        return self.env.step(action)

    def get_action_mask(self) -> np.ndarray:
        if not hasattr(self.env, "get_action_mask"):
            raise AttributeError("ResampleInvalidActionWrapper needs a flattened action space")
        return self.env.get_action_mask()
