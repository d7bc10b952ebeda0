from __future__ import annotations

import argparse
import logging
import random
from typing import Optional

import gymnasium as gym

import block_blast.env  # noqa: F401  ensure registration


def run_random(episodes: int = 5, seed: Optional[int] = None) -> list[int]:
    """Play whole games picking uniformly among valid placements."""
    env = gym.make("BlockBlast-9x9-v0")
    rng = random.Random(seed)
    scores: list[int] = []
    obs, info = env.reset(seed=seed)
    for _ in range(episodes):
        done = False
        while not done:
            valid = info.get("valid_actions", [])
            if valid:
                action = rng.choice(valid)
            else:
                action = env.action_space.sample()
            obs, reward, terminated, truncated, info = env.step(action)
            done = terminated or truncated
        scores.append(int(info["score"]))
        obs, info = env.reset()
    env.close()
    return scores


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Play Block Blast with a random agent")
    p.add_argument("--episodes", type=int, default=5)
    p.add_argument("--seed", type=int, default=None)
    return p


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    args = build_parser().parse_args()
    scores = run_random(args.episodes, args.seed)
    print(f"Random agent scores: {scores} (mean {sum(scores) / max(1, len(scores)):.1f})")


if __name__ == "__main__":  # pragma: no cover
    main()
