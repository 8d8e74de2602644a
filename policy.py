"""
Built-in policies for the MCTS player.

Both take a Board and return two parallel arrays (actions, scores) over the
available moves. Neither mutates the board.
"""
import numpy as np
from typing import Optional, Tuple

from game import Board

_rng = np.random.default_rng()


def uniform_prior_policy(board: Board) -> Tuple[np.ndarray, np.ndarray]:
    """Prior used at expansion: every available move is equally likely."""
    actions = board.available_moves()
    if len(actions) == 0:
        return actions, np.zeros(0, dtype=np.float64)
    priors = np.full(len(actions), 1.0 / len(actions))
    return actions, priors


def random_rollout_policy(board: Board, rng: Optional[np.random.Generator] = None) -> Tuple[np.ndarray, np.ndarray]:
    """Scores used during simulation: fresh random numbers on every call."""
    if rng is None:
        rng = _rng
    actions = board.available_moves()
    return actions, rng.random(len(actions))
