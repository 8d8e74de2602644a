"""
Gomoku (k in a row) against a Monte Carlo Tree Search player.

Usage:
    # Play against the MCTS player (9x9, five in a row, 10000 playouts)
    python play.py play

    # Let the MCTS player think less and show its top moves
    python play.py play --n-playout 2000 --verbose

    # Two humans on one terminal
    python play.py human

    # Evaluate MCTS against a random player
    python play.py evaluate --num-games 20 --n-playout 1000
"""

from game import Board
from policy import uniform_prior_policy, random_rollout_policy
from mcts import MCTS, SearchTree
from play import MCTSPlayer, HumanPlayer, play_game

__all__ = [
    'Board',
    'uniform_prior_policy',
    'random_rollout_policy',
    'MCTS',
    'SearchTree',
    'MCTSPlayer',
    'HumanPlayer',
    'play_game',
]
