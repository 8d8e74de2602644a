"""
Monte Carlo Tree Search with random rollouts for Gomoku.

The tree lives in an arena: nodes are addressed by integer handles, children
are stored as handles and parents as back-handles. Promoting a child to root
or discarding a subtree only touches handles, so no node is ever reachable
from two places.
"""
import logging
import math
import numpy as np
from tqdm import tqdm
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from game import Board, ConfigurationError, GomokuError, NO_MOVE
from policy import random_rollout_policy, uniform_prior_policy

logger = logging.getLogger(__name__)

NO_PARENT = -1

PolicyFn = Callable[[Board], Tuple[np.ndarray, np.ndarray]]


class SearchError(GomokuError, RuntimeError):
    """Raised when the search has no move to offer."""


class MCTSNode:
    """A node in the MCTS tree."""

    __slots__ = ['parent', 'children', 'visit_count', 'q_value', 'u', 'prior']

    def __init__(self, prior: float = 1.0, parent: int = NO_PARENT):
        self.prior = prior
        self.parent = parent
        self.children: Dict[int, int] = {}  # action -> handle
        self.visit_count = 0
        self.q_value = 0.0
        self.u = 0.0

    def is_leaf(self) -> bool:
        return len(self.children) == 0

    def is_root(self) -> bool:
        return self.parent == NO_PARENT

    def update(self, leaf_value: float):
        """Fold a leaf evaluation into the running mean Q."""
        self.visit_count += 1
        self.q_value += (leaf_value - self.q_value) / self.visit_count


class SearchTree:
    """
    Arena of MCTSNodes.

    Each node is owned by exactly one parent (the root by the tree itself).
    Values stored on a node are from the viewpoint of the player about to
    move at that node.
    """

    def __init__(self):
        self.nodes: List[Optional[MCTSNode]] = []
        self._free: List[int] = []
        self.root = self._allocate(1.0, NO_PARENT)

    def _allocate(self, prior: float, parent: int) -> int:
        node = MCTSNode(prior=prior, parent=parent)
        if self._free:
            handle = self._free.pop()
            self.nodes[handle] = node
        else:
            handle = len(self.nodes)
            self.nodes.append(node)
        return handle

    def __getitem__(self, handle: int) -> MCTSNode:
        node = self.nodes[handle] if 0 <= handle < len(self.nodes) else None
        if node is None:
            raise KeyError(f"Stale or unknown node handle: {handle}")
        return node

    def __len__(self) -> int:
        return len(self.nodes) - len(self._free)

    def expand(self, handle: int, candidates: Iterable[Tuple[int, float]]):
        """Add a child for every (action, prior) pair not already present."""
        children = self[handle].children
        for action, prior in candidates:
            action = int(action)
            if action not in children:
                children[action] = self._allocate(float(prior), handle)

    def value(self, handle: int, c_puct: float) -> float:
        """Q plus the exploration bonus u. Caches u on the node."""
        node = self[handle]
        parent_visits = self[node.parent].visit_count if node.parent != NO_PARENT else 0
        node.u = c_puct * node.prior * math.sqrt(parent_visits) / (1 + node.visit_count)
        return node.q_value + node.u

    def select(self, handle: int, c_puct: float) -> Tuple[int, int]:
        """Return (action, child handle) with the highest value."""
        best_value = -math.inf
        best_action = NO_MOVE
        best_child = NO_PARENT

        for action, child in self[handle].children.items():
            value = self.value(child, c_puct)
            if value > best_value:
                best_value = value
                best_action = action
                best_child = child

        return best_action, best_child

    def update(self, handle: int, leaf_value: float):
        self[handle].update(leaf_value)

    def update_recursive(self, handle: int, leaf_value: float):
        """Backpropagate up to the root, flipping the sign at every step."""
        value = leaf_value
        while handle != NO_PARENT:
            node = self[handle]
            node.update(value)
            value = -value
            handle = node.parent

    def prune(self, handle: int):
        """Detach a node from its parent and free its whole subtree."""
        node = self[handle]
        if node.parent != NO_PARENT:
            siblings = self[node.parent].children
            for action, child in siblings.items():
                if child == handle:
                    del siblings[action]
                    break
            node.parent = NO_PARENT

        stack = [handle]
        while stack:
            current = stack.pop()
            stack.extend(self.nodes[current].children.values())
            self.nodes[current] = None
            self._free.append(current)

    def promote(self, action: int) -> bool:
        """Make the root's child for `action` the new root, keeping its subtree."""
        old_root = self[self.root]
        child = old_root.children.pop(action, None)
        if child is None:
            return False

        self[child].parent = NO_PARENT
        self.prune(self.root)
        self.root = child
        return True

    def reset(self):
        """Drop the whole tree and start over from a fresh root."""
        self.prune(self.root)
        self.root = self._allocate(1.0, NO_PARENT)


class MCTS:
    """
    Plain MCTS: uniform priors at expansion, random rollouts to evaluate leaves.

    The tree is kept between moves; call advance() after every move actually
    played so the statistics of the matching subtree carry over.
    """

    def __init__(
        self,
        c_puct: float = 5.0,
        n_playout: int = 10000,
        prior_fn: PolicyFn = uniform_prior_policy,
        rollout_fn: PolicyFn = random_rollout_policy,
        round_limit: int = 1000,
        show_progress: bool = False,
    ):
        """
        Args:
            c_puct: Exploration constant, weight of the prior against Q
            n_playout: Number of playouts per move
            prior_fn: Policy giving expansion priors
            rollout_fn: Policy giving rollout scores
            round_limit: Maximum moves simulated in one rollout
            show_progress: Show a progress bar over the playouts
        """
        if c_puct <= 0:
            raise ConfigurationError(f"c_puct must be positive, got {c_puct}")
        if n_playout < 1:
            raise ConfigurationError(f"n_playout must be at least 1, got {n_playout}")
        if round_limit < 1:
            raise ConfigurationError(f"round_limit must be at least 1, got {round_limit}")

        self.c_puct = c_puct
        self.n_playout = n_playout
        self.prior_fn = prior_fn
        self.rollout_fn = rollout_fn
        self.round_limit = round_limit
        self.show_progress = show_progress
        self.tree = SearchTree()

    @property
    def root(self) -> MCTSNode:
        return self.tree[self.tree.root]

    def playout(self, board: Board):
        """Run one select -> expand -> rollout -> backup cycle on `board` (mutated)."""
        tree = self.tree
        node = tree.root

        # Selection
        while not tree[node].is_leaf():
            action, node = tree.select(node, self.c_puct)
            board.apply_move(action)

        # Expansion
        actions, priors = self.prior_fn(board)
        is_end, _ = board.check_end()
        if not is_end:
            tree.expand(node, zip(actions.tolist(), priors.tolist()))

        # The move into `node` was made by the opponent of the player to act here
        leaf_value = self.rollout(board)
        tree.update_recursive(node, -leaf_value)

    def rollout(self, board: Board, round_limit: Optional[int] = None) -> float:
        """
        Play the rollout policy greedily until the game ends.

        Returns:
            1 if the player to move at the start wins, -1 if they lose, 0 on a
            draw or when the round limit is reached
        """
        if round_limit is None:
            round_limit = self.round_limit
        player = board.current_player

        for _ in range(round_limit):
            is_end, winner = board.check_end()
            if is_end:
                break
            actions, scores = self.rollout_fn(board)
            board.apply_move(int(actions[np.argmax(scores)]))
        else:
            is_end, winner = board.check_end()
            if not is_end:
                logger.warning("Rollout reached the round limit (%d) without ending; scoring as a draw", round_limit)
                return 0.0

        if winner is None:
            return 0.0
        return 1.0 if winner == player else -1.0

    def get_action(self, board: Board) -> int:
        """Run n_playout playouts on copies of `board` and return the most visited move."""
        with tqdm(total=self.n_playout, desc="Playouts", leave=False, disable=not self.show_progress) as pbar:
            for _ in range(self.n_playout):
                self.playout(board.clone())
                pbar.update(1)

        root = self.root
        if root.is_leaf():
            raise SearchError("No move to choose: the root position is terminal")

        best_visits = -1
        best_action = NO_MOVE
        for action, child in root.children.items():
            visits = self.tree[child].visit_count
            if visits > best_visits:
                best_visits = visits
                best_action = action

        logger.debug("Chose move %d with %d/%d visits", best_action, best_visits, root.visit_count)
        return best_action

    def get_visit_counts(self, action_space: int) -> np.ndarray:
        """Visit counts of the root's children, indexed by move."""
        visits = np.zeros(action_space)
        for action, child in self.root.children.items():
            visits[action] = self.tree[child].visit_count
        return visits

    def advance(self, action: int):
        """Move the root past `action`, reusing its subtree when it was explored."""
        if action == NO_MOVE or not self.tree.promote(action):
            self.tree.reset()


if __name__ == '__main__':
    import time

    logging.basicConfig(level=logging.INFO)

    board = Board(width=9, height=9, n_in_row=5)
    for n_playout in [100, 1000, 10000]:
        mcts = MCTS(c_puct=5, n_playout=n_playout)
        start = time.perf_counter()
        action = mcts.get_action(board)
        elapsed = time.perf_counter() - start
        print(f"n_playout={n_playout:5d}: move {board.move_to_location(action)} "
              f"in {elapsed:.2f}s ({n_playout/elapsed:.0f} playouts/sec), tree size {len(mcts.tree)}")
