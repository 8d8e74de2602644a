"""
Gomoku board (exact k-in-a-row on a width x height grid).
Placement, move legality and win/draw detection.
"""
import numpy as np
from numba import njit
from typing import Optional, Tuple

EMPTY = -1
PLAYER_0 = 0
PLAYER_1 = 1
NO_MOVE = -1

# Axes scanned from the last move: horizontal, vertical, diagonal, anti-diagonal
DIRECTIONS = ((1, 0), (0, 1), (1, 1), (1, -1))


class GomokuError(Exception):
    """Base class for errors raised by the board and the search."""


class ConfigurationError(GomokuError, ValueError):
    """Raised when a board or engine is built with invalid parameters."""


class InvalidMoveError(GomokuError, ValueError):
    """Raised when a move is off the board or already taken."""


@njit(cache=True)
def count_run(states: np.ndarray, x: int, y: int, dx: int, dy: int) -> int:
    """Length of the run of same-owner stones through (x, y) along (dx, dy)."""
    height, width = states.shape
    player = states[y, x]
    count = 1
    # Positive direction
    i = 1
    while 0 <= x + dx * i < width and 0 <= y + dy * i < height and states[y + dy * i, x + dx * i] == player:
        count += 1
        i += 1
    # Negative direction
    i = 1
    while 0 <= x - dx * i < width and 0 <= y - dy * i < height and states[y - dy * i, x - dx * i] == player:
        count += 1
        i += 1
    return count


class Board:
    """
    Gomoku board.
    Cell representation:
        -1 = empty
         0 = player 0
         1 = player 1
    Moves are cell indices, move = y * width + x.
    """

    def __init__(self, width: int = 9, height: int = 9, n_in_row: int = 5, start_player: int = PLAYER_0):
        if n_in_row < 1:
            raise ConfigurationError(f"n_in_row must be positive, got {n_in_row}")
        if width < n_in_row or height < n_in_row:
            raise ConfigurationError(f"Board width and height cannot be less than {n_in_row}")
        if start_player not in (PLAYER_0, PLAYER_1):
            raise ConfigurationError(f"start_player must be 0 or 1, got {start_player}")

        self.width = width
        self.height = height
        self.n_in_row = n_in_row
        self.states = np.full((height, width), EMPTY, dtype=np.int8)
        self.availables = np.ones(width * height, dtype=bool)
        self.moves_left = width * height
        self.current_player = start_player
        self.last_move = NO_MOVE

    @property
    def size(self) -> int:
        return self.width * self.height

    def available_moves(self) -> np.ndarray:
        """Indices of the empty cells, ascending."""
        return np.flatnonzero(self.availables)

    def move_to_location(self, move: int) -> Tuple[int, int]:
        """Convert a move index to (x, y)."""
        return (move % self.width, move // self.width)

    def location_to_move(self, x: int, y: int) -> int:
        """Convert (x, y) to a move index."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise InvalidMoveError(f"Location ({x}, {y}) is off the board")
        return y * self.width + x

    def is_available(self, move: int) -> bool:
        if move < 0 or move >= self.size:
            return False
        return bool(self.availables[move])

    def apply_move(self, move: int):
        """Place a stone for the current player and pass the turn."""
        if not self.is_available(move):
            raise InvalidMoveError(f"Invalid move: {move}")

        x, y = self.move_to_location(move)
        self.states[y, x] = self.current_player
        self.availables[move] = False
        self.moves_left -= 1
        self.current_player = 1 - self.current_player
        self.last_move = move

    def check_end(self) -> Tuple[bool, Optional[int]]:
        """
        Check whether the game has ended.

        Returns:
            is_end: Whether the game is over
            winner: The winning player, None for a draw or an ongoing game
        """
        if self.last_move == NO_MOVE:
            return False, None

        x, y = self.move_to_location(self.last_move)
        player = int(self.states[y, x])
        for dx, dy in DIRECTIONS:
            if count_run(self.states, x, y, dx, dy) >= self.n_in_row:
                return True, player

        if self.moves_left == 0:
            return True, None
        return False, None

    def clone(self) -> 'Board':
        """Create a deep copy of the board."""
        board = Board.__new__(Board)
        board.width = self.width
        board.height = self.height
        board.n_in_row = self.n_in_row
        board.states = self.states.copy()
        board.availables = self.availables.copy()
        board.moves_left = self.moves_left
        board.current_player = self.current_player
        board.last_move = self.last_move
        return board

    def render(self) -> str:
        """Return a string representation of the board."""
        symbols = {EMPTY: '.', PLAYER_0: 'X', PLAYER_1: 'O'}
        pad = len(str(max(self.width, self.height) - 1))
        lines = []

        # Column headers
        lines.append(' '.join(f'{i:<{pad}d}' for i in range(self.width)))

        for y in range(self.height):
            row_str = ' '.join(f'{symbols[int(self.states[y, x])]:<{pad}}' for x in range(self.width))
            lines.append(f'{row_str} {y:<{pad}d}')

        return '\n'.join(lines)

    def __str__(self) -> str:
        return self.render()


if __name__ == '__main__':
    board = Board(width=9, height=9, n_in_row=5)
    print(board)

    # Player 0 lines up the top row, player 1 answers on the second
    moves = [0, 9, 1, 10, 2, 11, 3, 12, 4]
    for move in moves:
        board.apply_move(move)
        is_end, winner = board.check_end()
        if is_end:
            print(f"\nAfter move {move}:")
            print(board)
            print(f"Game over! Winner: {'Draw' if winner is None else f'Player {winner}'}")
            break
