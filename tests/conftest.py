import pytest

from game import Board


@pytest.fixture
def board():
    """Empty 9x9 board, five in a row, player 0 to move."""
    return Board(width=9, height=9, n_in_row=5, start_player=0)


@pytest.fixture
def small_board():
    """Empty 3x3 board, three in a row, player 0 to move."""
    return Board(width=3, height=3, n_in_row=3, start_player=0)
