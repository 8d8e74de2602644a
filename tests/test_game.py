import numpy as np
import pytest

from game import Board, ConfigurationError, EMPTY, InvalidMoveError, NO_MOVE, count_run


def play_moves(board, moves):
    """Apply moves in order, asserting the game only ends on the last one."""
    for i, move in enumerate(moves):
        board.apply_move(move)
        is_end, winner = board.check_end()
        if i < len(moves) - 1:
            assert not is_end, f"game ended early at move {move}"
    return board.check_end()


class TestConstruction:

    def test_empty_board(self, board):
        assert board.states.shape == (9, 9)
        assert np.all(board.states == EMPTY)
        assert board.available_moves().tolist() == list(range(81))
        assert board.last_move == NO_MOVE
        assert board.current_player == 0
        assert board.check_end() == (False, None)

    @pytest.mark.parametrize("width,height", [(4, 9), (9, 4), (3, 3)])
    def test_too_small_for_win_length(self, width, height):
        with pytest.raises(ConfigurationError):
            Board(width=width, height=height, n_in_row=5)

    def test_bad_start_player(self):
        with pytest.raises(ConfigurationError):
            Board(start_player=2)

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            Board(width=2, height=2, n_in_row=3)


class TestMoves:

    def test_location_round_trip(self):
        board = Board(width=7, height=5, n_in_row=5)
        assert board.location_to_move(3, 2) == 17
        assert board.move_to_location(17) == (3, 2)
        for move in range(board.size):
            assert board.location_to_move(*board.move_to_location(move)) == move

    @pytest.mark.parametrize("x,y", [(-1, 0), (0, -1), (9, 0), (0, 9)])
    def test_location_off_board(self, board, x, y):
        with pytest.raises(InvalidMoveError):
            board.location_to_move(x, y)

    def test_apply_move(self, board):
        board.apply_move(40)
        assert board.states[4, 4] == 0
        assert not board.is_available(40)
        assert 40 not in board.available_moves()
        assert board.moves_left == 80
        assert board.current_player == 1
        assert board.last_move == 40

        board.apply_move(41)
        assert board.states[4, 5] == 1
        assert board.current_player == 0

    @pytest.mark.parametrize("move", [-1, 81, 1000])
    def test_out_of_range_move(self, board, move):
        with pytest.raises(InvalidMoveError):
            board.apply_move(move)

    def test_occupied_move_leaves_board_untouched(self, board):
        board.apply_move(10)
        states = board.states.copy()
        with pytest.raises(InvalidMoveError):
            board.apply_move(10)
        assert np.array_equal(board.states, states)
        assert board.current_player == 1
        assert board.last_move == 10
        assert board.moves_left == 80

    def test_occupied_iff_unavailable(self, board):
        for move in [0, 80, 40, 13, 27]:
            board.apply_move(move)
        occupied = (board.states.flatten() != EMPTY)
        assert np.array_equal(occupied, ~board.availables)


class TestClone:

    def test_clone_is_independent(self, board):
        board.apply_move(0)
        copy = board.clone()
        copy.apply_move(1)
        copy.apply_move(2)

        assert board.states[0, 1] == EMPTY
        assert board.states[0, 2] == EMPTY
        assert board.is_available(1)
        assert board.current_player == 1
        assert board.last_move == 0
        assert board.moves_left == 80
        assert copy.last_move == 2

    def test_clone_copies_state(self, board):
        board.apply_move(5)
        copy = board.clone()
        assert np.array_equal(copy.states, board.states)
        assert np.array_equal(copy.availables, board.availables)
        assert copy.current_player == board.current_player
        assert copy.last_move == board.last_move
        assert (copy.width, copy.height, copy.n_in_row) == (9, 9, 5)


class TestCheckEnd:

    @pytest.mark.parametrize("own,other", [
        ([0, 1, 2, 3, 4], [72, 73, 74, 75]),        # horizontal
        ([0, 9, 18, 27, 36], [8, 17, 26, 35]),      # vertical
        ([0, 10, 20, 30, 40], [8, 17, 26, 35]),     # diagonal
        ([4, 12, 20, 28, 36], [80, 79, 78, 77]),    # anti-diagonal
        ([0, 1, 3, 4, 2], [72, 73, 74, 75]),        # completed in the middle
    ])
    def test_five_in_a_row_wins(self, board, own, other):
        moves = [m for pair in zip(own, other) for m in pair] + [own[-1]]
        assert play_moves(board, moves) == (True, 0)

    def test_four_in_a_row_does_not_end(self, board):
        for move in [0, 72, 1, 73, 2, 74, 3]:
            board.apply_move(move)
        assert board.check_end() == (False, None)

    def test_second_player_wins(self, board):
        moves = [80, 0, 79, 1, 60, 2, 61, 3, 70, 4]
        assert play_moves(board, moves) == (True, 1)

    def test_full_board_draw(self, small_board):
        # X O X / X O O / O X X
        assert play_moves(small_board, [0, 1, 2, 4, 3, 5, 7, 6, 8]) == (True, None)

    def test_win_on_last_cell_is_not_a_draw(self, small_board):
        assert play_moves(small_board, [0, 1, 4, 2, 5, 3, 7, 6, 8]) == (True, 0)

    def test_single_stone_wins_with_n_in_row_one(self):
        board = Board(width=2, height=2, n_in_row=1, start_player=1)
        board.apply_move(3)
        assert board.check_end() == (True, 1)

    def test_count_run_along_each_axis(self, board):
        board.states[2, 1:6] = 0
        assert count_run(board.states, 3, 2, 1, 0) == 5
        assert count_run(board.states, 3, 2, 0, 1) == 1
        assert count_run(board.states, 3, 2, 1, 1) == 1
        assert count_run(board.states, 3, 2, 1, -1) == 1


def test_render(board):
    board.apply_move(0)
    board.apply_move(10)
    lines = board.render().splitlines()
    assert len(lines) == 10
    assert lines[1].startswith('X .')
    assert lines[2].startswith('. O')
    assert str(board) == board.render()
