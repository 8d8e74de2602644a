"""
Play interface for the Gomoku MCTS player.
Human vs MCTS games, human vs human games, and MCTS evaluation against a random player.
"""
import argparse
import logging
import numpy as np
from tqdm import tqdm
from typing import Callable, Optional, Sequence, Tuple

from game import Board, NO_MOVE, PLAYER_0, PLAYER_1
from mcts import MCTS


class GomokuPlayer:
    """Base class for Gomoku players."""

    def request_move(self, board: Board) -> int:
        raise NotImplementedError

    def notify_move_played(self, action: int):
        """Called after every move of the game, whoever made it."""

    def reset(self):
        """Forget everything about the previous game."""


class HumanPlayer(GomokuPlayer):
    """Human player via command line input."""

    def __init__(self, read_line: Callable[[str], str] = input):
        self.read_line = read_line

    def request_move(self, board: Board) -> int:
        print(f"Player {board.current_player}'s turn.")
        while True:
            try:
                parts = self.read_line("Enter your move (format: x y): ").split()
                if len(parts) != 2:
                    print("Please enter x and y separated by a space")
                    continue

                x, y = int(parts[0]), int(parts[1])
                action = board.location_to_move(x, y)

                if board.is_available(action):
                    return action
                print("Invalid move, position already occupied")
            except ValueError:
                # InvalidMoveError is a ValueError too
                print("Invalid move, please enter two numbers inside the board")


class MCTSPlayer(GomokuPlayer):
    """AI player using MCTS with random rollouts."""

    def __init__(self, c_puct: float = 5.0, n_playout: int = 10000, verbose: bool = False, **mcts_kwargs):
        self.mcts = MCTS(c_puct=c_puct, n_playout=n_playout, show_progress=verbose, **mcts_kwargs)
        self.verbose = verbose

    def request_move(self, board: Board) -> int:
        action = self.mcts.get_action(board)

        if self.verbose:
            # Show top moves
            visits = self.mcts.get_visit_counts(board.size)
            share = visits / max(visits.sum(), 1)
            print("AI thinking...")
            for a in np.argsort(visits)[-3:][::-1]:
                if visits[a] > 0:
                    x, y = board.move_to_location(int(a))
                    print(f"  ({x}, {y}): {share[a]:.2%}")

        return action

    def notify_move_played(self, action: int):
        self.mcts.advance(action)

    def reset(self):
        self.mcts.advance(NO_MOVE)


class RandomPlayer(GomokuPlayer):
    """Random player for testing."""

    def __init__(self, rng: Optional[np.random.Generator] = None):
        self.rng = rng if rng is not None else np.random.default_rng()

    def request_move(self, board: Board) -> int:
        return int(self.rng.choice(board.available_moves()))


def play_game(
    player0: GomokuPlayer,
    player1: GomokuPlayer,
    board: Board,
    show_board: bool = True,
) -> Optional[int]:
    """
    Play a game between two players on `board`.

    Args:
        player0: Player 0 (X)
        player1: Player 1 (O)
        board: Fresh board; the start player is taken from it
        show_board: Whether to print the board after every move

    Returns:
        Winner: 0 or 1, None for a draw
    """
    players = {PLAYER_0: player0, PLAYER_1: player1}
    for player in players.values():
        player.reset()

    if show_board:
        print(board)

    while True:
        current = players[board.current_player]
        action = current.request_move(board)
        board.apply_move(action)

        # Keep every player's view of the game in sync, including tree reuse
        for player in players.values():
            player.notify_move_played(action)

        if show_board:
            x, y = board.move_to_location(action)
            print(f"\nMove: ({x}, {y})")
            print(board)

        is_end, winner = board.check_end()
        if is_end:
            break

    if show_board:
        if winner is None:
            print("Game end. Tie.")
        else:
            print(f"Game end. Winner is player {winner}.")

    return winner


def evaluate(
    num_games: int = 10,
    width: int = 9,
    height: int = 9,
    n_in_row: int = 5,
    c_puct: float = 5.0,
    n_playout: int = 1000,
) -> Tuple[int, int, int]:
    """
    Evaluate the MCTS player against a random player.
    Colours and start player alternate between games.

    Returns:
        (wins, losses, draws) from the MCTS player's point of view
    """
    ai = MCTSPlayer(c_puct=c_puct, n_playout=n_playout)
    opponent = RandomPlayer()

    wins = losses = draws = 0
    with tqdm(total=num_games, desc="Evaluation") as pbar:
        for game_idx in range(num_games):
            ai_side = PLAYER_0 if game_idx % 2 == 0 else PLAYER_1
            board = Board(width, height, n_in_row, start_player=game_idx // 2 % 2)
            if ai_side == PLAYER_0:
                winner = play_game(ai, opponent, board, show_board=False)
            else:
                winner = play_game(opponent, ai, board, show_board=False)

            if winner is None:
                draws += 1
            elif winner == ai_side:
                wins += 1
            else:
                losses += 1
            pbar.update(1)
            pbar.set_postfix(wins=wins, losses=losses, draws=draws)

    print(f"MCTS vs Random: Wins={wins}, Losses={losses}, Draws={draws}")
    return wins, losses, draws


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Play Gomoku against an MCTS player')
    parser.add_argument('--log-level', type=str, default='WARNING', help='Logging level')
    subparsers = parser.add_subparsers(dest='command', help='Commands')

    def add_board_args(p: argparse.ArgumentParser):
        p.add_argument('--width', type=int, default=9, help='Board width')
        p.add_argument('--height', type=int, default=9, help='Board height')
        p.add_argument('--n-in-row', type=int, default=5, help='Stones in a row needed to win')

    def add_mcts_args(p: argparse.ArgumentParser, n_playout: int):
        p.add_argument('--c-puct', type=float, default=5.0, help='Exploration constant')
        p.add_argument('--n-playout', type=int, default=n_playout, help='MCTS playouts per move')

    # Human vs MCTS
    play_parser = subparsers.add_parser('play', help='Play against the MCTS player')
    add_board_args(play_parser)
    add_mcts_args(play_parser, 10000)
    play_parser.add_argument('--start-player', type=int, default=1, help='Player who moves first (0 or 1)')
    play_parser.add_argument('--human-player', type=int, default=0, help='Side taken by the human (0 or 1)')
    play_parser.add_argument('--verbose', action='store_true', help='Show search progress and top moves')

    # Human vs human
    human_parser = subparsers.add_parser('human', help='Two humans on one terminal')
    add_board_args(human_parser)
    human_parser.add_argument('--start-player', type=int, default=1, help='Player who moves first (0 or 1)')

    # Evaluation
    eval_parser = subparsers.add_parser('evaluate', help='Evaluate MCTS against a random player')
    add_board_args(eval_parser)
    add_mcts_args(eval_parser, 1000)
    eval_parser.add_argument('--num-games', type=int, default=10, help='Number of games')

    return parser


def main(argv: Optional[Sequence[str]] = None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format='%(levelname)s %(name)s: %(message)s')

    if args.command == 'evaluate':
        return evaluate(
            num_games=args.num_games,
            width=args.width,
            height=args.height,
            n_in_row=args.n_in_row,
            c_puct=args.c_puct,
            n_playout=args.n_playout,
        )

    if args.command == 'human':
        board = Board(args.width, args.height, args.n_in_row, start_player=args.start_player)
        return play_game(HumanPlayer(), HumanPlayer(), board)

    if args.command is None:
        args = build_parser().parse_args(['play'])

    board = Board(args.width, args.height, args.n_in_row, start_player=args.start_player)
    human = HumanPlayer()
    ai = MCTSPlayer(c_puct=args.c_puct, n_playout=args.n_playout, verbose=args.verbose)
    print(f"Player 0: {'Human' if args.human_player == PLAYER_0 else 'MCTS'} with X")
    print(f"Player 1: {'Human' if args.human_player == PLAYER_1 else 'MCTS'} with O\n")
    if args.human_player == PLAYER_0:
        return play_game(human, ai, board)
    return play_game(ai, human, board)


if __name__ == '__main__':
    main()
