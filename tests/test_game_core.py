import random

import numpy as np
import pytest

from block_blast.game import BlockBlastGame, GameConfig, MemoryHighScoreStorage, PieceType, shape_of
from tests.helpers import fill_cells, make_game, offer, random_board


# Pairwise non-adjacent holes: every row, column and subgrid keeps an empty
# cell, and no piece of two or more cells fits anywhere.
SCATTERED_HOLES = (
    [(i, i) for i in range(9)]
    + [(i, 8 - i) for i in range(9) if i != 4]
    + [(4, 1), (7, 4), (1, 4), (4, 7)]
)


def _fill_all_but(game, holes):
    holes = set(holes)
    fill_cells(game, [(x, y) for y in range(9) for x in range(9) if (x, y) not in holes])


def test_new_game_state(game):
    assert game.score == 0
    assert game.streak == 0
    assert not game.game_over
    assert len(game.available_pieces) == 3
    assert game.grid.filled_ratio() == 0.0


def test_vertical_five_on_empty_board(game):
    offer(game, [PieceType.VERTICAL_5, PieceType.SINGLE, PieceType.SINGLE])
    result = game.place_block(PieceType.VERTICAL_5, 0, 0)
    assert result
    assert result.cells == [(0, 0), (0, 1), (0, 2), (0, 3), (0, 4)]
    for y in range(5):
        assert game.grid.cell(0, y) is PieceType.VERTICAL_5
    assert game.grid.is_empty(0, 5)
    assert game.score == 5
    assert game.streak == 0
    assert not game.game_over
    assert result.clear is None
    assert result.points == 5
    assert game.available_pieces == [PieceType.SINGLE, PieceType.SINGLE]


def test_completing_a_row_clears_it(game):
    fill_cells(game, [(x, 0) for x in range(8)])
    offer(game, [PieceType.SINGLE, PieceType.VERTICAL_2, PieceType.HORIZONTAL_2])
    result = game.place_block(PieceType.SINGLE, 8, 0)
    assert result
    clear = result.clear
    assert clear is not None
    assert clear.regions.rows == [0]
    assert clear.regions.cols == [] and clear.regions.subgrids == []
    assert clear.total_cleared == 1
    assert clear.score.combo_score == 18
    assert clear.score.streak_bonus == 0
    assert clear.score.total_score == 18
    assert clear.cells_cleared == 9
    assert game.streak == 1
    assert game.score == 1 + 18
    assert result.points == 19
    assert game.grid.filled_ratio() == 0.0


def test_two_rows_and_a_column_on_a_running_streak(game):
    fill_cells(game, [(x, y) for y in (0, 1) for x in range(9) if x != 4])
    fill_cells(game, [(4, y) for y in range(2, 9)])
    offer(game, [PieceType.VERTICAL_2, PieceType.SINGLE, PieceType.SINGLE])
    game.streak = 3
    result = game.place_block(PieceType.VERTICAL_2, 4, 0)
    clear = result.clear
    assert clear.regions.rows == [0, 1]
    assert clear.regions.cols == [4]
    assert clear.total_cleared == 3
    assert game.streak == 4
    assert clear.score.combo_multiplier == 2.0
    assert clear.score.base_score == 54
    assert clear.score.combo_score == 108
    assert clear.score.streak_bonus == 45
    assert clear.score.total_score == 153
    assert game.score == 2 + 153
    assert game.grid.filled_ratio() == 0.0


def test_subgrid_clear(game):
    fill_cells(game, [(x, y) for x in range(3, 6) for y in range(3, 6) if (x, y) != (5, 5)])
    offer(game, [PieceType.SINGLE, PieceType.SINGLE, PieceType.CROSS])
    result = game.place_block(PieceType.SINGLE, 5, 5)
    assert result.clear.regions.subgrids == [(1, 1)]
    assert game.grid.filled_ratio() == 0.0


def test_streak_resets_after_a_placement_without_clear(game):
    fill_cells(game, [(x, 0) for x in range(8)])
    offer(game, [PieceType.SINGLE, PieceType.SINGLE, PieceType.SINGLE])
    game.place_block(PieceType.SINGLE, 8, 0)
    assert game.streak == 1
    game.place_block(PieceType.SINGLE, 4, 4)
    assert game.streak == 0


def test_not_offered_piece_is_rejected_without_mutation(game):
    offer(game, [PieceType.SINGLE, PieceType.SINGLE, PieceType.SINGLE])
    before = game.grid.clone_state()
    result = game.place_block(PieceType.CROSS, 0, 0)
    assert not result
    assert result.reason == "not_offered"
    assert np.array_equal(game.grid.grid, before)
    assert game.score == 0
    assert len(game.available_pieces) == 3


@pytest.mark.parametrize("origin", [(8, 0), (-1, 0), (0, 9), (7, 7)])
def test_invalid_origin_is_rejected_without_mutation(game, origin):
    fill_cells(game, [(8, 8)])
    offer(game, [PieceType.SQUARE_2X2, PieceType.SINGLE, PieceType.SINGLE])
    game.streak = 2
    before = game.grid.clone_state()
    result = game.place_block(PieceType.SQUARE_2X2, *origin)
    assert not result
    assert result.reason == "invalid"
    assert np.array_equal(game.grid.grid, before)
    assert game.streak == 2
    assert game.score == 0
    assert game.available_pieces == [PieceType.SQUARE_2X2, PieceType.SINGLE, PieceType.SINGLE]


def test_unknown_piece_is_rejected(game):
    before = list(game.available_pieces)
    result = game.place_block("NOT_A_PIECE", 0, 0)
    assert not result
    assert result.reason == "unknown_piece"
    assert game.available_pieces == before
    assert not game.is_valid_placement(99, 0, 0)


def test_piece_accepted_by_value_or_name(game):
    offer(game, [PieceType.SINGLE, PieceType.CROSS, PieceType.SINGLE])
    assert game.place_block(1, 0, 0)
    assert game.place_block("cross", 3, 3)
    assert game.available_pieces == [PieceType.SINGLE]


def test_first_matching_duplicate_is_removed(game):
    offer(game, [PieceType.SINGLE, PieceType.HORIZONTAL_2, PieceType.SINGLE])
    game.place_block(PieceType.SINGLE, 0, 0)
    assert game.available_pieces == [PieceType.HORIZONTAL_2, PieceType.SINGLE]


def test_tray_refills_after_last_piece(game):
    offer(game, [PieceType.SINGLE])
    result = game.place_block(PieceType.SINGLE, 0, 0)
    assert result.refilled
    assert len(game.available_pieces) == 3


def test_board_cells_store_shape_not_instance(game):
    offer(game, [PieceType.SINGLE, PieceType.SINGLE, PieceType.CROSS])
    game.place_block(PieceType.SINGLE, 0, 0)
    game.place_block(PieceType.SINGLE, 1, 0)
    assert game.grid.grid[0, 0] == game.grid.grid[0, 1] == int(PieceType.SINGLE)


def test_is_valid_placement_matches_brute_force(game, rng):
    for _ in range(300):
        random_board(game, rng, density=rng.random())
        piece_type = rng.choice(list(PieceType))
        ox, oy = rng.randint(-3, 10), rng.randint(-3, 10)
        expected = all(
            0 <= ox + dx < 9 and 0 <= oy + dy < 9 and game.grid.grid[oy + dy, ox + dx] == 0
            for dx, dy in shape_of(piece_type).cells
        )
        assert game.is_valid_placement(piece_type, ox, oy) == expected


def test_is_valid_placement_has_no_side_effects(game):
    before = game.grid.clone_state()
    pieces = list(game.available_pieces)
    game.is_valid_placement(PieceType.SQUARE_3X3, 2, 2)
    assert np.array_equal(game.grid.grid, before)
    assert game.available_pieces == pieces


def test_game_over_when_nothing_fits(game):
    _fill_all_but(game, SCATTERED_HOLES)
    offer(game, [PieceType.HORIZONTAL_2, PieceType.VERTICAL_2, PieceType.SQUARE_2X2])
    assert game.check_game_over()
    assert game.game_over


def test_game_over_is_sticky_until_reset(game):
    _fill_all_but(game, SCATTERED_HOLES)
    offer(game, [PieceType.CROSS])
    assert game.check_game_over()
    game.grid.reset()
    assert game.check_game_over()
    assert game.game_over
    game.reset_game()
    assert not game.game_over


def test_game_not_over_while_any_piece_fits(game):
    _fill_all_but(game, SCATTERED_HOLES)
    offer(game, [PieceType.SQUARE_3X3, PieceType.SINGLE])
    assert not game.check_game_over()
    assert not game.game_over


def test_placement_that_leaves_no_move_ends_the_game(game):
    _fill_all_but(game, SCATTERED_HOLES)
    offer(game, [PieceType.SINGLE, PieceType.SQUARE_2X2])
    result = game.place_block(PieceType.SINGLE, 0, 0)
    assert result
    assert result.clear is None
    assert result.game_over
    assert game.game_over


def test_reset_game_keeps_high_score():
    storage = MemoryHighScoreStorage()
    game = make_game(seed=3, storage=storage)
    offer(game, [PieceType.SQUARE_3X3, PieceType.SINGLE, PieceType.SINGLE])
    game.place_block(PieceType.SQUARE_3X3, 1, 1)
    game.reset_game()
    assert game.score == 0
    assert game.streak == 0
    assert game.high_score == 9
    assert storage.high_score == 9
    assert len(game.available_pieces) == 3
    assert game.grid.filled_ratio() == 0.0


def test_high_score_saved_as_soon_as_it_is_beaten():
    storage = MemoryHighScoreStorage(high_score=3)
    game = make_game(storage=storage)
    assert game.high_score == 3
    offer(game, [PieceType.SINGLE, PieceType.SINGLE, PieceType.VERTICAL_5])
    game.place_block(PieceType.SINGLE, 0, 0)
    assert storage.saves == 0
    game.place_block(PieceType.VERTICAL_5, 5, 0)
    assert game.high_score == 6
    assert storage.high_score == 6
    assert storage.saves == 1


def test_add_score_returns_event(game):
    event = game.add_score(12, "clear", combo=2)
    assert event.points == 12
    assert event.kind == "clear"
    assert event.details == {"combo": 2}
    assert game.score == 12


def test_placement_result_carries_score_events(game):
    fill_cells(game, [(x, 0) for x in range(8)])
    offer(game, [PieceType.SINGLE, PieceType.SINGLE, PieceType.CROSS])
    result = game.place_block(PieceType.SINGLE, 8, 0)
    assert [(e.kind, e.points) for e in result.events] == [("place", 1), ("clear", 18)]
    assert result.events[1] is result.clear.event
    assert result.events[1].details == {"combo": 1, "combo_multiplier": 1.0, "streak_bonus": 0}
    assert sum(e.points for e in result.events) == result.points


class FailingStorage:
    def __init__(self, fail_load: bool = False):
        self.fail_load = fail_load
        self.attempts = 0

    def load(self) -> int:
        if self.fail_load:
            raise OSError("unreadable")
        return 0

    def save(self, high_score: int) -> None:
        self.attempts += 1
        raise OSError("disk full")


def test_failed_high_score_save_does_not_interrupt_placement():
    storage = FailingStorage()
    game = BlockBlastGame(GameConfig(random_seed=0), storage=storage)
    fill_cells(game, [(x, 0) for x in range(8)])
    offer(game, [PieceType.SINGLE])
    result = game.place_block(PieceType.SINGLE, 8, 0)
    assert result
    assert storage.attempts > 0
    assert result.clear.regions.rows == [0]
    assert not game.grid.full_regions()
    assert result.refilled
    assert len(game.available_pieces) == 3
    assert game.score == game.high_score == 19
    assert not game.game_over


def test_failed_high_score_load_starts_from_zero():
    game = BlockBlastGame(GameConfig(random_seed=0), storage=FailingStorage(fail_load=True))
    assert game.high_score == 0
    assert len(game.available_pieces) == 3


def test_valid_actions_cover_every_offered_slot(game):
    offer(game, [PieceType.SQUARE_3X3, PieceType.SINGLE])
    actions = game.get_valid_actions()
    assert len([a for a in actions if a[0] == 0]) == 49
    assert len([a for a in actions if a[0] == 1]) == 81


def test_random_play_keeps_invariants():
    rng = random.Random(2024)
    for seed in range(5):
        game = make_game(seed=seed)
        previous_score = 0
        while not game.game_over:
            slot, x, y = rng.choice(game.get_valid_actions())
            piece_type = game.available_pieces[slot]
            pieces_before = len(game.available_pieces)
            streak_before = game.streak

            result = game.place_block(piece_type, x, y)
            assert result

            assert game.score >= previous_score
            previous_score = game.score
            assert not game.grid.full_regions()
            expected = pieces_before - 1 or 3
            assert len(game.available_pieces) == expected
            if result.clear is None:
                assert game.streak == 0
            else:
                assert game.streak == streak_before + 1
            assert game.high_score >= game.score
        stats = game.get_game_stats()
        assert stats["final_score"] == game.score
        assert stats["pieces_placed"] > 0


def test_same_seed_replays_same_pieces():
    a = make_game(seed=11)
    b = make_game(seed=11)
    assert a.available_pieces == b.available_pieces
    a.seed(5)
    b.seed(5)
    a.reset_game()
    b.reset_game()
    assert a.available_pieces == b.available_pieces


def test_get_state_snapshot(game):
    state = game.get_state()
    assert state["grid"].shape == (9, 9)
    assert state["available_pieces"] == game.available_pieces
    assert state["score"] == 0 and state["streak"] == 0
    assert state["game_over"] is False
    state["available_pieces"].clear()
    assert len(game.available_pieces) == 3
