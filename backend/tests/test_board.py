import pytest

from shoplocal.services import board


class TestRows:

    def test_row_geometry(self):
        assert board.row_of(0) == 0
        assert board.row_of(12) == 2
        assert board.row_of(24) == 4
        assert board.row_indices(2) == [10, 11, 12, 13, 14]

    def test_first_row_plus_free_space(self):
        assert board.completed_rows({0, 1, 2, 3, 4, 12}) == [0]

    def test_middle_row_needs_free_space(self):
        assert board.completed_rows({10, 11, 13, 14}) == []
        assert board.completed_rows({10, 11, 12, 13, 14}) == [2]

    def test_columns_and_diagonals_do_not_count(self):
        column = {0, 5, 10, 15, 20}
        diagonal = {0, 6, 12, 18, 24}
        assert board.completed_rows(column | diagonal) == []

    def test_full_board(self):
        assert board.completed_rows(range(25)) == [0, 1, 2, 3, 4]

    def test_multiple_rows_ascending(self):
        earned = set(range(20, 25)) | set(range(0, 5))
        assert board.completed_rows(earned) == [0, 4]


class TestBoardComplete:

    def test_all_cells(self):
        assert board.is_board_complete(range(25))

    def test_one_missing(self):
        assert not board.is_board_complete(i for i in range(25) if i != 3)

    def test_duplicates_do_not_pad_the_count(self):
        assert not board.is_board_complete([12] * 30)


@pytest.mark.parametrize(
    "raw,expected",
    [
        ([12], [12]),
        ([5, 12, 5, 0], [0, 5, 12]),
        ({24, 3}, [3, 24]),
    ],
)
def test_normalize_indices(raw, expected):
    assert board.normalize_indices(raw) == expected
