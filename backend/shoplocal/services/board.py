# Overview: Pure grid geometry for the 5x5 board; no database access.

from __future__ import annotations

from typing import Iterable

BOARD_SIZE = 5
FREE_SPACE_INDEX = 12  # center cell, row-major
CELL_COUNT = BOARD_SIZE * BOARD_SIZE


def normalize_indices(indices: Iterable[int]) -> list[int]:
    """Deduplicated, ascending. This is the form persisted on progress rows."""
    return sorted(set(indices))


def row_of(index: int) -> int:
    return index // BOARD_SIZE


def row_indices(row: int) -> list[int]:
    start = row * BOARD_SIZE
    return list(range(start, start + BOARD_SIZE))


def completed_rows(earned: Iterable[int]) -> list[int]:
    """Every row whose cells are all earned, ascending."""
    earned_set = set(earned)
    return [
        row for row in range(BOARD_SIZE)
        if earned_set.issuperset(row_indices(row))
    ]


def is_board_complete(earned: Iterable[int]) -> bool:
    return len(set(earned)) >= CELL_COUNT
