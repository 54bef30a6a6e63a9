"""
Selection state for one export session.
"""

import logging
from typing import FrozenSet, List, Set

from .errors import SelectionClosedError

logger = logging.getLogger(__name__)


class SelectionState:
    """Set of table indices the user has marked for export.

    Indices are unique while the user toggles and are handed out sorted
    ascending by ``confirm``, which can only be called once.
    """

    def __init__(self, table_count: int):
        self.table_count = table_count
        self._selected: Set[int] = set()
        self._confirmed = False

    @property
    def selected(self) -> FrozenSet[int]:
        return frozenset(self._selected)

    @property
    def confirmed(self) -> bool:
        return self._confirmed

    def toggle(self, index: int, included: bool) -> None:
        """Add ``index`` when ``included`` is true, remove it otherwise."""
        if self._confirmed:
            raise SelectionClosedError("Selection has already been confirmed")
        if not 0 <= index < self.table_count:
            raise IndexError(f"Table index {index} out of range (0..{self.table_count - 1})")

        if included:
            self._selected.add(index)
        else:
            self._selected.discard(index)
        logger.debug(f"Table {index} {'selected' if included else 'deselected'}")

    def is_selected(self, index: int) -> bool:
        return index in self._selected

    def confirm(self) -> List[int]:
        """Close the selection and return the chosen indices in ascending order."""
        if self._confirmed:
            raise SelectionClosedError("Selection has already been confirmed")
        self._confirmed = True
        return sorted(self._selected)
