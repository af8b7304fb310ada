"""
Node id to array index mapping.

The power-iteration code in ``network.ranking`` and the NetworkIt bridge in
``network.construction`` work on dense integer positions, while graphs are
keyed by arbitrary hashable ids. ``IDMapper`` translates between the two.
"""

from typing import Any, Dict, Iterable, List, Sequence

import numpy as np


class IDMapper:
    """
    Two-way mapping between node ids and integer indices.

    Examples
    --------
    >>> mapper = IDMapper.from_ids(["0xabc", "0xdef"])
    >>> mapper.get_internal("0xdef")
    1
    >>> mapper.indices(["0xdef", "0xabc"])
    array([1, 0])

    Notes
    -----
    ``from_ids`` numbers ids 0..n-1 in iteration order, which is what the
    array-based algorithms rely on. Mappers built with ``add_mapping`` may
    leave gaps.
    """

    def __init__(self) -> None:
        self.original_to_internal: Dict[Any, int] = {}
        self.internal_to_original: Dict[int, Any] = {}

    @classmethod
    def from_ids(cls, original_ids: Iterable[Any]) -> 'IDMapper':
        """Number ``original_ids`` consecutively; duplicates raise ValueError."""
        mapper = cls()
        for index, original_id in enumerate(original_ids):
            mapper.add_mapping(original_id, index)
        return mapper

    def add_mapping(self, original_id: Any, internal_id: int) -> None:
        """
        Register one id/index pair.

        Raises
        ------
        TypeError
            If ``internal_id`` is not an int (bools excluded) or
            ``original_id`` is unhashable
        ValueError
            If ``internal_id`` is negative or either side is already mapped
        """
        if isinstance(internal_id, bool) or not isinstance(internal_id, int):
            raise TypeError(f"Internal ID must be integer, got {type(internal_id).__name__}")
        if internal_id < 0:
            raise ValueError(f"Internal ID must be non-negative, got {internal_id}")
        try:
            hash(original_id)
        except TypeError:
            raise TypeError(f"Original ID must be hashable, got {type(original_id).__name__}")

        if original_id in self.original_to_internal:
            raise ValueError(
                f"Original ID '{original_id}' already mapped to internal ID "
                f"{self.original_to_internal[original_id]}"
            )
        if internal_id in self.internal_to_original:
            raise ValueError(
                f"Internal ID {internal_id} already mapped to original ID "
                f"'{self.internal_to_original[internal_id]}'"
            )

        self.original_to_internal[original_id] = internal_id
        self.internal_to_original[internal_id] = original_id

    def get_internal(self, original_id: Any) -> int:
        try:
            return self.original_to_internal[original_id]
        except KeyError:
            raise KeyError(f"Original ID '{original_id}' not found in mapping")

    def get_original(self, internal_id: int) -> Any:
        if not isinstance(internal_id, (int, np.integer)):
            raise TypeError(f"Internal ID must be integer, got {type(internal_id).__name__}")
        try:
            return self.internal_to_original[int(internal_id)]
        except KeyError:
            raise KeyError(f"Internal ID {internal_id} not found in mapping")

    def indices(self, original_ids: Sequence[Any]) -> np.ndarray:
        """Look up many ids at once, as an int64 array in input order."""
        return np.fromiter(
            (self.get_internal(original_id) for original_id in original_ids),
            dtype=np.int64,
            count=len(original_ids)
        )

    def original_ids(self) -> List[Any]:
        """Mapped ids ordered by index."""
        return [self.internal_to_original[i] for i in sorted(self.internal_to_original)]

    def size(self) -> int:
        return len(self.original_to_internal)

    def is_empty(self) -> bool:
        return not self.original_to_internal

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, original_id: Any) -> bool:
        return original_id in self.original_to_internal

    def __repr__(self) -> str:
        return f"IDMapper(size={self.size()})"
