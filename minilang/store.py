from __future__ import annotations

from typing import List, Optional

from .ast import Located
from .diagnostics import StoreError

DEFAULT_CAPACITY = 256


class SymbolStore:
    """Fixed-capacity mapping from variable id to integer value.

    Every slot starts at 0. Ids outside the capacity raise `StoreError`
    instead of reading or writing past the end.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError(f"store capacity must be positive, got {capacity}")
        self._values: List[int] = [0] * capacity

    @property
    def capacity(self) -> int:
        return len(self._values)

    def get(self, var_id: int, loc: Optional[Located] = None) -> int:
        self._check(var_id, loc)
        return self._values[var_id]

    def set(self, var_id: int, value: int, loc: Optional[Located] = None) -> None:
        self._check(var_id, loc)
        self._values[var_id] = value

    def _check(self, var_id: int, loc: Optional[Located]) -> None:
        if not 0 <= var_id < len(self._values):
            raise StoreError(
                f"Variable id {var_id} out of range (capacity {len(self._values)})",
                loc,
            )
