"""
Slot Store Interface.
Named single-value storage, read and written wholesale.
"""

from typing import Any, Optional, Protocol


class SlotStore(Protocol):
    """Interface for whole-value slots (product backup, cart per session)."""

    def get(self, name: str) -> Optional[Any]:
        """Return the value stored under `name`, or None if the slot is empty."""
        ...

    def put(self, name: str, value: Any) -> None:
        """Overwrite the slot with `value`."""
        ...

    def clear(self, name: str) -> None:
        """Empty the slot. Clearing an empty slot is not an error."""
        ...
