"""Owner protocol and a minimal owner base class."""
from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class StateOwner(Protocol):
    """The entity a machine drives. Its lifetime is managed by the host."""

    name: str

    def initialize(self) -> None: ...
    def destroy(self) -> None: ...


class Owner:
    """Plain owner with a name and a destroyed flag.

    Args:
        name: Display name, used in diagnostics.
        unique: Append the instance id to ``name`` so several owners built
            from the same template stay distinguishable in logs.
    """

    def __init__(self, name: str, unique: bool = False) -> None:
        if not name:
            raise ValueError("Owner name must be non-empty")
        self._base_name = name
        self._unique = unique
        self.destroyed = False

    @property
    def name(self) -> str:
        if self._unique:
            return f"{self._base_name}_{id(self):x}"
        return self._base_name

    def initialize(self) -> None:
        self.destroyed = False

    def destroy(self) -> None:
        """Mark the owner destroyed. Safe to call more than once."""
        self.destroyed = True

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"
