"""StateRegistry class."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Iterator

from state_kit.state import StateLike
from state_kit.types import StateKey, StateNotFoundError, describe_key

if TYPE_CHECKING:
    from state_kit.machine import StateMachine

logger = logging.getLogger(__name__)


class StateRegistry:
    """Maps state keys to the single state instance owned for each key.

    States are attached to ``owner`` and ``machine`` as they are registered,
    so a state reachable through the registry always has both back-references.
    """

    def __init__(self, owner: Any = None, machine: StateMachine | None = None) -> None:
        self._owner = owner
        self._machine = machine
        self._states: dict[StateKey, StateLike] = {}

    @property
    def owner(self) -> Any:
        return self._owner

    def register(self, key: StateKey, state: StateLike) -> None:
        """Register ``state`` under ``key``.

        Re-registering the same instance is a no-op. A different instance
        under an existing key replaces the old one and logs a warning.
        """
        if not isinstance(state, StateLike):
            raise TypeError(
                f"{type(state).__name__} does not implement on_enter/on_update"
            )
        existing = self._states.get(key)
        if existing is state:
            return
        self._attach(state)
        if existing is not None:
            logger.warning(
                f"[{self._owner_name()}] Duplicate state key {describe_key(key)}: "
                f"{existing!r} replaced by {state!r}"
            )
        self._states[key] = state

    def lookup(self, key: StateKey) -> StateLike | None:
        """Return the state for ``key``, or None if not registered."""
        return self._states.get(key)

    def get(self, key: StateKey) -> StateLike:
        """Return the state for ``key``. Raises StateNotFoundError."""
        if key not in self._states:
            raise StateNotFoundError(
                key, f"[{self._owner_name()}] State {describe_key(key)} does not exist"
            )
        return self._states[key]

    def contains(self, key: StateKey) -> bool:
        return key in self._states

    def key_of(self, state: StateLike) -> StateKey | None:
        """Reverse lookup by identity."""
        for key, registered in self._states.items():
            if registered is state:
                return key
        return None

    def keys(self) -> list[StateKey]:
        return list(self._states)

    def states(self) -> list[StateLike]:
        return list(self._states.values())

    def __contains__(self, key: object) -> bool:
        return key in self._states

    def __len__(self) -> int:
        return len(self._states)

    def __iter__(self) -> Iterator[StateKey]:
        return iter(list(self._states))

    def _attach(self, state: StateLike) -> None:
        attach = getattr(state, "attach", None)
        if callable(attach):
            attach(self._owner, self._machine)
        else:
            state.owner = self._owner  # type: ignore[attr-defined]
            state.machine = self._machine  # type: ignore[attr-defined]

    def _owner_name(self) -> str:
        name = getattr(self._owner, "name", None)
        return str(name).upper() if name else "?"

