"""State base class, capability protocol, and discovery marker."""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar, Protocol, TypeVar, runtime_checkable

if TYPE_CHECKING:
    from state_kit.machine import StateMachine
    from state_kit.types import StateKey

_DISCOVERABLE_ATTR = "__state_kit_discoverable__"

C = TypeVar("C", bound=type)


@runtime_checkable
class StateLike(Protocol):
    """Minimal capability set of a state.

    ``on_exit(owner)`` and ``on_fixed_update(owner, machine, dt)`` are
    optional; a state without them is treated as having empty ones.
    """

    def on_enter(self, owner: Any, previous: StateLike | None = None) -> None:
        """Called when the state becomes active."""
        ...

    def on_update(self, owner: Any, machine: StateMachine, dt: float) -> None:
        """Called once per host frame while the state is active."""
        ...


class State:
    """Base state with empty hooks. Override only what you need.

    ``owner`` and ``machine`` are set when the state is registered with a
    machine, before the state can be entered.
    """

    key: ClassVar[StateKey | None] = None

    def __init__(self) -> None:
        self.owner: Any = None
        self.machine: StateMachine | None = None

    def attach(self, owner: Any, machine: StateMachine | None) -> None:
        self.owner = owner
        self.machine = machine

    def on_enter(self, owner: Any, previous: StateLike | None = None) -> None:
        pass

    def on_exit(self, owner: Any) -> None:
        pass

    def on_update(self, owner: Any, machine: StateMachine, dt: float) -> None:
        pass

    def on_fixed_update(self, owner: Any, machine: StateMachine, dt: float) -> None:
        pass

    def __repr__(self) -> str:
        return f"<{type(self).__name__}>"


def state_key(state: Any) -> StateKey:
    """Return the registry key for a state instance or class.

    A class-level ``key`` attribute wins; otherwise the concrete class is
    the key.
    """
    cls = state if isinstance(state, type) else type(state)
    explicit = getattr(cls, "key", None)
    if explicit is not None:
        return explicit
    return cls


def discoverable(cls: C) -> C:
    """Mark a state class as eligible for scanning discovery.

    The mark applies to the decorated class only, not its subclasses.
    """
    setattr(cls, _DISCOVERABLE_ATTR, cls)
    return cls


def is_discoverable(cls: type) -> bool:
    return getattr(cls, _DISCOVERABLE_ATTR, None) is cls
