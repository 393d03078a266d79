"""Shared type aliases and errors for state-kit."""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Hashable

StateKey = Hashable


class StateMachineError(Exception):
    """Base class for state machine failures."""


class StateNotFoundError(StateMachineError, KeyError):
    """Raised when a state key is not registered with the machine."""

    def __init__(self, key: StateKey, message: str) -> None:
        self.key = key
        super().__init__(message)


class NotInitializedError(StateMachineError, RuntimeError):
    """Raised when an operation needs an active state before initialize()."""


class AlreadyInitializedError(StateMachineError, RuntimeError):
    """Raised when initialize() is called on an initialized machine."""


class InvalidOwnerError(StateMachineError, ValueError):
    """Raised when the machine has no usable owner."""


class ReentrantTransitionError(StateMachineError, RuntimeError):
    """Raised on a nested transition when the machine rejects reentrancy."""


if TYPE_CHECKING:
    from state_kit.machine import StateMachine
    from state_kit.state import StateLike

TransitionHook = Callable[["StateMachine", "StateLike | None", "StateLike"], None]


def describe_key(key: StateKey) -> str:
    """Readable form of a state key for messages."""
    if isinstance(key, type):
        return key.__name__
    return repr(key)
