"""state-kit - Owner-driven finite state machines for tick-based simulations."""
from __future__ import annotations

from state_kit.clock import FixedStepClock
from state_kit.config import MachineConfig
from state_kit.discovery import DiscoveryStrategy, ExplicitDiscovery, ScanDiscovery
from state_kit.loop import HostLoop
from state_kit.machine import StateMachine
from state_kit.owner import Owner, StateOwner
from state_kit.registry import StateRegistry
from state_kit.state import State, StateLike, discoverable, is_discoverable, state_key
from state_kit.types import (
    AlreadyInitializedError,
    InvalidOwnerError,
    NotInitializedError,
    ReentrantTransitionError,
    StateKey,
    StateMachineError,
    StateNotFoundError,
)

__all__ = [
    "StateMachine",
    "StateRegistry",
    "State",
    "StateLike",
    "StateKey",
    "state_key",
    "discoverable",
    "is_discoverable",
    "DiscoveryStrategy",
    "ExplicitDiscovery",
    "ScanDiscovery",
    "MachineConfig",
    "Owner",
    "StateOwner",
    "HostLoop",
    "FixedStepClock",
    "StateMachineError",
    "StateNotFoundError",
    "NotInitializedError",
    "AlreadyInitializedError",
    "InvalidOwnerError",
    "ReentrantTransitionError",
]
