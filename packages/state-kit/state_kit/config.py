"""Machine configuration dataclass."""
from __future__ import annotations

from dataclasses import dataclass

REENTRANCY_POLICIES = ("allow", "queue", "reject")


@dataclass(frozen=True)
class MachineConfig:
    """Immutable configuration for a StateMachine.

    Attributes:
        reentrancy: What happens when a transition is requested from inside
            another transition's on_enter/on_exit. ``"allow"`` runs it
            immediately, so the active state reflects only the most recent
            transition. ``"queue"`` defers it until the outer transition has
            finished. ``"reject"`` raises ReentrantTransitionError.
        initialize_owner: Call ``owner.initialize()`` from attach_owner().
        log_transitions: Emit a debug log line for every transition.
    """

    reentrancy: str = "allow"
    initialize_owner: bool = False
    log_transitions: bool = True

    def __post_init__(self) -> None:
        if self.reentrancy not in REENTRANCY_POLICIES:
            raise ValueError(
                f"reentrancy must be one of {REENTRANCY_POLICIES}, got {self.reentrancy!r}"
            )
