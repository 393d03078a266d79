"""StateMachine - owner attachment, initialization, transitions and ticking."""
from __future__ import annotations

import logging
from collections import deque
from typing import Any

from state_kit.config import MachineConfig
from state_kit.discovery import DiscoveryStrategy, as_discovery
from state_kit.owner import StateOwner
from state_kit.registry import StateRegistry
from state_kit.state import StateLike, state_key
from state_kit.types import (
    AlreadyInitializedError,
    InvalidOwnerError,
    NotInitializedError,
    ReentrantTransitionError,
    StateKey,
    TransitionHook,
    describe_key,
)

logger = logging.getLogger(__name__)


class StateMachine:
    """Drives one owner through a set of mutually exclusive states.

    The machine owns its registry and every state in it. It never owns the
    owner: attach_owner() stores a reference, and the owner's lifetime is
    managed by whoever created it.

    Transitions requested from inside on_enter/on_exit are governed by
    ``config.reentrancy``. Under the default ``"allow"`` policy a transition
    requested from on_enter completes before the outer call returns, so
    ``current_state`` reflects the most recent transition. A transition
    requested from on_exit runs once the outer transition has entered its
    target. Observers only hear about a transition whose target is still
    active when its on_enter returns.

    Args:
        discovery: Strategy (or iterable of states) used by initialize().
        owner: Optional owner, attached immediately.
        config: Machine configuration. Defaults to ``MachineConfig()``.
    """

    def __init__(
        self,
        discovery: DiscoveryStrategy | Any = None,
        owner: StateOwner | None = None,
        *,
        config: MachineConfig | None = None,
    ) -> None:
        self._config = config if config is not None else MachineConfig()
        self._discovery = discovery
        self._owner: StateOwner | None = None
        self._registry: StateRegistry | None = None
        self._current: StateLike | None = None
        self._current_key: StateKey | None = None
        self._previous: StateLike | None = None
        self._initialized = False
        self._transition_depth = 0
        self._transition_count = 0
        self._pending: deque[StateKey] = deque()
        self._draining = False
        self._exit_requests: list[StateKey] | None = None
        self._transition_hooks: list[TransitionHook] = []
        if owner is not None:
            self.attach_owner(owner)

    # --- Properties ---

    @property
    def owner(self) -> StateOwner | None:
        return self._owner

    @property
    def config(self) -> MachineConfig:
        return self._config

    @property
    def registry(self) -> StateRegistry | None:
        """The state registry, or None before initialize()."""
        return self._registry

    @property
    def current_state(self) -> StateLike | None:
        return self._current

    @property
    def current_key(self) -> StateKey | None:
        return self._current_key

    @property
    def previous_state(self) -> StateLike | None:
        """State that was active before the last transition."""
        return self._previous

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def transition_count(self) -> int:
        """Number of completed transitions, including the initial enter."""
        return self._transition_count

    # --- Lifecycle ---

    def attach_owner(self, owner: StateOwner) -> None:
        """Attach the owner this machine drives.

        Raises InvalidOwnerError for None or for an object that does not
        provide ``name``, ``initialize()`` and ``destroy()``, and
        AlreadyInitializedError once the machine is initialized, since
        registered states already hold a reference to the current owner.
        """
        if owner is None:
            raise InvalidOwnerError("Cannot attach a null owner to the state machine")
        if not isinstance(owner, StateOwner):
            raise InvalidOwnerError(
                f"{type(owner).__name__} is not a state owner; "
                f"it needs a name, initialize() and destroy()"
            )
        if self._initialized:
            raise AlreadyInitializedError(
                f"[{self._label()}] Cannot attach a new owner after initialize()"
            )
        self._owner = owner
        if self._config.initialize_owner:
            owner.initialize()

    def initialize(self, initial_key: Any, discovery: DiscoveryStrategy | Any = None) -> None:
        """Populate the registry and enter the initial state.

        Runs the discovery strategy once and registers every pair it yields.
        A repeated pair for the initial key is skipped so the first instance
        stays. The initial key must be registered; otherwise
        StateNotFoundError is raised and the machine stays uninitialized.
        """
        if self._initialized:
            raise AlreadyInitializedError(
                f"[{self._label()}] The state machine has already been initialized"
            )
        if self._owner is None:
            raise InvalidOwnerError(
                "The state machine has no owner; call attach_owner() before initialize()"
            )

        strategy = as_discovery(discovery if discovery is not None else self._discovery)
        registry = StateRegistry(self._owner, self)
        initial = state_key(initial_key) if isinstance(initial_key, type) else initial_key
        for key, state in strategy():
            if key == initial and key in registry:
                logger.warning(
                    f"[{self._label()}] Skipping repeated initial state {describe_key(key)}"
                )
                continue
            registry.register(key, state)
        if isinstance(initial_key, type) and initial_key in registry:
            initial = initial_key
        target = registry.get(initial)

        self._registry = registry
        self._initialized = True
        self._request(initial, target)

    def on_transition(self, hook: TransitionHook) -> None:
        """Register ``hook(machine, previous, current)``, called after each transition."""
        self._transition_hooks.append(hook)

    def off_transition(self, hook: TransitionHook) -> None:
        try:
            self._transition_hooks.remove(hook)
        except ValueError:
            pass

    # --- Transitions ---

    def change_state(self, key: Any) -> None:
        """Exit the active state and enter the one registered under ``key``.

        Changing to the already active state does nothing. Raises
        NotInitializedError before initialize() and StateNotFoundError for
        unregistered keys, leaving the active state unchanged.
        """
        registry = self._require_registry("change_state")
        resolved = self._resolve_key(key)
        target = registry.get(resolved)
        self._request(resolved, target)

    def try_change_state(self, key: Any) -> bool:
        """Like change_state(), but returns False for unregistered keys."""
        registry = self._require_registry("try_change_state")
        resolved = self._resolve_key(key)
        target = registry.lookup(resolved)
        if target is None:
            logger.warning(f"[{self._label()}] State {describe_key(resolved)} does not exist")
            return False
        self._request(resolved, target)
        return True

    def is_in(self, key: Any) -> bool:
        """Check whether the active state is registered under ``key``."""
        if not self._initialized:
            return False
        return self._current_key == self._resolve_key(key)

    # --- Ticking ---

    def tick(self, dt: float = 0.0) -> None:
        """Forward one host frame to the active state's on_update."""
        state = self._require_active("tick")
        _check_dt(dt)
        state.on_update(self._owner, self, dt)

    def fixed_tick(self, dt: float = 0.0) -> None:
        """Forward one fixed step to the active state's on_fixed_update."""
        state = self._require_active("fixed_tick")
        _check_dt(dt)
        handler = getattr(state, "on_fixed_update", None)
        if handler is not None:
            handler(self._owner, self, dt)

    # --- Queries ---

    def get_state(self, key: Any) -> StateLike:
        """Return the registered state for ``key``. Raises StateNotFoundError."""
        registry = self._require_registry("get_state")
        return registry.get(self._resolve_key(key))

    def try_get_state(self, key: Any) -> StateLike | None:
        if self._registry is None:
            return None
        return self._registry.lookup(self._resolve_key(key))

    def has_state(self, key: Any) -> bool:
        if self._registry is None:
            return False
        return self._resolve_key(key) in self._registry

    # --- Internal helpers ---

    def _request(self, key: StateKey, target: StateLike) -> None:
        policy = self._config.reentrancy
        if self._transition_depth > 0:
            if policy == "reject":
                raise ReentrantTransitionError(
                    f"[{self._label()}] Transition to {describe_key(key)} requested "
                    f"while another transition is in progress"
                )
            if policy == "queue":
                self._pending.append(key)
                return
            if self._exit_requests is not None:
                self._exit_requests.append(key)
                return
            self._transition(key, target)
            return

        if self._draining:
            # Requested by a transition observer.
            if policy == "queue":
                self._pending.append(key)
            else:
                self._transition(key, target)
            return

        self._draining = True
        try:
            self._transition(key, target)
            while self._pending:
                queued = self._pending.popleft()
                self._transition(queued, self._registry.get(queued))
        finally:
            self._draining = False
            self._pending.clear()

    def _transition(self, key: StateKey, target: StateLike) -> None:
        previous = self._current
        if previous is not None and key == self._current_key:
            return

        owner = self._owner
        exit_requests: list[StateKey] = []
        self._transition_depth += 1
        try:
            if previous is not None:
                exit_hook = getattr(previous, "on_exit", None)
                if exit_hook is not None:
                    outer_requests = self._exit_requests
                    self._exit_requests = exit_requests
                    try:
                        exit_hook(owner)
                    finally:
                        self._exit_requests = outer_requests
            self._previous = previous
            self._current = target
            self._current_key = key
            count_before_enter = self._transition_count
            target.on_enter(owner, previous)
        finally:
            self._transition_depth -= 1

        superseded = self._transition_count != count_before_enter
        self._transition_count += 1
        if not superseded:
            if self._config.log_transitions:
                logger.debug(
                    f"[{self._label()}] {_state_name(previous)} -> {_state_name(target)}"
                )
            for hook in list(self._transition_hooks):
                hook(self, previous, target)

        # Transitions requested from the old state's on_exit.
        for queued in exit_requests:
            self._transition(queued, self._registry.get(queued))

    def _resolve_key(self, key: Any) -> StateKey:
        if isinstance(key, type):
            if self._registry is not None and key in self._registry:
                return key
            return state_key(key)
        return key

    def _require_registry(self, operation: str) -> StateRegistry:
        if self._registry is None:
            raise NotInitializedError(
                f"[{self._label()}] {operation}() called before initialize()"
            )
        return self._registry

    def _require_active(self, operation: str) -> StateLike:
        if self._current is None:
            raise NotInitializedError(
                f"[{self._label()}] {operation}() called with no active state"
            )
        return self._current

    def _label(self) -> str:
        name = getattr(self._owner, "name", None)
        return str(name).upper() if name else "?"

    def __repr__(self) -> str:
        return (
            f"StateMachine(owner={self._label()!r}, "
            f"current={_state_name(self._current)})"
        )


def _check_dt(dt: float) -> None:
    if dt < 0:
        raise ValueError(f"dt must be >= 0, got {dt}")


def _state_name(state: StateLike | None) -> str:
    if state is None:
        return "None"
    return type(state).__name__
