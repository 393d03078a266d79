"""Tests for transitions requested from inside on_enter/on_exit."""
import logging

import pytest

from state_kit import (
    MachineConfig,
    Owner,
    ReentrantTransitionError,
    State,
    StateMachine,
)


class Logged(State):
    def __init__(self, log):
        super().__init__()
        self.log = log

    def on_enter(self, owner, previous=None):
        self.log.append(f"enter {type(self).__name__}")

    def on_exit(self, owner):
        self.log.append(f"exit {type(self).__name__}")


class Stunned(Logged):
    """Immediately bounces to Recovering when entered."""

    def on_enter(self, owner, previous=None):
        super().on_enter(owner, previous)
        self.machine.change_state(Recovering)
        self.log.append("stunned done")


class Recovering(Logged):
    pass


class Idle(Logged):
    pass


class Leaving(Logged):
    """Asks for Recovering while it is being exited."""

    def on_exit(self, owner):
        super().on_exit(owner)
        self.machine.change_state(Recovering)


def _machine(log, reentrancy, initial=Idle):
    machine = StateMachine(
        [Idle(log), Stunned(log), Recovering(log), Leaving(log)],
        owner=Owner("hero"),
        config=MachineConfig(reentrancy=reentrancy),
    )
    machine.initialize(initial)
    log.clear()
    return machine


def _record(machine):
    events = []
    machine.on_transition(
        lambda m, prev, cur: events.append((type(prev).__name__, type(cur).__name__))
    )
    return events


# --- allow ---

def test_allow_runs_nested_transition_immediately():
    log = []
    machine = _machine(log, "allow")
    machine.change_state(Stunned)

    assert log == [
        "exit Idle",
        "enter Stunned",
        "exit Stunned",
        "enter Recovering",
        "stunned done",
    ]
    assert machine.current_key is Recovering
    assert isinstance(machine.previous_state, Stunned)


def test_allow_is_default():
    assert MachineConfig().reentrancy == "allow"


def test_allow_from_initial_enter():
    log = []
    machine = StateMachine([Stunned(log), Recovering(log)], owner=Owner("hero"))
    machine.initialize(Stunned)

    assert machine.current_key is Recovering
    assert log == ["enter Stunned", "exit Stunned", "enter Recovering", "stunned done"]


def test_allow_observers_skip_superseded_transition():
    log = []
    machine = _machine(log, "allow")
    events = _record(machine)
    machine.change_state(Stunned)

    assert events == [("Stunned", "Recovering")]
    assert events[-1][1] == type(machine.current_state).__name__
    assert machine.transition_count == 3


def test_allow_debug_log_skips_superseded_transition(caplog):
    log = []
    machine = _machine(log, "allow")

    with caplog.at_level(logging.DEBUG, logger="state_kit.machine"):
        machine.change_state(Stunned)

    assert "[HERO] Stunned -> Recovering" in caplog.text
    assert "Idle -> Stunned" not in caplog.text


# --- queue ---

def test_queue_defers_until_outer_transition_finishes():
    log = []
    machine = _machine(log, "queue")
    machine.change_state(Stunned)

    assert log == [
        "exit Idle",
        "enter Stunned",
        "stunned done",
        "exit Stunned",
        "enter Recovering",
    ]
    assert machine.current_key is Recovering


def test_queue_hooks_see_each_transition_in_order():
    log = []
    machine = _machine(log, "queue")
    events = []
    machine.on_transition(
        lambda m, prev, cur: events.append((type(prev).__name__, type(cur).__name__))
    )
    machine.change_state(Stunned)

    assert events == [("Idle", "Stunned"), ("Stunned", "Recovering")]


def test_queue_observer_request_runs_after_queued_transitions():
    log = []
    machine = _machine(log, "queue")
    events = _record(machine)
    machine.on_transition(
        lambda m, prev, cur: m.change_state(Idle) if isinstance(cur, Stunned) else None
    )
    machine.change_state(Stunned)

    assert events == [
        ("Idle", "Stunned"),
        ("Stunned", "Recovering"),
        ("Recovering", "Idle"),
    ]
    assert machine.current_key is Idle


def test_queue_validates_key_at_request_time():
    class Unknown(State):
        pass

    class Bad(Logged):
        def on_enter(self, owner, previous=None):
            self.machine.change_state(Unknown)

    log = []
    machine = StateMachine([Idle(log), Bad(log)], owner=Owner("hero"),
                           config=MachineConfig(reentrancy="queue"))
    machine.initialize(Idle)

    with pytest.raises(KeyError):
        machine.change_state(Bad)
    assert machine.current_key is Bad


# --- reject ---

def test_reject_raises_and_leaves_outer_target_active():
    log = []
    machine = _machine(log, "reject")

    with pytest.raises(ReentrantTransitionError):
        machine.change_state(Stunned)

    assert machine.current_key is Stunned
    assert "stunned done" not in log


def test_reject_allows_transitions_from_hooks():
    log = []
    machine = _machine(log, "reject")
    machine.on_transition(
        lambda m, prev, cur: m.change_state(Idle) if isinstance(cur, Recovering) else None
    )
    machine.change_state(Recovering)

    assert machine.current_key is Idle


def test_reject_allows_transitions_from_update():
    class Waiting(State):
        def on_update(self, owner, machine, dt):
            machine.change_state(Idle)

    log = []
    machine = StateMachine([Waiting(), Idle(log)], owner=Owner("hero"),
                           config=MachineConfig(reentrancy="reject"))
    machine.initialize(Waiting)
    machine.tick(0.1)

    assert machine.current_key is Idle


# --- requests from on_exit ---

@pytest.mark.parametrize("reentrancy", ["allow", "queue"])
def test_exit_request_runs_after_outer_target_is_entered(reentrancy):
    log = []
    machine = _machine(log, reentrancy, initial=Leaving)
    events = _record(machine)
    machine.change_state(Idle)

    assert log == [
        "exit Leaving",
        "enter Idle",
        "exit Idle",
        "enter Recovering",
    ]
    assert machine.current_key is Recovering
    assert isinstance(machine.previous_state, Idle)
    assert events == [("Leaving", "Idle"), ("Idle", "Recovering")]


@pytest.mark.parametrize("reentrancy", ["allow", "queue"])
def test_exit_request_for_already_active_state_is_noop(reentrancy):
    log = []
    machine = _machine(log, reentrancy, initial=Leaving)
    machine.change_state(Idle)
    machine.change_state(Leaving)
    log.clear()

    machine.change_state(Stunned)

    assert log.count("exit Leaving") == 1
    assert log.count("enter Recovering") == 1
    assert machine.current_key is Recovering


def test_exit_request_rejected_leaves_old_state_active():
    log = []
    machine = _machine(log, "reject", initial=Leaving)

    with pytest.raises(ReentrantTransitionError):
        machine.change_state(Idle)

    assert log == ["exit Leaving"]
    assert machine.current_key is Leaving
    assert isinstance(machine.current_state, Leaving)
