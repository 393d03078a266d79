"""Hello World -- a character switching between idle, walking and running.

Demonstrates:
- Writing states by subclassing State and overriding only the hooks you need
- Marking states with @discoverable and collecting them with ScanDiscovery
- Attaching an owner, initializing, and changing state by class
- try_change_state() refusing an unknown state without raising

Run: python -m examples.basics
"""

import logging
import sys

from state_kit import Owner, ScanDiscovery, State, StateMachine, discoverable


# ---------------------------------------------------------------------------
# States
# ---------------------------------------------------------------------------

@discoverable
class IdleState(State):
    def on_enter(self, owner, previous=None):
        print(f"  {owner.name} is now idle.")

    def on_exit(self, owner):
        print(f"  {owner.name} stopped idling.")


@discoverable
class WalkState(State):
    def on_enter(self, owner, previous=None):
        print(f"  {owner.name} is now walking.")

    def on_exit(self, owner):
        print(f"  {owner.name} stopped walking.")

    def on_update(self, owner, machine, dt):
        print(f"  {owner.name} takes a step ({dt:.3f}s).")


@discoverable
class RunState(State):
    def on_enter(self, owner, previous=None):
        came_from = type(previous).__name__ if previous else "nothing"
        print(f"  {owner.name} is now running (after {came_from}).")


# Not marked, so the scan leaves it out.
class FlyState(State):
    pass


def main() -> None:
    logging.basicConfig(level=logging.WARNING, format="  %(levelname)s %(message)s")
    print("=== Hello World ===\n")

    machine = StateMachine(ScanDiscovery(sys.modules[__name__]))
    machine.attach_owner(Owner("Barry"))
    machine.initialize(IdleState)

    machine.change_state(WalkState)
    machine.tick(0.016)
    machine.change_state(RunState)

    print(f"\n  Can Barry fly? {machine.try_change_state(FlyState)}")
    print(f"\nDone. Barry is in {type(machine.current_state).__name__}.")


if __name__ == "__main__":
    main()
