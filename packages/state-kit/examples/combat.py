"""Combat -- characters that take damage and die, driven by a host loop.

Demonstrates:
- An Owner subclass carrying domain payload (health)
- States that transition from on_update via the machine they receive
- Explicit (key, state) registration with string keys
- HostLoop running fixed steps and frame ticks for several machines
- Observing transitions with on_transition()

Run: python -m examples.combat
"""

from state_kit import ExplicitDiscovery, HostLoop, Owner, State, StateMachine


# ---------------------------------------------------------------------------
# Owner
# ---------------------------------------------------------------------------

class Fighter(Owner):
    def __init__(self, name: str, health: int) -> None:
        super().__init__(name)
        self.health = health

    def destroy(self) -> None:
        super().destroy()
        print(f"  {self.name} destroyed!")


# ---------------------------------------------------------------------------
# States
# ---------------------------------------------------------------------------

class Hurt(State):
    """Lose one health per fixed step; die when it runs out."""

    def on_fixed_update(self, owner, machine, dt):
        owner.health -= 1

    def on_update(self, owner, machine, dt):
        if owner.health <= 0:
            machine.change_state("dead")


class Dead(State):
    def on_enter(self, owner, previous=None):
        owner.destroy()


def main() -> None:
    print("=== Combat ===\n")

    loop = HostLoop(fixed_tps=10)

    def announce(machine, previous, current):
        print(f"  [frame {loop.clock.frame_number}] {machine.owner.name}: "
              f"{type(previous).__name__} -> {type(current).__name__}")

    for name, health in (("Goblin", 2), ("Troll", 5)):
        machine = StateMachine(ExplicitDiscovery(("hurt", Hurt()), ("dead", Dead())))
        machine.attach_owner(Fighter(name, health))
        machine.initialize("hurt")
        machine.on_transition(announce)
        loop.add(machine)

    loop.run(8)

    print(f"\nDone after {loop.clock.frame_number} frames.")


if __name__ == "__main__":
    main()
