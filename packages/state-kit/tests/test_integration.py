"""Integration tests: owners with payload driven by damage/death states."""
from state_kit import HostLoop, Owner, State, StateMachine


class Character(Owner):
    """Owner with a health payload."""

    def __init__(self, name: str, health: int = 1) -> None:
        super().__init__(name)
        self.health = health


class TakeDamage(State):
    """Loses one health on enter; dies on the next update at zero health."""

    def on_enter(self, owner, previous=None):
        owner.health -= 1

    def on_update(self, owner, machine, dt):
        if owner.health <= 0:
            machine.change_state(Die)


class Die(State):
    """Destroys the owner on enter and remembers what it came from."""

    def __init__(self) -> None:
        super().__init__()
        self.came_from = None

    def on_enter(self, owner, previous=None):
        self.came_from = previous
        owner.destroy()


def _build(health: int) -> tuple[Character, StateMachine]:
    character = Character("Owner", health=health)
    machine = StateMachine([TakeDamage(), Die()])
    machine.attach_owner(character)
    return character, machine


class TestDamageScenario:
    """Damage and death flow through a single machine."""

    def test_lethal_damage_transitions_to_die(self):
        """Health 1: enter drops to 0, the next tick dies and destroys the owner."""
        # Arrange
        character, machine = _build(health=1)

        # Act
        machine.initialize(TakeDamage)

        # Assert
        assert character.health == 0
        assert machine.current_key is TakeDamage

        # Act
        machine.tick(0.016)

        # Assert
        assert machine.current_key is Die
        assert character.destroyed is True
        die = machine.get_state(Die)
        assert isinstance(die.came_from, TakeDamage)

    def test_non_lethal_damage_stays(self):
        """Health 3: enter drops to 2, ticking keeps the state and the owner."""
        character, machine = _build(health=3)

        machine.initialize(TakeDamage)
        assert character.health == 2

        machine.tick(0.016)
        assert machine.current_key is TakeDamage
        assert character.destroyed is False

    def test_unregistered_state_is_refused(self):
        """An unknown state leaves the damaged character where it was."""
        character, machine = _build(health=5)
        machine.initialize(TakeDamage)
        damage = machine.current_state

        class Recover(State):
            pass

        # Recover is not registered; the machine refuses it and stays put.
        assert machine.try_change_state(Recover) is False
        assert machine.current_state is damage
        assert character.health == 4

    def test_two_owners_are_independent(self):
        """Each machine drives only its own owner."""
        weak, weak_machine = _build(health=1)
        tough, tough_machine = _build(health=10)
        weak_machine.initialize(TakeDamage)
        tough_machine.initialize(TakeDamage)

        weak_machine.tick()
        tough_machine.tick()

        assert weak.destroyed is True
        assert tough.destroyed is False
        assert tough.health == 9


class TestHostLoopScenario:
    """The host loop ticks machines until they settle."""

    def test_loop_drives_character_to_death(self):
        character, machine = _build(health=1)
        machine.initialize(TakeDamage)
        transitions = []
        machine.on_transition(
            lambda m, prev, cur: transitions.append((type(prev).__name__, type(cur).__name__))
        )

        loop = HostLoop(fixed_tps=50)
        loop.add(machine)
        loop.run(3)

        assert character.destroyed is True
        assert machine.current_key is Die
        assert transitions == [("TakeDamage", "Die")]
