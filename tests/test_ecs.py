import logging

from snowdrift.ecs.component import Component
from snowdrift.ecs.system import System
from snowdrift.ecs.world import World


class Snowfall(Component):
    pass


class Wind(Component):
    def __init__(self):
        super().__init__()
        self.destroyed = False

    def on_destroy(self):
        self.destroyed = True


class RecordingSystem(System):
    def __init__(self, priority=0, fail=False):
        super().__init__()
        self.priority = priority
        self.fail = fail
        self.seen = []

    def get_required_components(self):
        return [Snowfall, Wind]

    def update(self, entities, dt):
        if self.fail:
            raise ValueError("storm")
        self.seen.append([e.name for e in entities])


def test_component_helpers():
    world = World()
    entity = world.create_entity("Cell")
    snow = Snowfall()
    assert not snow.active
    assert snow.sibling(Wind) is None

    entity.add_component(snow)
    wind = entity.add_component(Wind())

    assert snow.active
    assert snow.sibling(Wind) is wind

    entity.active = False
    assert not snow.active


def test_systems_see_only_matching_entities():
    world = World()
    system = RecordingSystem()
    world.add_system(system)

    full = world.create_entity("Full")
    full.add_component(Snowfall())
    full.add_component(Wind())
    world.create_entity("Partial").add_component(Snowfall())
    sleeping = world.create_entity("Sleeping")
    sleeping.add_component(Snowfall())
    sleeping.add_component(Wind())
    sleeping.active = False

    world.update_systems(0.1)

    assert system.seen == [["Full"]]


def test_systems_run_in_priority_order_and_failures_are_isolated(caplog):
    world = World()
    late = RecordingSystem(priority=10)
    broken = RecordingSystem(priority=5, fail=True)
    world.add_system(late)
    world.add_system(broken)

    caplog.clear()
    world.update_systems(0.1)

    assert world.systems == [broken, late]
    assert late.seen == [[]]
    assert any(r.levelno == logging.ERROR and "storm" in r.getMessage() for r in caplog.records)


def test_remove_and_destroy_call_on_destroy():
    world = World()
    entity = world.create_entity()
    wind = entity.add_component(Wind())
    entity.remove_component(Wind)

    assert wind.destroyed
    assert wind.entity is None

    other = world.create_entity()
    wind = other.add_component(Wind())
    world.destroy_entity(other)

    assert wind.destroyed
    assert other not in world.entities
    assert other.components == {}
