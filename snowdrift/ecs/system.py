# snowdrift/ecs/system.py

from abc import ABC, abstractmethod
from typing import List, Type
from snowdrift.ecs.component import Component
from snowdrift.ecs.entity import Entity


class System(ABC):
    """
    Base class for all systems.
    A system runs each tick over the active entities that carry every
    component type it requires.
    """

    def __init__(self):
        self.priority = 0  # Lower numbers run first
        self.enabled = True

    @abstractmethod
    def get_required_components(self) -> List[Type[Component]]:
        pass

    def matches(self, entity: Entity) -> bool:
        if not entity.active:
            return False
        return all(entity.has_component(t) for t in self.get_required_components())

    @abstractmethod
    def update(self, entities: List[Entity], dt: float):
        """Process matching entities for one tick."""
        pass
