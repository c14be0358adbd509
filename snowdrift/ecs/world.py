# snowdrift/ecs/world.py

from typing import List
from snowdrift.ecs.entity import Entity
from snowdrift.ecs.system import System
from snowdrift.core.logging import get_logger
from snowdrift.utils.profiler import profile_section


class World:
    """
    ECS world manager.
    Manages entities, systems, and their interactions.
    """

    def __init__(self):
        self.entities: List[Entity] = []
        self.systems: List[System] = []
        self.logger = get_logger()

    def create_entity(self, name: str = "") -> Entity:
        """Create a new entity."""
        entity = Entity(name)
        self.entities.append(entity)
        return entity

    def destroy_entity(self, entity: Entity):
        """Remove an entity from the world."""
        if entity not in self.entities:
            return

        for component in entity.components.values():
            try:
                component.on_destroy()
            except Exception as e:
                self.logger.error(f"Error destroying component {type(component).__name__} on entity {entity.id}: {e}")

            # Break circular reference
            component.entity = None

        entity.components.clear()
        self.entities.remove(entity)

    def add_system(self, system: System):
        """Register a system."""
        self.systems.append(system)
        self.systems.sort(key=lambda s: s.priority)
        self.logger.info(f"Registered system {type(system).__name__} with priority {system.priority}")

    def update_systems(self, dt: float):
        """Update all systems. A failing system is logged and skipped for this frame."""
        for system in self.systems:
            if not system.enabled:
                continue

            try:
                with profile_section(f"Sys:{type(system).__name__}"):
                    entities = self._get_entities_for_system(system)
                    system.update(entities, dt)
            except Exception as e:
                self.logger.error(f"System {type(system).__name__} update failed: {e}", exc_info=True)

    def _get_entities_for_system(self, system: System) -> List[Entity]:
        return [entity for entity in self.entities if system.matches(entity)]
