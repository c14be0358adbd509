# snowdrift/ecs/component.py

class Component:
    """
    Base class for all components.
    Holds data for one entity; behaviour lives in systems.
    """

    def __init__(self):
        self.entity = None  # Back-reference to owner
        self.enabled = True

    @property
    def active(self) -> bool:
        """Enabled and attached to an active entity."""
        return self.enabled and self.entity is not None and self.entity.active

    def sibling(self, component_type):
        """Another component on the same entity, or None when detached."""
        if self.entity is None:
            return None
        return self.entity.get_component(component_type)

    def on_destroy(self):
        """Called when the component or its entity is destroyed."""
        pass
