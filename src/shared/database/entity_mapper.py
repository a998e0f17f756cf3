from typing import Any, Callable, Mapping


class EntityMapper:
    """
    Routes domain models to the function that builds their database entity.

    The unit of work is model-agnostic; it asks this registry to turn
    whatever it was handed into something SQLAlchemy can persist.
    """

    def __init__(self, entity_mappings: Mapping[type, Callable[[Any], Any]]):
        self.entity_mappings = dict(entity_mappings)

    def supports(self, model_type: type) -> bool:
        return model_type in self.entity_mappings

    def map_to_entity(self, model_instance: Any):
        model_type = type(model_instance)
        if not self.supports(model_type):
            raise ValueError(f"No entity mapping found for model type: {model_type.__name__}")
        return self.entity_mappings[model_type](model_instance)
