import abc
from typing import Generic, TypeVar


TModel = TypeVar("TModel")
TEntity = TypeVar("TEntity")


class BaseEntityMapper(abc.ABC, Generic[TModel, TEntity]):
    """Two-way conversion between a domain model and its ORM entity."""

    @staticmethod
    @abc.abstractmethod
    def to_entity(model_instance: TModel) -> TEntity:
        """Build a transient entity carrying the model's values."""

    @staticmethod
    @abc.abstractmethod
    def to_model(entity: TEntity) -> TModel:
        """Build a domain model from a loaded entity."""
