from entity_repository.models.base import Entity

__all__ = ["Entity"]
