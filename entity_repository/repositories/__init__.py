from entity_repository.repositories.base import EntityRepository

__all__ = ["EntityRepository"]
