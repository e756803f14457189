"""
Record-to-shape projection.

ModelProjector maps stored records onto a pydantic shape by attribute name,
so a shape may declare any subset of the entity's fields:

    class ProductDto(BaseModel):
        name: str
        price: Decimal

    projector = ModelProjector(ProductDto)
    dto = projector.project(product)
"""

from typing import Any, Generic, Iterable, TypeVar

from pydantic import BaseModel

T = TypeVar("T")
S = TypeVar("S", bound=BaseModel)


class ModelProjector(Generic[S]):
    """Projects records onto a pydantic model via `from_attributes`."""

    def __init__(self, shape: type[S]):
        self.shape = shape

    def project(self, record: Any) -> S:
        return self.shape.model_validate(record, from_attributes=True)

    def project_many(self, records: Iterable[Any]) -> list[S]:
        return [self.project(record) for record in records]


class IdentityProjector(Generic[T]):
    """Returns records unchanged; used when no shape is requested."""

    def project(self, record: T) -> T:
        return record

    def project_many(self, records: Iterable[T]) -> list[T]:
        return list(records)


def projector_for(shape: type[BaseModel] | None) -> ModelProjector[Any] | IdentityProjector[Any]:
    """Return a projector for `shape`, or the identity projector for None."""
    if shape is None:
        return IdentityProjector()
    return ModelProjector(shape)
