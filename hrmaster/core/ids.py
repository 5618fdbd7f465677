from typing import Optional, Type, TypeVar

from beanie import Document, PydanticObjectId
from bson import ObjectId

from hrmaster.core.errors import NotFound

D = TypeVar("D", bound=Document)


def as_object_id(value) -> Optional[PydanticObjectId]:
    """Return a PydanticObjectId for valid ids, None otherwise."""
    if isinstance(value, ObjectId):
        return PydanticObjectId(value)
    if value is None or not ObjectId.is_valid(str(value)):
        return None
    return PydanticObjectId(str(value))


async def get_or_404(model: Type[D], doc_id, message: str = "Not found") -> D:
    oid = as_object_id(doc_id)
    doc = await model.get(oid) if oid else None
    if not doc:
        raise NotFound(message)
    return doc
