"""
Admin-managed lookup lists (departments, zones, roles/positions).
"""
import logging
from datetime import datetime
from typing import List, Optional, Type, Union

from pymongo.errors import DuplicateKeyError

from hrmaster.core.errors import DuplicateResource, ProtectedResource, ValidationFailed
from hrmaster.core.ids import get_or_404
from hrmaster.models.org import AppRole, Department, Zone

logger = logging.getLogger(__name__)

LookupModel = Type[Union[Department, Zone, AppRole]]

LABELS = {Department: "Department", Zone: "Zone", AppRole: "Role"}


async def list_items(model: LookupModel) -> List:
    return await model.find({}).sort("+name").to_list()


async def create_item(model: LookupModel, name: Optional[str], description: Optional[str] = None):
    if not name or not name.strip():
        raise ValidationFailed("Name is required")
    item = model(name=name.strip(), description=(description or "").strip())
    try:
        await item.insert()
    except DuplicateKeyError:
        raise DuplicateResource(f"{LABELS[model]} name must be unique")
    logger.info("%s '%s' created", LABELS[model], item.name)
    return item


async def update_item(model: LookupModel, item_id: str, name: Optional[str] = None, description: Optional[str] = None):
    item = await get_or_404(model, item_id)
    if name is not None:
        if not name.strip():
            raise ValidationFailed("Name is required")
        item.name = name.strip()
    if description is not None:
        item.description = description.strip()
    try:
        await item.save()
    except DuplicateKeyError:
        raise DuplicateResource(f"{LABELS[model]} name must be unique")
    return item


async def delete_item(model: LookupModel, item_id: str) -> str:
    item = await get_or_404(model, item_id)
    if getattr(item, "protected", False):
        raise ProtectedResource()
    await item.delete()
    logger.info("%s '%s' deleted", LABELS[model], item.name)
    return str(item.id)


async def seed_defaults(departments: List[str], zones: List[str], roles: List[dict]) -> int:
    """Insert any missing lookup entries; returns how many were created."""
    created = 0
    for name in departments:
        if not await Department.find_one({"name": name}):
            await Department(name=name).insert()
            created += 1
    for name in zones:
        if not await Zone.find_one({"name": name}):
            await Zone(name=name).insert()
            created += 1
    for role in roles:
        if not await AppRole.find_one({"name": role["name"]}):
            await AppRole(
                name=role["name"],
                description=role.get("description", ""),
                protected=role.get("protected", False),
                created_at=datetime.utcnow(),
            ).insert()
            created += 1
    return created
