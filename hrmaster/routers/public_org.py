from fastapi import APIRouter

from hrmaster.models.org import AppRole, Department, Zone
from hrmaster.services import org_service

router = APIRouter(prefix="/public/org", tags=["public"])


async def _names(model):
    return [{"id": str(i.id), "name": i.name} for i in await org_service.list_items(model)]


@router.get("/departments")
async def departments():
    return await _names(Department)


@router.get("/zones")
async def zones():
    return await _names(Zone)


@router.get("/roles")
async def roles():
    return await _names(AppRole)
