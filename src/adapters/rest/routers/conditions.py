"""Medical condition catalog endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends

from factory import ServiceFactory
from adapters.rest.dependencies import get_factory
from adapters.rest.schemas import ConditionOut

router = APIRouter(tags=["medical-conditions"])


@router.get("")
async def list_conditions(factory: ServiceFactory = Depends(get_factory)):
    conditions = await factory.create_condition_service().list_catalog()
    return {
        "success": True,
        "conditions": [ConditionOut.from_entity(c).wire() for c in conditions],
        "count": len(conditions),
    }


@router.get("/search")
async def search_conditions(
    q: Optional[str] = None,
    factory: ServiceFactory = Depends(get_factory),
):
    conditions = await factory.create_condition_service().search_catalog(q)
    return {
        "success": True,
        "conditions": [ConditionOut.from_entity(c).wire() for c in conditions],
        "count": len(conditions),
    }


@router.get("/{condition_id}")
async def get_condition(
    condition_id: int,
    factory: ServiceFactory = Depends(get_factory),
):
    condition = await factory.create_condition_service().get_condition(condition_id)
    return {"success": True, "condition": ConditionOut.from_entity(condition).wire()}
