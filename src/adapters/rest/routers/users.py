"""User endpoints: directory, conditions, nutritional needs and history."""

import asyncio

from fastapi import APIRouter, Depends

from factory import ServiceFactory
from application.context import RequestContext
from domain.nutrition import profile_to_dict
from adapters.rest.dependencies import get_factory, get_request_context
from adapters.rest.schemas import (
    ConditionSummaryOut,
    HistoryEntryOut,
    UserConditionBody,
    UserConditionOut,
    UserCreateBody,
    UserDetailOut,
    UserOut,
    UserUpdateBody,
)

router = APIRouter(tags=["users"])


@router.post("", status_code=201)
async def create_user(
    body: UserCreateBody,
    ctx: RequestContext = Depends(get_request_context),
    factory: ServiceFactory = Depends(get_factory),
):
    user = await factory.create_user_service().create(ctx, body.email, body.name)
    return {"success": True, "user": UserOut.from_entity(user).wire()}


@router.get("/email/{email}")
async def get_user_by_email(
    email: str,
    factory: ServiceFactory = Depends(get_factory),
):
    user = await factory.create_user_service().get_by_email(email)
    return {"success": True, "user": UserOut.from_entity(user).wire()}


@router.get("/{user_id}")
async def get_user(
    user_id: int,
    factory: ServiceFactory = Depends(get_factory),
):
    user, conditions = await asyncio.gather(
        factory.create_user_service().get(user_id),
        factory.create_condition_service().list_for_user(user_id),
    )
    detail = UserDetailOut.from_entity(
        user,
        medical_conditions=[UserConditionOut.from_entity(uc) for uc in conditions],
    )
    return {"success": True, "user": detail.wire()}


@router.put("/{user_id}")
async def update_user(
    user_id: int,
    body: UserUpdateBody,
    ctx: RequestContext = Depends(get_request_context),
    factory: ServiceFactory = Depends(get_factory),
):
    user = await factory.create_user_service().update(ctx, user_id, body.name, body.email)
    return {"success": True, "user": UserOut.from_entity(user).wire()}


# --- Conditions ---

@router.get("/{user_id}/conditions")
async def list_user_conditions(
    user_id: int,
    factory: ServiceFactory = Depends(get_factory),
):
    conditions = await factory.create_condition_service().list_for_user(user_id)
    return {
        "success": True,
        "conditions": [UserConditionOut.from_entity(uc).wire() for uc in conditions],
    }


@router.post("/{user_id}/conditions", status_code=201)
async def add_user_condition(
    user_id: int,
    body: UserConditionBody,
    ctx: RequestContext = Depends(get_request_context),
    factory: ServiceFactory = Depends(get_factory),
):
    added = await factory.create_condition_service().add_to_user(
        ctx.for_user(user_id), user_id, body.condition_id, body.severity, body.notes,
    )
    return {"success": True, "userCondition": UserConditionOut.from_entity(added).wire()}


@router.delete("/{user_id}/conditions/{condition_id}")
async def remove_user_condition(
    user_id: int,
    condition_id: int,
    ctx: RequestContext = Depends(get_request_context),
    factory: ServiceFactory = Depends(get_factory),
):
    await factory.create_condition_service().remove_from_user(ctx.for_user(user_id), user_id, condition_id)
    return {"success": True, "message": "Medical condition removed"}


# --- Derived views ---

@router.get("/{user_id}/nutritional-needs")
async def get_nutritional_needs(
    user_id: int,
    ctx: RequestContext = Depends(get_request_context),
    factory: ServiceFactory = Depends(get_factory),
):
    needs = await factory.create_nutrition_service().get_user_needs(ctx.for_user(user_id), user_id)
    return {
        "success": True,
        "conditions": [ConditionSummaryOut.from_summary(c).wire() for c in needs.conditions],
        "nutritionalNeeds": profile_to_dict(needs.nutritional_needs),
    }


@router.get("/{user_id}/recommendations")
async def get_recommendation_history(
    user_id: int,
    factory: ServiceFactory = Depends(get_factory),
):
    history = await factory.create_recipe_service().history(user_id)
    return {
        "success": True,
        "history": [HistoryEntryOut.from_entity(h).wire() for h in history],
        "count": len(history),
    }
