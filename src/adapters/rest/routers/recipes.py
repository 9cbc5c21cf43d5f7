"""Recipe endpoints: recommendations, search, details and favorites."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from factory import ServiceFactory
from application.context import RequestContext
from domain.exceptions import ValidationError
from domain.nutrition import profile_to_dict
from adapters.rest.dependencies import get_factory, get_request_context
from adapters.rest.schemas import (
    ConditionSummaryOut,
    FavoriteBody,
    FavoriteOut,
    FavoriteRecipeOut,
    RecipeDetailOut,
    RecipeOut,
)

router = APIRouter(tags=["recipes"])

# Static paths are registered before /{recipe_id} so they are not captured by it.


@router.get("/recommendations")
async def get_recommendations(
    user_id: Optional[int] = Query(None, alias="userId"),
    ctx: RequestContext = Depends(get_request_context),
    factory: ServiceFactory = Depends(get_factory),
):
    if user_id is None:
        raise ValidationError("User ID is required")
    service = factory.create_recommendation_service()
    result = await service.get_recommendations(ctx.for_user(user_id), user_id)
    return {
        "success": True,
        "recommendations": [RecipeOut.from_entity(r).wire() for r in result.recommendations],
        "matchedConditions": [
            ConditionSummaryOut.from_summary(c).wire() for c in result.matched_conditions
        ],
        "nutritionalNeeds": profile_to_dict(result.nutritional_needs),
    }


@router.get("/search")
async def search_recipes(
    q: Optional[str] = None,
    tags: Optional[str] = None,
    limit: int = Query(20, ge=1, le=100),
    factory: ServiceFactory = Depends(get_factory),
):
    tag_list = tags.split(",") if tags else []
    found = await factory.create_recipe_service().search(q, tag_list, limit)
    return {
        "success": True,
        "recipes": [RecipeOut.from_entity(r).wire() for r in found],
        "count": len(found),
    }


@router.post("/favorites", status_code=201)
async def add_favorite(
    body: FavoriteBody,
    ctx: RequestContext = Depends(get_request_context),
    factory: ServiceFactory = Depends(get_factory),
):
    favorite = await factory.create_recipe_service().add_favorite(ctx, body.user_id, body.recipe_id)
    return {"success": True, "favorite": FavoriteOut.from_entity(favorite).wire()}


@router.delete("/favorites/{user_id}/{recipe_id}")
async def remove_favorite(
    user_id: int,
    recipe_id: int,
    ctx: RequestContext = Depends(get_request_context),
    factory: ServiceFactory = Depends(get_factory),
):
    await factory.create_recipe_service().remove_favorite(ctx, user_id, recipe_id)
    return {"success": True, "message": "Recipe removed from favorites"}


@router.get("/favorites/{user_id}")
async def list_favorites(
    user_id: int,
    factory: ServiceFactory = Depends(get_factory),
):
    favorites = await factory.create_recipe_service().list_favorites(user_id)
    return {
        "success": True,
        "favorites": [
            FavoriteRecipeOut.from_entity(recipe, favorited_at=favorited_at).wire()
            for recipe, favorited_at in favorites
        ],
        "count": len(favorites),
    }


@router.get("/{recipe_id}")
async def get_recipe(
    recipe_id: int,
    user_id: Optional[int] = Query(None, alias="userId"),
    factory: ServiceFactory = Depends(get_factory),
):
    recipe, favorited = await factory.create_recipe_service().get(recipe_id, user_id)
    return {"success": True, "recipe": RecipeDetailOut.from_entity(recipe, is_favorited=favorited).wire()}
