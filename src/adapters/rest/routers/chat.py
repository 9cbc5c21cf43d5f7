"""Cooking assistant chat endpoint."""

from fastapi import APIRouter, Depends

from factory import ServiceFactory
from application.context import RequestContext
from adapters.rest.dependencies import get_factory, get_request_context
from adapters.rest.schemas import ChatBody, ChatMessageOut

router = APIRouter(tags=["chat"])


@router.post("")
async def chat(
    body: ChatBody,
    ctx: RequestContext = Depends(get_request_context),
    factory: ServiceFactory = Depends(get_factory),
):
    messages, recipe = body.to_domain()
    reply = await factory.create_cooking_chat_service().reply(ctx, messages, recipe)
    return {"success": True, "message": ChatMessageOut(role=reply.role, content=reply.content).wire()}
