from __future__ import annotations

import uuid
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request

from travel_companion.agents.chat_assistant import handle_chat_message
from travel_companion.auth import require_user
from travel_companion.models import User
from travel_companion.schemas import ChatRequest
from travel_companion.services import Services, get_services

router = APIRouter(tags=["chat"])


def chat_session_id(request: Request) -> str:
    sid = request.session.get("sid")
    if not sid:
        sid = request.session["sid"] = uuid.uuid4().hex
    return sid


@router.post("/chat")
async def chat(
    payload: ChatRequest,
    request: Request,
    user: User = Depends(require_user),
    services: Services = Depends(get_services),
) -> Dict[str, Any]:
    context = services.chat_sessions.get(chat_session_id(request))
    reply = await handle_chat_message(payload.message, context, services.chat_completer)
    return reply.as_dict()
