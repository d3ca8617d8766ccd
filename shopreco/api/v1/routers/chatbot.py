# api/v1/routers/chatbot.py
import logging
import time
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query

from shopreco.api.deps import ContainerDep, UserIdDep, require_admin
from shopreco.api.v1.schemas.chat import ChatRequest
from shopreco.domain.models.chat import ChatResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chatbot"])


@router.post("/chatbot", response_model=ChatResponse)
async def chatbot(body: ChatRequest, container: ContainerDep, user_id: UserIdDep):
    t0 = time.perf_counter()
    try:
        response = await container.chatbot.classify_and_respond(body.query, user_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    logger.info(
        "Response: chatbot intent=%s type=%s products=%s in %.4fs",
        response.intent, response.type, len(response.products), time.perf_counter() - t0,
    )
    return response


@router.get("/chatbot/analytics", dependencies=[Depends(require_admin)])
async def chatbot_analytics(
    container: ContainerDep,
    period: Literal["day", "week", "month", "year"] = Query("week"),
):
    analytics = await container.chatbot.chat_analytics(period)
    return {"analytics": analytics}
