"""
Chat API Router

Relay to the eco assistant. Signed-in callers get answers grounded in their
own totals; anonymous callers get general advice. Upstream failures come back
as {error, fallback} with the upstream-derived status code.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from core.auth import get_current_user, get_optional_user
from core.config import settings
from core.exceptions import UpstreamServiceError
from models import Profile
from routers.activities import get_activity_store
from schemas import ChatFailure, ChatReply, ChatRequest, UsageSummaryResponse
from services.activity_ledger import ActivityStore
from services.chat_assistant import ChatAssistant, GatewayChatProvider, UserChatContext
from services.weekly_aggregator import summarize_history, usage_summary_line

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/chat", tags=["chat"])

CONTEXT_WEEKS = 4


def get_chat_assistant() -> ChatAssistant:
    return ChatAssistant(GatewayChatProvider.from_settings(settings))


def _user_context(user: Profile, store: ActivityStore) -> UserChatContext:
    try:
        history = store.weekly_history(user.id, limit=CONTEXT_WEEKS)
    except SQLAlchemyError as e:
        # Stats are a nice-to-have for the prompt; answer without them
        logger.warning(f"Could not load weekly history for chat context: {e}")
        history = []
    return UserChatContext(
        username=user.username,
        co2_emitted=user.co2_emitted,
        green_points=user.green_points,
        total_data_used_mb=user.total_data_used_mb,
        weekly_grams=[w.co2_emitted_grams for w in history],
    )


@router.post(
    "",
    response_model=ChatReply,
    responses={402: {"model": ChatFailure}, 429: {"model": ChatFailure}, 500: {"model": ChatFailure}},
)
def chat(
    request: ChatRequest,
    current_user: Optional[Profile] = Depends(get_optional_user),
    store: ActivityStore = Depends(get_activity_store),
    assistant: ChatAssistant = Depends(get_chat_assistant),
):
    context = _user_context(current_user, store) if current_user else None
    result = assistant.reply(request.message, context)
    if not result.ok:
        return JSONResponse(status_code=result.status_code, content=result.to_payload())
    return ChatReply(reply=result.reply)


@router.get("/summary", response_model=UsageSummaryResponse)
def usage_summary(
    current_user: Profile = Depends(get_current_user),
    store: ActivityStore = Depends(get_activity_store),
):
    """The stats line shown when the chat panel opens."""
    try:
        history = store.weekly_history(current_user.id, limit=2)
    except SQLAlchemyError as e:
        logger.error(f"Error fetching usage summary for user {current_user.id}: {e}")
        raise UpstreamServiceError()

    summary = summarize_history(history)
    return UsageSummaryResponse(
        summary=usage_summary_line(
            this_week_grams=summary.change.current,
            change=summary.change,
            total_grams=current_user.co2_emitted,
            green_points=current_user.green_points,
        )
    )
