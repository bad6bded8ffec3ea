"""
AI advisor router for Deepmetric.

Chat with the course advisor and get tag suggestions for the course editor.
"""

from typing import Optional, Dict, Any
from fastapi import APIRouter, Depends

from deepmetric.schemas.advisor import (
    ChatHistory,
    ChatReply,
    ChatRequest,
    TagSuggestionRequest,
    TagSuggestionResponse
)
from deepmetric.schemas.user import User
from deepmetric.services.advisor import AdvisorService, get_advisor
from deepmetric.services.catalog import CatalogStore
from deepmetric.routers.auth import get_catalog, get_current_admin_user, get_optional_user


router = APIRouter()

GUEST_CONVERSATION = "guest"


def conversation_for(user: Optional[User]) -> str:
    return user.id if user else GUEST_CONVERSATION


@router.post("/chat", response_model=ChatReply)
async def chat(
    chat_request: ChatRequest,
    current_user: Optional[User] = Depends(get_optional_user),
    catalog: CatalogStore = Depends(get_catalog),
    advisor: AdvisorService = Depends(get_advisor)
) -> ChatReply:
    """
    Ask the advisor for course recommendations.
    """
    return await advisor.ask(
        conversation_for(current_user),
        chat_request.message,
        catalog.list_courses()
    )


@router.get("/history", response_model=ChatHistory)
async def get_history(
    current_user: Optional[User] = Depends(get_optional_user),
    advisor: AdvisorService = Depends(get_advisor)
) -> Dict[str, Any]:
    """
    Get the advisor conversation so far.
    """
    return {"messages": advisor.history(conversation_for(current_user))}


@router.delete("/history")
async def clear_history(
    current_user: Optional[User] = Depends(get_optional_user),
    advisor: AdvisorService = Depends(get_advisor)
) -> Dict[str, str]:
    """
    Start a new advisor conversation.
    """
    advisor.reset(conversation_for(current_user))
    return {"message": "Conversation cleared"}


@router.post(
    "/tags",
    response_model=TagSuggestionResponse,
    dependencies=[Depends(get_current_admin_user)]
)
async def suggest_tags(
    suggestion_request: TagSuggestionRequest,
    advisor: AdvisorService = Depends(get_advisor)
) -> Dict[str, Any]:
    """
    Suggest tags for a course being edited.
    """
    tags = await advisor.suggest_tags(
        suggestion_request.editor_key,
        suggestion_request.title,
        suggestion_request.description,
        suggestion_request.existing_tags
    )
    return {"tags": tags}
