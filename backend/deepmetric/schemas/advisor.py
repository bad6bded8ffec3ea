"""
AI advisor schemas for Deepmetric.
"""

from enum import Enum
from typing import List, Optional
from pydantic import Field

from .base import CamelModel


class ChatRole(str, Enum):
    USER = "user"
    MODEL = "model"


class ChatMessage(CamelModel):
    role: ChatRole
    text: str


class ChatRequest(CamelModel):
    message: str = Field(..., min_length=1)


class ChatReply(CamelModel):
    """
    Advisor reply.

    ``superseded`` is set when a newer request for the same conversation
    was issued before this one finished; its reply is discarded.
    """
    reply: Optional[str] = None
    error: Optional[str] = None
    superseded: bool = False


class ChatHistory(CamelModel):
    messages: List[ChatMessage]


class TagSuggestionRequest(CamelModel):
    title: str = ""
    description: str = ""
    existing_tags: List[str] = Field(default_factory=list)
    editor_key: str = "new"


class TagSuggestionResponse(CamelModel):
    tags: List[str]
