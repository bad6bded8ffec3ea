"""
Generative AI advisor for Deepmetric.

Two calls to the Gemini API:
- a chat advisor that recommends courses from the current catalog
- tag suggestions for the course editor

Neither ever touches enrollment or catalog state. Each keeps its own
isolated result (a chat transcript, a suggestion list), and when a newer
request supersedes an older one for the same key, the older reply is
discarded when it arrives.
"""

from typing import Any, Dict, Iterable, List, Optional
import itertools
import json
import logging
import threading

from google import genai
from google.genai import types

from deepmetric.core.config import settings
from deepmetric.schemas.advisor import ChatMessage, ChatReply, ChatRole
from deepmetric.schemas.course import Course
from deepmetric.utils.text import normalize_tag, strip_html


logger = logging.getLogger(__name__)


ADVISOR_ERROR_MESSAGE = (
    "Sorry, I'm having trouble connecting to the advisor right now. "
    "Please try again in a moment."
)


class AdvisorUnavailable(RuntimeError):
    """No API key is configured for the generative AI client."""


class RequestTracker:
    """
    Hands out request tickets per key; only the newest ticket is current.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._counter = itertools.count(1)
        self._latest: Dict[str, int] = {}

    def begin(self, key: str) -> int:
        with self._lock:
            ticket = next(self._counter)
            self._latest[key] = ticket
            return ticket

    def is_current(self, key: str, ticket: int) -> bool:
        with self._lock:
            return self._latest.get(key) == ticket


def build_system_instruction(courses: Iterable[Course]) -> str:
    """
    Build the advisor's system instruction around the catalog.

    Args:
        courses: The current catalog

    Returns:
        str: System instruction text
    """
    course_context = json.dumps([
        {
            "title": c.title,
            "description": strip_html(c.description),
            "level": c.level.value,
            "tags": c.tags,
            "price": c.price,
            "instructor": c.instructor
        }
        for c in courses
    ])

    return (
        f"You are an expert Academic Advisor at {settings.PROJECT_NAME}.\n"
        "Your goal is to help potential students find the perfect course for their career goals.\n"
        f"The currency for all courses is {settings.CURRENCY} (Ghanaian Cedi).\n\n"
        "Here is our CURRENT Course Catalog (prices and details may have changed recently): "
        f"{course_context}\n\n"
        "Rules:\n"
        "1. Only recommend courses from the catalog provided above.\n"
        "2. Be encouraging, professional, and concise.\n"
        f"3. If a user asks about pricing, mention the specific price from the catalog in {settings.CURRENCY}.\n"
        "4. If a user is unsure, ask them about their current skill level (Beginner, Intermediate, Advanced).\n"
        f"5. Keep responses under {settings.ADVISOR_MAX_WORDS} words unless detailed analysis is requested.\n"
    )


def build_tag_prompt(title: str, description: str) -> str:
    return (
        f"Generate {settings.SUGGESTED_TAG_COUNT} relevant, concise, and professional tags "
        "(single words or short phrases) for a data analytics/programming course "
        "with the following details:\n"
        f"Title: {title}\n"
        f"Description: {description}\n\n"
        'Return ONLY a JSON array of strings. Example: ["Python", "Data Science", "Statistics"]'
    )


def parse_tags(text: Optional[str]) -> List[str]:
    """
    Parse the model's JSON array of tags.

    Raises:
        ValueError: If the text is not a JSON array of strings
    """
    if not text:
        return []
    tags = json.loads(text)
    if not isinstance(tags, list):
        raise ValueError(f"Expected a JSON array of tags, got {type(tags).__name__}")
    return [t.strip() for t in tags if isinstance(t, str) and t.strip()]


class AdvisorService:
    """
    Course advisor chat and tag suggestions backed by Gemini.
    """

    def __init__(self, client: Optional[Any] = None, model: Optional[str] = None):
        self._client = client
        self.model = model or settings.GEMINI_MODEL
        self._lock = threading.Lock()
        self._transcripts: Dict[str, List[ChatMessage]] = {}
        self._chat_requests = RequestTracker()
        self._tag_requests = RequestTracker()

    @property
    def client(self) -> Any:
        if self._client is None:
            if not settings.advisor_enabled:
                raise AdvisorUnavailable("GEMINI_API_KEY is not configured")
            self._client = genai.Client(api_key=settings.GEMINI_API_KEY)
        return self._client

    def history(self, conversation_id: str) -> List[ChatMessage]:
        with self._lock:
            return list(self._transcripts.get(conversation_id, []))

    def reset(self, conversation_id: str) -> None:
        with self._lock:
            self._transcripts.pop(conversation_id, None)

    async def ask(
        self,
        conversation_id: str,
        message: str,
        courses: List[Course]
    ) -> ChatReply:
        """
        Ask the advisor a question.

        The transcript only grows when a reply arrives for the newest
        request; failures leave it untouched.

        Args:
            conversation_id: Whose transcript this belongs to
            message: The user's message
            courses: Catalog snapshot the advisor may recommend from

        Returns:
            ChatReply: The reply, an error, or a superseded marker
        """
        ticket = self._chat_requests.begin(conversation_id)
        history = self.history(conversation_id)

        try:
            chat = self.client.aio.chats.create(
                model=self.model,
                config=types.GenerateContentConfig(
                    system_instruction=build_system_instruction(courses),
                    temperature=settings.ADVISOR_TEMPERATURE
                ),
                history=[
                    types.Content(role=m.role.value, parts=[types.Part(text=m.text)])
                    for m in history
                ]
            )
            response = await chat.send_message(message)
            reply = response.text or ""
        except Exception as e:
            logger.error(f"Advisor request failed for {conversation_id}: {e}")
            if not self._chat_requests.is_current(conversation_id, ticket):
                return ChatReply(superseded=True)
            return ChatReply(error=ADVISOR_ERROR_MESSAGE)

        if not self._chat_requests.is_current(conversation_id, ticket):
            logger.debug(f"Discarding superseded advisor reply for {conversation_id}")
            return ChatReply(superseded=True)

        with self._lock:
            transcript = self._transcripts.setdefault(conversation_id, [])
            transcript.append(ChatMessage(role=ChatRole.USER, text=message))
            transcript.append(ChatMessage(role=ChatRole.MODEL, text=reply))
        return ChatReply(reply=reply)

    async def suggest_tags(
        self,
        editor_key: str,
        title: str,
        description: str,
        existing_tags: Iterable[str] = ()
    ) -> List[str]:
        """
        Suggest tags for a course being edited.

        Never raises: failures and superseded requests give an empty list.

        Args:
            editor_key: Identifies the editor the suggestions are for
            title: Course title
            description: Course description (HTML allowed)
            existing_tags: Tags already on the course, left out of the result

        Returns:
            List[str]: New tag suggestions
        """
        plain_description = strip_html(description)
        if not title.strip() and not plain_description:
            return []

        ticket = self._tag_requests.begin(editor_key)

        try:
            response = await self.client.aio.models.generate_content(
                model=self.model,
                contents=build_tag_prompt(title, plain_description),
                config=types.GenerateContentConfig(
                    response_mime_type="application/json",
                    response_schema=list[str]
                )
            )
            tags = parse_tags(response.text)
        except Exception as e:
            logger.error(f"Tag generation failed: {e}")
            return []

        if not self._tag_requests.is_current(editor_key, ticket):
            logger.debug(f"Discarding superseded tag suggestions for {editor_key}")
            return []

        current = {normalize_tag(t) for t in existing_tags}
        suggestions = []
        for tag in tags:
            key = normalize_tag(tag)
            if key not in current:
                current.add(key)
                suggestions.append(tag)
        return suggestions


# Process-wide advisor
advisor = AdvisorService()


def get_advisor() -> AdvisorService:
    """Dependency to get the advisor service."""
    return advisor
