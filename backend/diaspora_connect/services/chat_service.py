"""Chat Service: assembles the conversation and asks OpenAI for the next reply."""

import logging

from diaspora_connect.config import Settings
from diaspora_connect.core.chat_messages import (
    FALLBACK_REPLY, SYSTEM_PROMPT, build_chat_messages,
)
from diaspora_connect.core.errors import ErrorContext
from diaspora_connect.infrastructure.openai_client import ResilientOpenAIClient

logger = logging.getLogger(__name__)


async def process_chat(
    client: ResilientOpenAIClient,
    settings: Settings,
    message: str | None,
    history: list | None,
    user_id: str | None = None,
) -> str:
    """Return the assistant's reply text (fallback text when the model returns none)."""
    messages = build_chat_messages(SYSTEM_PROMPT, history or [], message)
    response = await client.create_chat_completion(
        model=settings.chat_model,
        messages=messages,
        temperature=settings.chat_temperature,
        max_tokens=settings.chat_max_tokens,
        context=ErrorContext(user_id=user_id),
    )
    choices = getattr(response, "choices", None) or []
    content = choices[0].message.content if choices else None
    if not content:
        logger.warning("Chat completion returned no content")
        return FALLBACK_REPLY
    return content
