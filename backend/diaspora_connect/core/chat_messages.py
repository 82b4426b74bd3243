"""Chat Messages: conversation assembly for the site assistant.

Invariants:
    - The system prompt is always the first message
    - Only 'user' and 'assistant' history entries are forwarded, in order
    - The current message is trimmed and appended last
"""

from typing import Any

from diaspora_connect.core.errors import InvalidRequestError

SYSTEM_PROMPT = """You are a helpful assistant for We The People (WTP), Zimbabwe's Diaspora Intelligence Platform.
Your role is to:
- Answer questions about WTP's mission, services, and how the platform works
- Help diaspora Zimbabweans understand investment, banking, remittance, legal, citizenship, and civic participation topics
- Guide users to the right resources, verified service providers, and expert content on the platform
- Be respectful, informative, and supportive

Key information about WTP:
- WTP connects Zimbabwe and its global diaspora through trusted information, verified services, and structured economic and civic participation
- The platform covers investment, property ownership, banking, remittances, pensions, legal and citizenship matters, business opportunities, return planning, and voting
- Knowledge is powered by expert podcast interviews with bankers, lawyers, policymakers, investors, and industry leaders
- WTP's mission is to transform diaspora contribution from informal and fragmented into structured, trusted, and scalable national development

Keep responses concise, helpful, and aligned with WTP's values. If asked about something outside your knowledge, politely redirect to the contact form."""

FALLBACK_REPLY = "Sorry, I could not generate a response."

_FORWARDED_ROLES = ("user", "assistant")


def build_chat_messages(
    system_prompt: str,
    history: list[Any] | None,
    message: str,
) -> list[dict[str, str]]:
    """Build the chat completion message list."""
    text = (message or "").strip()
    if not text:
        raise InvalidRequestError("Message is required", field="message")

    messages = [{"role": "system", "content": system_prompt}]
    for entry in history or []:
        if not isinstance(entry, dict):
            continue
        role = entry.get("role")
        content = entry.get("content")
        if role in _FORWARDED_ROLES and isinstance(content, str):
            messages.append({"role": role, "content": content})
    messages.append({"role": "user", "content": text})
    return messages
