"""Chat: site assistant backed by OpenAI chat completions."""

from fastapi import APIRouter, Depends

from diaspora_connect.api.dependencies import get_chat_client
from diaspora_connect.config import Settings, get_settings
from diaspora_connect.infrastructure.openai_client import ResilientOpenAIClient
from diaspora_connect.schemas.messaging import ChatRequest, ChatResponse
from diaspora_connect.services.chat_service import process_chat

router = APIRouter(prefix="/api/chat", tags=["chat"])


@router.post("", response_model=ChatResponse)
async def chat(
    body: ChatRequest,
    client: ResilientOpenAIClient = Depends(get_chat_client),
    settings: Settings = Depends(get_settings),
):
    reply = await process_chat(client, settings, body.message, body.conversation_history)
    return {"success": True, "response": reply}
