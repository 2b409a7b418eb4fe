"""
Gemini chat model setup and message conversion.
"""

import logging
from typing import Any, List

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage
from langchain_google_genai import ChatGoogleGenerativeAI

from travel_companion.models import ConversationSeed

logger = logging.getLogger(__name__)


def initialize_llm(api_key: str, model: str = "gemini-2.0-flash", temperature: float = 0.7):
    """
    Initialize the Gemini chat model.

    Args:
        api_key: Google API key
        model: Gemini model name
        temperature: Sampling temperature (0.0-1.0)

    Returns:
        ChatGoogleGenerativeAI instance
    """
    logger.info(f"🤖 Initializing Gemini chat model: {model}")
    return ChatGoogleGenerativeAI(
        model=model,
        google_api_key=api_key,
        temperature=temperature,
    )


def build_messages(seed: ConversationSeed, query: str) -> List[BaseMessage]:
    """Seed turns followed by the caller's query as the final user turn."""
    messages: List[BaseMessage] = []
    for turn in seed:
        if turn.role == "model":
            messages.append(AIMessage(content=turn.text))
        else:
            messages.append(HumanMessage(content=turn.text))
    messages.append(HumanMessage(content=query))
    return messages


def content_text(content: Any) -> str:
    """Flatten message content, which Gemini may return as a list of parts."""
    if isinstance(content, str):
        return content
    parts = []
    for part in content or []:
        if isinstance(part, str):
            parts.append(part)
        elif isinstance(part, dict) and part.get("type") == "text":
            parts.append(part.get("text", ""))
    return "".join(parts)
