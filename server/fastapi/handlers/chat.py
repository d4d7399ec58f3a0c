"""
Chat Handler

Sends a prompt, optionally with an image URL, to a vision-capable chat model
and returns the model's answer.
Requires environment variable: OPENAI_API_KEY
"""

import logging
from typing import Any

from pydantic import ValidationError

from envelope import normalize
from models import ChatAnswer, ChatCompletion, ChatRequest, ResponseEnvelope
from upstream import MalformedUpstreamResponse, UpstreamClient

logger = logging.getLogger(__name__)

CHAT_MODEL = "gpt-4-vision-preview"
MAX_TOKENS = 4096
TEMPERATURE = 0.7


def build_chat_request(request: ChatRequest) -> dict[str, Any]:
    """Build the chat-completion body for a prompt and optional image."""
    content: list[dict[str, Any]] = [{"type": "text", "text": request.prompt}]

    # Blank image values are treated as "no image"
    if request.image and request.image.strip():
        content.append({"type": "image_url", "image_url": {"url": request.image}})

    return {
        "model": CHAT_MODEL,
        "messages": [{"role": "user", "content": content}],
        "max_tokens": MAX_TOKENS,
        "temperature": TEMPERATURE,
    }


def extract_answer(result_json: Any) -> str | None:
    """Return the first choice's message content."""
    try:
        completion = ChatCompletion.model_validate(result_json)
    except ValidationError as e:
        raise MalformedUpstreamResponse(f"Invalid chat completion body: {e}") from e

    if not completion.choices:
        raise MalformedUpstreamResponse("Chat completion contained no choices")

    return completion.choices[0].message.content


class ChatHandler:
    def __init__(self, client: UpstreamClient):
        self.client = client

    async def handle(self, request: ChatRequest) -> ResponseEnvelope:
        logger.debug("client submitted '%s' as prompt", request.prompt)

        result = await self.client.post_chat_completion(build_chat_request(request))
        if not result.ok:
            logger.warning("Chat completion failed with %s", result.status_code)
            return normalize(False, None, result.status_code, result.text)

        answer = extract_answer(result.json())
        return normalize(True, ChatAnswer(answer=answer), 200, "")
