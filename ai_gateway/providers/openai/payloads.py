"""Request body builders for OpenAI compatible chat completion endpoints."""

from typing import Any, Dict, List, Sequence

from ...models.conversation_types import Message
from ...models.generation import CompletionOptions


def serialize_messages(messages: Sequence[Message]) -> List[Dict[str, Any]]:
    serialized = []
    for message in messages:
        item: Dict[str, Any] = {"role": message.role, "content": message.content}
        if message.name:
            item["name"] = message.name
        if message.function_call is not None:
            item["function_call"] = message.function_call.model_dump()
        serialized.append(item)
    return serialized


def build_chat_payload(options: CompletionOptions, model: str, stream: bool) -> Dict[str, Any]:
    """
    Build a ``/v1/chat/completions`` body.

    Parameters left unset on ``options`` are omitted from the body.
    """
    payload = {
        "model": model,
        "messages": serialize_messages(options.messages),
        "temperature": options.temperature,
        "max_tokens": options.max_tokens,
        "top_p": options.top_p,
        "frequency_penalty": options.frequency_penalty,
        "presence_penalty": options.presence_penalty,
        "stop": options.stop,
        "stream": stream,
        "functions": options.functions,
        "function_call": options.function_call,
        "response_format": options.response_format,
        "user": options.user,
    }
    return {key: value for key, value in payload.items() if value is not None}
