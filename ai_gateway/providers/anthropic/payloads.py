from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Tuple

from ...config.constants import ANTHROPIC_DEFAULT_MAX_TOKENS
from ...models.conversation_types import Message, TurnRole
from ...models.generation import CompletionOptions

CONTINUATION_PROMPT = "Continue the conversation."


def split_system(messages: Sequence[Message]) -> Tuple[Optional[str], List[Message]]:
    """Separate system messages (joined by a blank line) from the conversation."""
    system_parts = [m.content for m in messages if m.role == TurnRole.SYSTEM.value]
    conversation = [m for m in messages if m.role != TurnRole.SYSTEM.value]
    system = "\n\n".join(system_parts) if system_parts else None
    return system, conversation


def prepare_messages(messages: Sequence[Message]) -> List[Dict[str, str]]:
    """
    Shape the conversation for the Messages API.

    The first message must come from the user, and roles must alternate, so a
    placeholder user turn is prepended when needed and consecutive messages
    of the same role are merged with a blank line.
    """
    prepared: List[Dict[str, str]] = []
    if messages and messages[0].role != TurnRole.USER.value:
        prepared.append({"role": TurnRole.USER.value, "content": CONTINUATION_PROMPT})

    for message in messages:
        if prepared and prepared[-1]["role"] == message.role:
            prepared[-1]["content"] = f"{prepared[-1]['content']}\n\n{message.content}"
        else:
            prepared.append({"role": message.role, "content": message.content})
    return prepared


def build_messages_payload(options: CompletionOptions, model: str, stream: bool) -> Dict[str, Any]:
    system, conversation = split_system(options.messages)
    payload: Dict[str, Any] = {
        "model": model,
        "messages": prepare_messages(conversation),
        "max_tokens": options.max_tokens or ANTHROPIC_DEFAULT_MAX_TOKENS,
    }
    if system is not None:
        payload["system"] = system
    if options.temperature is not None:
        payload["temperature"] = options.temperature
    if options.top_p is not None:
        payload["top_p"] = options.top_p
    if options.stop:
        payload["stop_sequences"] = options.stop
    if stream:
        payload["stream"] = True
    if options.user:
        payload["metadata"] = {"user_id": options.user}
    return payload
