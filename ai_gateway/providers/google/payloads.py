"""Request body builders for the Gemini generateContent API."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Union

from ...models.conversation_types import ContentPart, Message, MultimodalMessage, TurnRole
from ...models.generation import CompletionOptions

BEGIN_PROMPT = "Begin conversation."

SAFETY_CATEGORIES = (
    "HARM_CATEGORY_HATE_SPEECH",
    "HARM_CATEGORY_DANGEROUS_CONTENT",
    "HARM_CATEGORY_SEXUALLY_EXPLICIT",
    "HARM_CATEGORY_HARASSMENT",
)

SAFETY_SETTINGS = [{"category": category, "threshold": "BLOCK_NONE"} for category in SAFETY_CATEGORIES]

JSON_RESPONSE_TYPES = ("json_object", "json_schema")

AnyMessage = Union[Message, MultimodalMessage]


def gemini_role(role: str) -> str:
    return "model" if role == TurnRole.ASSISTANT.value else "user"


def to_parts(content: Union[str, Sequence[ContentPart]]) -> List[Dict[str, Any]]:
    if isinstance(content, str):
        return [{"text": content}]

    parts = []
    for part in content:
        if part.type == "image" and part.inline_data is not None:
            parts.append({
                "inlineData": {
                    "mimeType": part.inline_data.mime_type,
                    "data": part.inline_data.data,
                }
            })
        elif part.text is not None:
            parts.append({"text": part.text})
    return parts


def system_instruction(messages: Sequence[AnyMessage]) -> Optional[Dict[str, Any]]:
    """Join the text of every system message with a blank line."""
    texts = []
    for message in messages:
        if message.role != TurnRole.SYSTEM.value:
            continue
        texts.extend(part["text"] for part in to_parts(message.content) if "text" in part)
    if not texts:
        return None
    return {"parts": [{"text": "\n\n".join(texts)}]}


def _append_parts(target: List[Dict[str, Any]], parts: List[Dict[str, Any]]) -> None:
    for part in parts:
        if target and "text" in part and "text" in target[-1]:
            target[-1]["text"] = f"{target[-1]['text']}\n\n{part['text']}"
        else:
            target.append(dict(part))


def build_contents(messages: Sequence[AnyMessage]) -> List[Dict[str, Any]]:
    """
    Convert non-system messages to Gemini ``contents``.

    Gemini requires the conversation to open with a user turn and roles to
    alternate: a placeholder user turn is prepended when needed and
    consecutive turns of the same role are merged, joining adjacent text
    parts with a blank line.
    """
    conversation = [m for m in messages if m.role != TurnRole.SYSTEM.value]
    contents: List[Dict[str, Any]] = []

    if conversation and gemini_role(conversation[0].role) != "user":
        contents.append({"role": "user", "parts": [{"text": BEGIN_PROMPT}]})

    for message in conversation:
        role = gemini_role(message.role)
        parts = to_parts(message.content)
        if contents and contents[-1]["role"] == role:
            _append_parts(contents[-1]["parts"], parts)
        else:
            merged: List[Dict[str, Any]] = []
            _append_parts(merged, parts)
            contents.append({"role": role, "parts": merged})
    return contents


def generation_config(options: CompletionOptions) -> Dict[str, Any]:
    config = {
        "temperature": options.temperature,
        "topP": options.top_p,
        "maxOutputTokens": options.max_tokens,
        "stopSequences": options.stop,
        "candidateCount": 1,
    }
    response_format = options.response_format or {}
    if response_format.get("type") in JSON_RESPONSE_TYPES:
        config["responseMimeType"] = "application/json"
    return {key: value for key, value in config.items() if value is not None}


def build_generate_payload(options: CompletionOptions, messages: Optional[Sequence[AnyMessage]] = None) -> Dict[str, Any]:
    messages = options.messages if messages is None else messages
    payload: Dict[str, Any] = {
        "contents": build_contents(messages),
        "generationConfig": generation_config(options),
        "safetySettings": SAFETY_SETTINGS,
    }
    instruction = system_instruction(messages)
    if instruction is not None:
        payload["systemInstruction"] = instruction
    return payload
