"""Message and request normalisation applied before talking to Anthropic."""

from __future__ import annotations

import json
from itertools import pairwise
from typing import Any, Optional

from boomgw.chat import Message, MessageRole

# Adjacent role pairs that break Anthropic's strict user/assistant alternation.
_NEEDS_SEPARATOR = frozenset(
    {
        (MessageRole.USER, MessageRole.USER),
        (MessageRole.ASSISTANT, MessageRole.ASSISTANT),
        (MessageRole.USER, MessageRole.TOOL),
        (MessageRole.ASSISTANT, MessageRole.USER),
        (MessageRole.TOOL, MessageRole.TOOL),
        (MessageRole.TOOL, MessageRole.USER),
    }
)


def ensure_role_alternation(messages: list[Message]) -> None:
    """Insert empty user messages between adjacent messages whose roles clash.

    The list is modified in place. System messages stay where they are; the
    caller extracts them before building an Anthropic request.
    """
    if not messages:
        return
    result = [messages[0]]
    for previous, current in pairwise(messages):
        if (previous.role, current.role) in _NEEDS_SEPARATOR:
            result.append(Message(role=MessageRole.USER, content=""))
        result.append(current)
    messages[:] = result


def _str_field(value: Any, key: str) -> Optional[str]:
    if not isinstance(value, dict):
        return None
    found = value.get(key)
    return found if isinstance(found, str) else None


def convert_tool_choice_for_anthropic(
    tool_choice: Any, parallel_tool_calls: Optional[bool] = None
) -> tuple[Any, bool]:
    """Translate an OpenAI ``tool_choice`` into Anthropic's form.

    Returns ``(anthropic_tool_choice, strip_tools)``; when ``strip_tools`` is
    true the caller should leave ``tools`` and ``tool_choice`` out entirely.
    """
    disable_parallel = parallel_tool_calls is False

    if tool_choice is None:
        if disable_parallel:
            return {"type": "auto", "disable_parallel_tool_use": True}, False
        return None, False

    kind = _str_field(tool_choice, "type")
    if kind is None:
        kind = "auto"

    if kind == "none":
        return None, True

    if kind == "auto":
        value: dict[str, Any] = {"type": "auto"}
    elif kind == "required":
        value = {"type": "any"}
    elif kind == "function":
        function = tool_choice.get("function") if isinstance(tool_choice, dict) else None
        value = {"type": "tool", "name": _str_field(function, "name") or ""}
    else:
        # Unknown types, such as a choice already in Anthropic form, pass through.
        return tool_choice, False

    if disable_parallel:
        value["disable_parallel_tool_use"] = True
    return value, False


def convert_image_source(source: Any) -> str:
    """Turn an Anthropic image ``source`` into a URL for OpenAI's ``image_url``.

    URL sources give their URL, base64 sources a data URI, anything else its
    compact JSON text.
    """
    kind = _str_field(source, "type") or ""
    if kind == "url":
        return _str_field(source, "url") or ""
    if kind == "base64":
        media_type = _str_field(source, "media_type") or "image/png"
        data = _str_field(source, "data") or ""
        return f"data:{media_type};base64,{data}"
    return json.dumps(source, separators=(",", ":"), sort_keys=True, ensure_ascii=False)