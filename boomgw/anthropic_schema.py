"""Anthropic Messages API data model and its JSON form."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Union


def _require(data: Any, key: str) -> Any:
    if not isinstance(data, dict):
        raise ValueError(f"expected a JSON object, got {type(data).__name__}")
    try:
        return data[key]
    except KeyError:
        raise ValueError(f"missing field {key!r}") from None


def _put(out: dict[str, Any], key: str, value: Any) -> None:
    if value is not None:
        out[key] = value


# ------------------------------------------------------------------
# Request content blocks
# ------------------------------------------------------------------


@dataclass
class AnthropicSystemBlock:
    text: str
    block_type: str = "text"
    cache_control: Any = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"type": self.block_type, "text": self.text}
        _put(out, "cache_control", self.cache_control)
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AnthropicSystemBlock:
        return cls(
            block_type=_require(data, "type"),
            text=_require(data, "text"),
            cache_control=data.get("cache_control"),
        )


@dataclass
class AnthropicTextBlock:
    text: str
    cache_control: Any = None


@dataclass
class AnthropicImageBlock:
    source: Any


@dataclass
class AnthropicToolUseBlock:
    id: str
    name: str
    input: Any
    cache_control: Any = None


@dataclass
class AnthropicToolResultBlock:
    tool_use_id: str
    content: Union[str, list, None] = None
    is_error: Optional[bool] = None


@dataclass
class AnthropicThinkingBlock:
    thinking: str


@dataclass
class AnthropicRedactedThinkingBlock:
    data: str


@dataclass
class AnthropicDocumentBlock:
    source: Any
    title: Optional[str] = None
    context: Optional[str] = None
    citations: Any = None


@dataclass
class AnthropicUnknownBlock:
    """A block whose type this gateway does not recognise."""


AnthropicContentBlock = Union[
    AnthropicTextBlock,
    AnthropicImageBlock,
    AnthropicToolUseBlock,
    AnthropicToolResultBlock,
    AnthropicThinkingBlock,
    AnthropicRedactedThinkingBlock,
    AnthropicDocumentBlock,
    AnthropicUnknownBlock,
]
# Message content: plain text or a list of content blocks.
AnthropicContent = Union[str, list]


def _content_from_json(value: Any) -> AnthropicContent:
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        return [content_block_from_dict(b) for b in value]
    raise ValueError(f"invalid Anthropic content: {value!r}")


def _content_to_json(content: AnthropicContent) -> Any:
    if isinstance(content, list):
        return [content_block_to_dict(b) for b in content]
    return content


def content_block_from_dict(data: dict[str, Any]) -> AnthropicContentBlock:
    """Build a content block from its tagged JSON object."""
    kind = _require(data, "type")
    if kind == "text":
        return AnthropicTextBlock(text=_require(data, "text"), cache_control=data.get("cache_control"))
    if kind == "image":
        return AnthropicImageBlock(source=_require(data, "source"))
    if kind == "tool_use":
        return AnthropicToolUseBlock(
            id=_require(data, "id"),
            name=_require(data, "name"),
            input=_require(data, "input"),
            cache_control=data.get("cache_control"),
        )
    if kind == "tool_result":
        content = data.get("content")
        return AnthropicToolResultBlock(
            tool_use_id=_require(data, "tool_use_id"),
            content=None if content is None else _content_from_json(content),
            is_error=data.get("is_error"),
        )
    if kind == "thinking":
        return AnthropicThinkingBlock(thinking=_require(data, "thinking"))
    if kind == "redacted_thinking":
        return AnthropicRedactedThinkingBlock(data=_require(data, "data"))
    if kind == "document":
        return AnthropicDocumentBlock(
            source=_require(data, "source"),
            title=data.get("title"),
            context=data.get("context"),
            citations=data.get("citations"),
        )
    return AnthropicUnknownBlock()


def content_block_to_dict(block: AnthropicContentBlock) -> dict[str, Any]:
    """Serialise a content block to its tagged JSON object."""
    out: dict[str, Any]
    if isinstance(block, AnthropicTextBlock):
        out = {"type": "text", "text": block.text}
        _put(out, "cache_control", block.cache_control)
    elif isinstance(block, AnthropicImageBlock):
        out = {"type": "image", "source": block.source}
    elif isinstance(block, AnthropicToolUseBlock):
        out = {"type": "tool_use", "id": block.id, "name": block.name, "input": block.input}
        _put(out, "cache_control", block.cache_control)
    elif isinstance(block, AnthropicToolResultBlock):
        out = {"type": "tool_result", "tool_use_id": block.tool_use_id}
        if block.content is not None:
            out["content"] = _content_to_json(block.content)
        _put(out, "is_error", block.is_error)
    elif isinstance(block, AnthropicThinkingBlock):
        out = {"type": "thinking", "thinking": block.thinking}
    elif isinstance(block, AnthropicRedactedThinkingBlock):
        out = {"type": "redacted_thinking", "data": block.data}
    elif isinstance(block, AnthropicDocumentBlock):
        out = {"type": "document", "source": block.source}
        _put(out, "title", block.title)
        _put(out, "context", block.context)
        _put(out, "citations", block.citations)
    elif isinstance(block, AnthropicUnknownBlock):
        out = {"type": "Unknown"}
    else:
        raise TypeError(f"not an Anthropic content block: {block!r}")
    return out


# ------------------------------------------------------------------
# Request
# ------------------------------------------------------------------


@dataclass
class AnthropicMessage:
    role: str
    content: AnthropicContent

    def to_dict(self) -> dict[str, Any]:
        return {"role": self.role, "content": _content_to_json(self.content)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AnthropicMessage:
        return cls(role=_require(data, "role"), content=_content_from_json(_require(data, "content")))


@dataclass
class AnthropicTool:
    name: str
    input_schema: Any
    description: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"name": self.name}
        _put(out, "description", self.description)
        out["input_schema"] = self.input_schema
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AnthropicTool:
        return cls(
            name=_require(data, "name"),
            input_schema=_require(data, "input_schema"),
            description=data.get("description"),
        )


_SCALAR_OPTIONAL = (
    "max_tokens",
    "temperature",
    "top_p",
    "stream",
    "stop_sequences",
    "tool_choice",
    "thinking",
    "metadata",
)
_REQUEST_FIELDS = ("model", "messages", "system", "tools", *_SCALAR_OPTIONAL)


def _system_from_json(value: Any) -> Union[str, list[AnthropicSystemBlock], None]:
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, list):
        return [AnthropicSystemBlock.from_dict(b) for b in value]
    raise ValueError(f"invalid system content: {value!r}")


@dataclass
class AnthropicMessagesRequest:
    model: str
    messages: list[AnthropicMessage]
    system: Union[str, list[AnthropicSystemBlock], None] = None
    max_tokens: Optional[int] = None
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    stream: Optional[bool] = None
    stop_sequences: Optional[list[str]] = None
    tools: Optional[list[AnthropicTool]] = None
    tool_choice: Any = None
    thinking: Any = None
    metadata: Any = None
    # Unknown request fields: accepted on input, never serialised.
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AnthropicMessagesRequest:
        model = _require(data, "model")
        messages = _require(data, "messages")
        if not isinstance(messages, list):
            raise ValueError("'messages' must be a list")
        tools = data.get("tools")
        return cls(
            model=model,
            messages=[AnthropicMessage.from_dict(m) for m in messages],
            system=_system_from_json(data.get("system")),
            tools=None if tools is None else [AnthropicTool.from_dict(t) for t in tools],
            extra={k: v for k, v in data.items() if k not in _REQUEST_FIELDS},
            **{name: data.get(name) for name in _SCALAR_OPTIONAL},
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "model": self.model,
            "messages": [m.to_dict() for m in self.messages],
        }
        if isinstance(self.system, list):
            out["system"] = [b.to_dict() for b in self.system]
        else:
            _put(out, "system", self.system)
        for name in ("max_tokens", "temperature", "top_p", "stream", "stop_sequences"):
            _put(out, name, getattr(self, name))
        if self.tools is not None:
            out["tools"] = [t.to_dict() for t in self.tools]
        for name in ("tool_choice", "thinking", "metadata"):
            _put(out, name, getattr(self, name))
        return out


# ------------------------------------------------------------------
# Response
# ------------------------------------------------------------------


@dataclass
class AnthropicUsage:
    input_tokens: int
    output_tokens: int
    cache_creation_input_tokens: Optional[int] = None
    cache_read_input_tokens: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "input_tokens": self.input_tokens,
            "output_tokens": self.output_tokens,
        }
        _put(out, "cache_creation_input_tokens", self.cache_creation_input_tokens)
        _put(out, "cache_read_input_tokens", self.cache_read_input_tokens)
        return out


@dataclass
class AnthropicResponseText:
    text: str

    def to_dict(self) -> dict[str, Any]:
        return {"type": "text", "text": self.text}


@dataclass
class AnthropicResponseToolUse:
    id: str
    name: str
    input: Any

    def to_dict(self) -> dict[str, Any]:
        return {"type": "tool_use", "id": self.id, "name": self.name, "input": self.input}


@dataclass
class AnthropicResponseThinking:
    thinking: str

    def to_dict(self) -> dict[str, Any]:
        return {"type": "thinking", "thinking": self.thinking}


@dataclass
class AnthropicResponseRedactedThinking:
    data: str

    def to_dict(self) -> dict[str, Any]:
        return {"type": "redacted_thinking", "data": self.data}


AnthropicResponseContentBlock = Union[
    AnthropicResponseText,
    AnthropicResponseToolUse,
    AnthropicResponseThinking,
    AnthropicResponseRedactedThinking,
]


@dataclass
class AnthropicMessagesResponse:
    id: str
    content: list[AnthropicResponseContentBlock]
    model: str
    usage: AnthropicUsage
    response_type: str = "message"
    role: str = "assistant"
    stop_reason: Optional[str] = None
    stop_sequence: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "type": self.response_type,
            "role": self.role,
            "content": [b.to_dict() for b in self.content],
            "model": self.model,
        }
        _put(out, "stop_reason", self.stop_reason)
        _put(out, "stop_sequence", self.stop_sequence)
        out["usage"] = self.usage.to_dict()
        return out