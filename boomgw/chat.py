"""OpenAI-compatible chat completion data model and its JSON form."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union


def _require(data: Any, key: str) -> Any:
    if not isinstance(data, dict):
        raise ValueError(f"expected a JSON object, got {type(data).__name__}")
    try:
        return data[key]
    except KeyError:
        raise ValueError(f"missing field {key!r}") from None


def _put(out: dict[str, Any], key: str, value: Any) -> None:
    """Set ``key`` only when ``value`` is present."""
    if value is not None:
        out[key] = value


class MessageRole(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


# ------------------------------------------------------------------
# Content parts
# ------------------------------------------------------------------


@dataclass
class TextPart:
    text: str

    def to_dict(self) -> dict[str, Any]:
        return {"type": "text", "text": self.text}


@dataclass
class ImageUrl:
    url: str
    detail: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"url": self.url}
        _put(out, "detail", self.detail)
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ImageUrl:
        return cls(url=_require(data, "url"), detail=data.get("detail"))


@dataclass
class ImageUrlPart:
    image_url: ImageUrl

    def to_dict(self) -> dict[str, Any]:
        return {"type": "image_url", "image_url": self.image_url.to_dict()}


@dataclass
class ReasoningPart:
    """Thinking content carried through the OpenAI-format pipeline."""

    reasoning: str

    def to_dict(self) -> dict[str, Any]:
        return {"type": "reasoning", "reasoning": self.reasoning}


ContentPart = Union[TextPart, ImageUrlPart, ReasoningPart]
# A message body: plain text, a list of parts, or None for an explicit null.
MessageContent = Union[str, list, None]


def content_part_from_dict(data: dict[str, Any]) -> ContentPart:
    """Build a content part from its tagged JSON object."""
    kind = _require(data, "type")
    if kind == "text":
        return TextPart(text=_require(data, "text"))
    if kind == "image_url":
        return ImageUrlPart(image_url=ImageUrl.from_dict(_require(data, "image_url")))
    if kind == "reasoning":
        return ReasoningPart(reasoning=_require(data, "reasoning"))
    raise ValueError(f"unknown content part type {kind!r}")


def _content_to_json(content: MessageContent) -> Any:
    if isinstance(content, list):
        return [part.to_dict() for part in content]
    return content


def _content_from_json(value: Any) -> MessageContent:
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, list):
        return [content_part_from_dict(item) for item in value]
    raise ValueError(f"invalid message content: {value!r}")


# ------------------------------------------------------------------
# Messages and tools
# ------------------------------------------------------------------


@dataclass
class FunctionCall:
    name: str
    arguments: str

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "arguments": self.arguments}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FunctionCall:
        return cls(name=_require(data, "name"), arguments=_require(data, "arguments"))


@dataclass
class ToolCall:
    id: str
    function: FunctionCall
    call_type: str = "function"

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "type": self.call_type, "function": self.function.to_dict()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ToolCall:
        return cls(
            id=_require(data, "id"),
            call_type=_require(data, "type"),
            function=FunctionCall.from_dict(_require(data, "function")),
        )


@dataclass
class Message:
    role: MessageRole
    content: MessageContent = ""
    name: Optional[str] = None
    tool_calls: Optional[list[ToolCall]] = None
    tool_call_id: Optional[str] = None
    reasoning_content: Optional[str] = None

    def normalize_reasoning_for_openai(self) -> None:
        """Move reasoning parts out of the content into ``reasoning_content``."""
        if not isinstance(self.content, list):
            return
        reasoning = "".join(p.reasoning for p in self.content if isinstance(p, ReasoningPart))
        other = [p for p in self.content if not isinstance(p, ReasoningPart)]
        if reasoning:
            self.reasoning_content = reasoning
        if not other:
            self.content = ""
        elif len(other) == 1 and isinstance(other[0], TextPart):
            self.content = other[0].text
        else:
            self.content = other

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "role": self.role.value,
            "content": _content_to_json(self.content),
        }
        _put(out, "name", self.name)
        if self.tool_calls is not None:
            out["tool_calls"] = [tc.to_dict() for tc in self.tool_calls]
        _put(out, "tool_call_id", self.tool_call_id)
        _put(out, "reasoning_content", self.reasoning_content)
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Message:
        role = MessageRole(_require(data, "role"))
        tool_calls = data.get("tool_calls")
        return cls(
            role=role,
            content=_content_from_json(data.get("content", "")),
            name=data.get("name"),
            tool_calls=None if tool_calls is None else [ToolCall.from_dict(t) for t in tool_calls],
            tool_call_id=data.get("tool_call_id"),
            reasoning_content=data.get("reasoning_content"),
        )


@dataclass
class ToolFunction:
    name: str
    parameters: Any
    description: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"name": self.name}
        _put(out, "description", self.description)
        out["parameters"] = self.parameters
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ToolFunction:
        return cls(
            name=_require(data, "name"),
            parameters=_require(data, "parameters"),
            description=data.get("description"),
        )


@dataclass
class Tool:
    function: ToolFunction
    tool_type: str = "function"

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.tool_type, "function": self.function.to_dict()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Tool:
        return cls(
            tool_type=_require(data, "type"),
            function=ToolFunction.from_dict(_require(data, "function")),
        )


def _stop_from_json(value: Any) -> Union[str, list[str], None]:
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, list) and all(isinstance(s, str) for s in value):
        return list(value)
    raise ValueError(f"invalid stop sequence: {value!r}")


# ------------------------------------------------------------------
# Requests
# ------------------------------------------------------------------

_CHAT_OPTIONAL = (
    "temperature",
    "top_p",
    "max_tokens",
    "max_completion_tokens",
    "stream",
    "stop",
    "n",
    "tools",
    "tool_choice",
    "response_format",
    "frequency_penalty",
    "presence_penalty",
    "seed",
    "user",
    "logprobs",
    "top_logprobs",
    "logit_bias",
)


@dataclass
class ChatCompletionRequest:
    model: str
    messages: list[Message]
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    max_tokens: Optional[int] = None
    max_completion_tokens: Optional[int] = None
    stream: Optional[bool] = None
    stop: Union[str, list[str], None] = None
    n: Optional[int] = None
    tools: Optional[list[Tool]] = None
    tool_choice: Any = None
    response_format: Any = None
    frequency_penalty: Optional[float] = None
    presence_penalty: Optional[float] = None
    seed: Optional[int] = None
    user: Optional[str] = None
    logprobs: Optional[bool] = None
    top_logprobs: Optional[int] = None
    logit_bias: Any = None
    # Unknown request fields: accepted on input, never forwarded upstream.
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "model": self.model,
            "messages": [m.to_dict() for m in self.messages],
        }
        for name in _CHAT_OPTIONAL:
            value = getattr(self, name)
            if name == "tools" and value is not None:
                value = [t.to_dict() for t in value]
            _put(out, name, value)
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ChatCompletionRequest:
        model = _require(data, "model")
        messages = _require(data, "messages")
        if not isinstance(messages, list):
            raise ValueError("'messages' must be a list")
        known = {"model", "messages", *_CHAT_OPTIONAL}
        kwargs = {name: data.get(name) for name in _CHAT_OPTIONAL}
        kwargs["stop"] = _stop_from_json(kwargs["stop"])
        if kwargs["tools"] is not None:
            kwargs["tools"] = [Tool.from_dict(t) for t in kwargs["tools"]]
        return cls(
            model=model,
            messages=[Message.from_dict(m) for m in messages],
            extra={k: v for k, v in data.items() if k not in known},
            **kwargs,
        )


_COMPLETION_OPTIONAL = ("temperature", "top_p", "max_tokens", "stream", "stop", "n", "suffix")


@dataclass
class CompletionRequest:
    """Legacy ``/v1/completions`` request."""

    model: str
    prompt: Union[str, list[str]]
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    max_tokens: Optional[int] = None
    stream: Optional[bool] = None
    stop: Union[str, list[str], None] = None
    n: Optional[int] = None
    suffix: Optional[str] = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"model": self.model, "prompt": self.prompt}
        for name in _COMPLETION_OPTIONAL:
            _put(out, name, getattr(self, name))
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CompletionRequest:
        model = _require(data, "model")
        prompt = _require(data, "prompt")
        if not (isinstance(prompt, str) or (isinstance(prompt, list) and all(isinstance(p, str) for p in prompt))):
            raise ValueError(f"invalid prompt: {prompt!r}")
        known = {"model", "prompt", *_COMPLETION_OPTIONAL}
        kwargs = {name: data.get(name) for name in _COMPLETION_OPTIONAL}
        kwargs["stop"] = _stop_from_json(kwargs["stop"])
        return cls(
            model=model,
            prompt=prompt,
            extra={k: v for k, v in data.items() if k not in known},
            **kwargs,
        )

    def into_chat_request(self) -> ChatCompletionRequest:
        """Wrap the prompt in a single user message."""
        content = self.prompt if isinstance(self.prompt, str) else "\n".join(self.prompt)
        return ChatCompletionRequest(
            model=self.model,
            messages=[Message(role=MessageRole.USER, content=content)],
            temperature=self.temperature,
            top_p=self.top_p,
            max_tokens=self.max_tokens,
            stream=self.stream,
            stop=self.stop,
            n=self.n,
            extra=dict(self.extra),
        )


# ------------------------------------------------------------------
# Responses
# ------------------------------------------------------------------


@dataclass
class Usage:
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0
    cache_creation_input_tokens: Optional[int] = None
    cache_read_input_tokens: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "prompt_tokens": self.prompt_tokens,
            "completion_tokens": self.completion_tokens,
            "total_tokens": self.total_tokens,
        }
        _put(out, "cache_creation_input_tokens", self.cache_creation_input_tokens)
        _put(out, "cache_read_input_tokens", self.cache_read_input_tokens)
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Usage:
        return cls(
            prompt_tokens=_require(data, "prompt_tokens"),
            completion_tokens=_require(data, "completion_tokens"),
            total_tokens=_require(data, "total_tokens"),
            cache_creation_input_tokens=data.get("cache_creation_input_tokens"),
            cache_read_input_tokens=data.get("cache_read_input_tokens"),
        )


@dataclass
class Choice:
    index: int
    message: Message
    finish_reason: Optional[str] = None
    logprobs: Any = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "index": self.index,
            "message": self.message.to_dict(),
            "finish_reason": self.finish_reason,
        }
        _put(out, "logprobs", self.logprobs)
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Choice:
        return cls(
            index=_require(data, "index"),
            message=Message.from_dict(_require(data, "message")),
            finish_reason=data.get("finish_reason"),
            logprobs=data.get("logprobs"),
        )


@dataclass
class ChatCompletionResponse:
    id: str
    object: str
    created: int
    model: str
    choices: list[Choice]
    usage: Usage
    system_fingerprint: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "object": self.object,
            "created": self.created,
            "model": self.model,
            "choices": [c.to_dict() for c in self.choices],
            "usage": self.usage.to_dict(),
        }
        _put(out, "system_fingerprint", self.system_fingerprint)
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ChatCompletionResponse:
        return cls(
            id=_require(data, "id"),
            object=_require(data, "object"),
            created=_require(data, "created"),
            model=_require(data, "model"),
            choices=[Choice.from_dict(c) for c in _require(data, "choices")],
            usage=Usage.from_dict(_require(data, "usage")),
            system_fingerprint=data.get("system_fingerprint"),
        )


# ------------------------------------------------------------------
# Streaming chunks
# ------------------------------------------------------------------


@dataclass
class StreamUsage:
    """Usage stats carried by the last chunk of a stream."""

    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None
    total_tokens: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "prompt_tokens": self.prompt_tokens,
            "completion_tokens": self.completion_tokens,
        }
        _put(out, "total_tokens", self.total_tokens)
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StreamUsage:
        if not isinstance(data, dict):
            raise ValueError("usage must be a JSON object")
        return cls(
            prompt_tokens=data.get("prompt_tokens"),
            completion_tokens=data.get("completion_tokens"),
            total_tokens=data.get("total_tokens"),
        )


@dataclass
class FunctionCallDelta:
    name: Optional[str] = None
    arguments: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        _put(out, "name", self.name)
        _put(out, "arguments", self.arguments)
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FunctionCallDelta:
        return cls(name=data.get("name"), arguments=data.get("arguments"))


@dataclass
class ToolCallDelta:
    index: int
    id: Optional[str] = None
    call_type: Optional[str] = None
    function: Optional[FunctionCallDelta] = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"index": self.index}
        _put(out, "id", self.id)
        _put(out, "type", self.call_type)
        if self.function is not None:
            out["function"] = self.function.to_dict()
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ToolCallDelta:
        function = data.get("function") if isinstance(data, dict) else None
        return cls(
            index=_require(data, "index"),
            id=data.get("id"),
            call_type=data.get("type"),
            function=None if function is None else FunctionCallDelta.from_dict(function),
        )


@dataclass
class StreamDelta:
    role: Optional[MessageRole] = None
    content: Optional[str] = None
    tool_calls: Optional[list[ToolCallDelta]] = None
    reasoning_content: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.role is not None:
            out["role"] = self.role.value
        _put(out, "content", self.content)
        if self.tool_calls is not None:
            out["tool_calls"] = [tc.to_dict() for tc in self.tool_calls]
        _put(out, "reasoning_content", self.reasoning_content)
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StreamDelta:
        if not isinstance(data, dict):
            raise ValueError("delta must be a JSON object")
        role = data.get("role")
        tool_calls = data.get("tool_calls")
        return cls(
            role=None if role is None else MessageRole(role),
            content=data.get("content"),
            tool_calls=None if tool_calls is None else [ToolCallDelta.from_dict(t) for t in tool_calls],
            reasoning_content=data.get("reasoning_content"),
        )


@dataclass
class StreamChoice:
    index: int
    delta: StreamDelta
    finish_reason: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "delta": self.delta.to_dict(),
            "finish_reason": self.finish_reason,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StreamChoice:
        return cls(
            index=_require(data, "index"),
            delta=StreamDelta.from_dict(_require(data, "delta")),
            finish_reason=data.get("finish_reason"),
        )


@dataclass
class ChatStreamChunk:
    id: str
    object: str
    created: int
    model: str
    choices: list[StreamChoice]
    usage: Optional[StreamUsage] = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "object": self.object,
            "created": self.created,
            "model": self.model,
            "choices": [c.to_dict() for c in self.choices],
        }
        if self.usage is not None:
            out["usage"] = self.usage.to_dict()
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ChatStreamChunk:
        usage = data.get("usage") if isinstance(data, dict) else None
        return cls(
            id=_require(data, "id"),
            object=_require(data, "object"),
            created=_require(data, "created"),
            model=_require(data, "model"),
            choices=[StreamChoice.from_dict(c) for c in _require(data, "choices")],
            usage=None if usage is None else StreamUsage.from_dict(usage),
        )