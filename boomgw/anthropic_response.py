"""Conversion of OpenAI chat responses and stream chunks into Anthropic form."""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass
from typing import Any, Optional

from boomgw.anthropic_schema import (
    AnthropicMessagesResponse,
    AnthropicResponseText,
    AnthropicResponseThinking,
    AnthropicResponseToolUse,
    AnthropicUsage,
)
from boomgw.chat import ChatCompletionResponse, ChatStreamChunk, ReasoningPart, TextPart

_STOP_REASONS = {
    "stop": "end_turn",
    "tool_calls": "tool_use",
    "length": "max_tokens",
}

_MESSAGE_STOP_DATA = '{"type":"message_stop"}'


def _to_json(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), sort_keys=True, ensure_ascii=False)


def finish_reason_to_stop_reason(reason: Optional[str]) -> Optional[str]:
    """Map an OpenAI ``finish_reason`` to an Anthropic ``stop_reason``."""
    if reason is None:
        return None
    return _STOP_REASONS.get(reason, reason)


def generate_anthropic_message_id() -> str:
    """A random message id with the ``msg_`` prefix."""
    return f"msg_{uuid.uuid4().hex}"


def _parse_arguments(arguments: str) -> Any:
    try:
        return json.loads(arguments)
    except (ValueError, TypeError):
        return None


def openai_response_to_anthropic(response: ChatCompletionResponse) -> AnthropicMessagesResponse:
    """Convert an OpenAI chat completion response to an Anthropic Messages response."""
    blocks: list = []
    first = response.choices[0] if response.choices else None

    if first is not None:
        content = first.message.content
        if isinstance(content, str):
            if content:
                blocks.append(AnthropicResponseText(text=content))
        elif isinstance(content, list):
            for part in content:
                if isinstance(part, TextPart):
                    if part.text:
                        blocks.append(AnthropicResponseText(text=part.text))
                elif isinstance(part, ReasoningPart):
                    blocks.append(AnthropicResponseThinking(thinking=part.reasoning))

        for call in first.message.tool_calls or ():
            blocks.append(
                AnthropicResponseToolUse(
                    id=call.id,
                    name=call.function.name,
                    input=_parse_arguments(call.function.arguments),
                )
            )

    if not blocks:
        blocks.append(AnthropicResponseText(text=""))

    usage = response.usage
    return AnthropicMessagesResponse(
        id=generate_anthropic_message_id(),
        content=blocks,
        model=response.model,
        stop_reason=finish_reason_to_stop_reason(first.finish_reason) if first else None,
        usage=AnthropicUsage(
            input_tokens=usage.prompt_tokens,
            output_tokens=usage.completion_tokens,
            cache_creation_input_tokens=usage.cache_creation_input_tokens,
            cache_read_input_tokens=usage.cache_read_input_tokens,
        ),
    )


@dataclass
class AnthropicSseEvent:
    """One server-sent event: its name and JSON data."""

    event: str
    data: str


def _is_complete_json_object(text: str) -> bool:
    if not (text.startswith("{") and text.endswith("}")):
        return False
    try:
        json.loads(text)
    except ValueError:
        return False
    return True


class AnthropicStreamTranscoder:
    """Turns OpenAI stream chunks into Anthropic SSE events, keeping block state."""

    def __init__(self, model: str) -> None:
        self.response_id = generate_anthropic_message_id()
        self.model = model
        self._message_started = False
        self._block_index = 0
        self._text_open = False
        self._thinking_open = False
        # OpenAI tool_call index -> Anthropic content block index.
        self._tool_blocks: dict[int, int] = {}
        # Argument fragments buffered per OpenAI tool_call index.
        self._tool_args: dict[int, str] = {}
        self.input_tokens = 0
        self.output_tokens = 0
        self.cache_creation_input_tokens: Optional[int] = None
        self.cache_read_input_tokens: Optional[int] = None
        # Held until the next chunk so the final usage can be reported.
        self._pending_stop_reason: Optional[str] = None

    @staticmethod
    def _event(name: str, payload: dict[str, Any]) -> AnthropicSseEvent:
        return AnthropicSseEvent(event=name, data=_to_json(payload))

    def _stop_block(self) -> AnthropicSseEvent:
        index = self._block_index
        self._block_index += 1
        return self._event("content_block_stop", {"type": "content_block_stop", "index": index})

    def _close_open_block(self, events: list[AnthropicSseEvent]) -> None:
        if self._thinking_open:
            self._thinking_open = False
            events.append(self._stop_block())
        elif self._text_open:
            self._text_open = False
            events.append(self._stop_block())

    def _finish_events(self, stop_reason: str) -> list[AnthropicSseEvent]:
        return [
            self._event(
                "message_delta",
                {
                    "type": "message_delta",
                    "delta": {"stop_reason": stop_reason, "stop_sequence": None},
                    "usage": {
                        "input_tokens": self.input_tokens,
                        "output_tokens": max(self.output_tokens, 1),
                    },
                },
            ),
            AnthropicSseEvent(event="message_stop", data=_MESSAGE_STOP_DATA),
        ]

    def _message_start(self) -> AnthropicSseEvent:
        return self._event(
            "message_start",
            {
                "type": "message_start",
                "message": {
                    "id": self.response_id,
                    "type": "message",
                    "role": "assistant",
                    "content": [],
                    "model": self.model,
                    "stop_reason": None,
                    "stop_sequence": None,
                    "usage": {
                        "input_tokens": self.input_tokens,
                        "output_tokens": self.output_tokens,
                        "cache_creation_input_tokens": self.cache_creation_input_tokens,
                        "cache_read_input_tokens": self.cache_read_input_tokens,
                    },
                },
            },
        )

    def _buffer_arguments(self, index: int, args: str) -> None:
        existing = self._tool_args.get(index, "")
        # Some upstreams resend the complete arguments in the finish chunk
        # after partial fragments; the complete version replaces the buffer.
        if existing and _is_complete_json_object(args):
            self._tool_args[index] = args
        else:
            self._tool_args[index] = existing + args

    def transcode(self, chunk: ChatStreamChunk) -> list[AnthropicSseEvent]:
        """Convert one OpenAI stream chunk into zero or more Anthropic events."""
        events: list[AnthropicSseEvent] = []

        if chunk.usage is not None:
            if chunk.usage.prompt_tokens is not None:
                self.input_tokens = chunk.usage.prompt_tokens
            if chunk.usage.completion_tokens is not None:
                self.output_tokens = chunk.usage.completion_tokens

        if self._pending_stop_reason is not None:
            stop_reason, self._pending_stop_reason = self._pending_stop_reason, None
            return self._finish_events(stop_reason)

        for choice in chunk.choices:
            if not self._message_started:
                self._message_started = True
                events.append(self._message_start())

            delta = choice.delta

            if delta.reasoning_content:
                if self._text_open:
                    self._text_open = False
                    events.append(self._stop_block())
                if not self._thinking_open:
                    self._thinking_open = True
                    events.append(
                        self._event(
                            "content_block_start",
                            {
                                "type": "content_block_start",
                                "index": self._block_index,
                                "content_block": {"type": "thinking", "thinking": ""},
                            },
                        )
                    )
                events.append(
                    self._event(
                        "content_block_delta",
                        {
                            "type": "content_block_delta",
                            "index": self._block_index,
                            "delta": {"type": "thinking_delta", "thinking": delta.reasoning_content},
                        },
                    )
                )

            if delta.content:
                if self._thinking_open:
                    self._thinking_open = False
                    events.append(self._stop_block())
                if not self._text_open:
                    self._text_open = True
                    events.append(
                        self._event(
                            "content_block_start",
                            {
                                "type": "content_block_start",
                                "index": self._block_index,
                                "content_block": {"type": "text", "text": ""},
                            },
                        )
                    )
                self.output_tokens += 1
                events.append(
                    self._event(
                        "content_block_delta",
                        {
                            "type": "content_block_delta",
                            "index": self._block_index,
                            "delta": {"type": "text_delta", "text": delta.content},
                        },
                    )
                )

            if delta.tool_calls is not None:
                self._close_open_block(events)
                for call in delta.tool_calls:
                    if call.id is not None:
                        name = (call.function.name if call.function else None) or ""
                        block_index = self._block_index
                        self._tool_blocks[call.index] = block_index
                        self._block_index += 1
                        events.append(
                            self._event(
                                "content_block_start",
                                {
                                    "type": "content_block_start",
                                    "index": block_index,
                                    "content_block": {
                                        "type": "tool_use",
                                        "id": call.id,
                                        "name": name,
                                        "input": {},
                                    },
                                },
                            )
                        )
                    if call.function is not None and call.function.arguments:
                        self._buffer_arguments(call.index, call.function.arguments)

            if choice.finish_reason is not None:
                self._close_open_block(events)
                for tool_index in sorted(self._tool_blocks):
                    block_index = self._tool_blocks[tool_index]
                    buffered = self._tool_args.pop(tool_index, "")
                    if buffered:
                        events.append(
                            self._event(
                                "content_block_delta",
                                {
                                    "type": "content_block_delta",
                                    "index": block_index,
                                    "delta": {"type": "input_json_delta", "partial_json": buffered},
                                },
                            )
                        )
                    events.append(
                        self._event(
                            "content_block_stop",
                            {"type": "content_block_stop", "index": block_index},
                        )
                    )
                self._tool_blocks.clear()
                self._pending_stop_reason = finish_reason_to_stop_reason(choice.finish_reason)

        return events

    def drain(self) -> list[AnthropicSseEvent]:
        """Emit held finish events once the stream has ended."""
        if self._pending_stop_reason is None:
            return []
        stop_reason, self._pending_stop_reason = self._pending_stop_reason, None
        return self._finish_events(stop_reason)