"""Conversion of Anthropic Messages API requests into OpenAI chat requests."""

from __future__ import annotations

import json
from typing import Any, Optional, Union

from boomgw.anthropic_schema import (
    AnthropicDocumentBlock,
    AnthropicImageBlock,
    AnthropicMessagesRequest,
    AnthropicRedactedThinkingBlock,
    AnthropicTextBlock,
    AnthropicThinkingBlock,
    AnthropicToolResultBlock,
    AnthropicToolUseBlock,
)
from boomgw.chat import (
    ChatCompletionRequest,
    FunctionCall,
    ImageUrl,
    ImageUrlPart,
    Message,
    MessageRole,
    ReasoningPart,
    TextPart,
    Tool,
    ToolCall,
    ToolFunction,
)
from boomgw.normalize import convert_image_source

_IMAGE_PLACEHOLDER_LIMIT = 80


def _compact_json(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), sort_keys=True, ensure_ascii=False)


def _system_text(system: Any) -> str:
    if isinstance(system, str):
        return system
    return "\n".join(
        block.text for block in system if getattr(block, "block_type", "text") == "text"
    )


def _content_to_string(content: Any) -> str:
    if isinstance(content, str):
        return content
    pieces = []
    for block in content:
        if isinstance(block, AnthropicTextBlock):
            pieces.append(block.text)
        elif isinstance(block, AnthropicThinkingBlock):
            pieces.append(block.thinking)
    return "".join(pieces)


def _document_text(block: AnthropicDocumentBlock) -> str:
    """Title on its own line, followed by the source's inline text data, if any."""
    text = f"{block.title}\n" if block.title else ""
    source = block.source
    if isinstance(source, dict):
        data = source.get("data")
        if isinstance(data, str):
            text += data
    return text


def _tool_result_text(block: AnthropicToolResultBlock) -> str:
    content = block.content
    if content is None:
        text = ""
    elif isinstance(content, str):
        text = content
    else:
        pieces = []
        for inner in content:
            if isinstance(inner, AnthropicTextBlock):
                pieces.append(inner.text)
            elif isinstance(inner, AnthropicImageBlock):
                # Tool messages cannot carry images; keep a visible placeholder.
                url = convert_image_source(inner.source)
                pieces.append(f"[image: {url[:_IMAGE_PLACEHOLDER_LIMIT]}]")
        text = "".join(pieces)
    if block.is_error is True:
        text = f"[ERROR] {text}"
    return text


def convert_user_message(content: Union[str, list]) -> list[Message]:
    """Convert a user turn; each tool result becomes its own tool-role message."""
    if isinstance(content, str):
        return [Message(role=MessageRole.USER, content=content)]

    parts: list = []
    tool_results: list[tuple[str, str]] = []
    for block in content:
        if isinstance(block, AnthropicTextBlock):
            parts.append(TextPart(text=block.text))
        elif isinstance(block, AnthropicImageBlock):
            parts.append(ImageUrlPart(image_url=ImageUrl(url=convert_image_source(block.source))))
        elif isinstance(block, AnthropicToolResultBlock):
            tool_results.append((block.tool_use_id, _tool_result_text(block)))
        elif isinstance(block, AnthropicDocumentBlock):
            doc_text = _document_text(block)
            if doc_text:
                parts.append(TextPart(text=doc_text))

    messages: list[Message] = []
    if parts:
        messages.append(Message(role=MessageRole.USER, content=parts))
    messages.extend(
        Message(role=MessageRole.TOOL, content=text, tool_call_id=tool_use_id)
        for tool_use_id, text in tool_results
    )
    return messages


def convert_assistant_message(content: Union[str, list]) -> list[Message]:
    """Convert an assistant turn; tool_use blocks become tool calls.

    Thinking blocks switch the content to parts so that reasoning survives a
    round trip back to Anthropic.
    """
    if isinstance(content, str):
        return [Message(role=MessageRole.ASSISTANT, content=content)]

    text_parts: list[str] = []
    tool_calls: list[ToolCall] = []
    for block in content:
        if isinstance(block, AnthropicTextBlock):
            text_parts.append(block.text)
        elif isinstance(block, AnthropicToolUseBlock):
            tool_calls.append(
                ToolCall(
                    id=block.id,
                    call_type="function",
                    function=FunctionCall(name=block.name, arguments=_compact_json(block.input)),
                )
            )
        elif isinstance(block, AnthropicThinkingBlock):
            text_parts.append(block.thinking)
        elif isinstance(block, AnthropicRedactedThinkingBlock):
            continue
        elif isinstance(block, AnthropicDocumentBlock):
            doc_text = _document_text(block)
            if doc_text:
                text_parts.append(doc_text)

    calls: Optional[list[ToolCall]] = tool_calls or None

    if not any(isinstance(block, AnthropicThinkingBlock) for block in content):
        return [Message(role=MessageRole.ASSISTANT, content="".join(text_parts), tool_calls=calls)]

    parts: list = []
    for block in content:
        if isinstance(block, AnthropicThinkingBlock):
            parts.append(ReasoningPart(reasoning=block.thinking))
        elif isinstance(block, AnthropicTextBlock):
            if block.text:
                parts.append(TextPart(text=block.text))
        elif isinstance(block, AnthropicDocumentBlock):
            doc_text = _document_text(block)
            if doc_text:
                parts.append(TextPart(text=doc_text))
    if not parts:
        parts.append(TextPart(text=""))
    return [Message(role=MessageRole.ASSISTANT, content=parts, tool_calls=calls)]


def anthropic_request_to_openai(request: AnthropicMessagesRequest) -> ChatCompletionRequest:
    """Convert an Anthropic Messages request to an OpenAI chat completion request."""
    messages: list[Message] = []

    if request.system is not None:
        system_text = _system_text(request.system)
        if system_text:
            messages.append(Message(role=MessageRole.SYSTEM, content=system_text))

    for message in request.messages:
        if message.role == "user":
            messages.extend(convert_user_message(message.content))
        elif message.role == "assistant":
            messages.extend(convert_assistant_message(message.content))
        else:
            messages.append(
                Message(role=MessageRole.USER, content=_content_to_string(message.content))
            )

    tools = None
    if request.tools is not None:
        tools = [
            Tool(
                tool_type="function",
                function=ToolFunction(
                    name=tool.name,
                    description=tool.description,
                    parameters=tool.input_schema,
                ),
            )
            for tool in request.tools
        ]

    stop = None
    if request.stop_sequences is not None:
        sequences = list(request.stop_sequences)
        stop = sequences[0] if len(sequences) == 1 else sequences

    extra: dict[str, Any] = {}
    if request.thinking is not None:
        extra["thinking"] = request.thinking
    if request.metadata is not None:
        extra["metadata"] = request.metadata
    extra.update(request.extra or {})

    return ChatCompletionRequest(
        model=request.model,
        messages=messages,
        temperature=request.temperature,
        top_p=request.top_p,
        max_tokens=request.max_tokens,
        stream=request.stream,
        stop=stop,
        tools=tools,
        tool_choice=request.tool_choice,
        extra=extra,
    )