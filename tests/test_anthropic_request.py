import json

from boomgw.anthropic_request import (
    anthropic_request_to_openai,
    convert_assistant_message,
    convert_user_message,
)
from boomgw.anthropic_schema import AnthropicMessagesRequest, content_block_from_dict
from boomgw.chat import ImageUrlPart, MessageRole, ReasoningPart, TextPart


def blocks(*dicts):
    return [content_block_from_dict(d) for d in dicts]


def make_request(**fields):
    data = {"model": "claude-test", "messages": [{"role": "user", "content": "hi"}]}
    data.update(fields)
    return AnthropicMessagesRequest.from_dict(data)


def test_convert_user_message_image_url():
    content = blocks({"type": "image", "source": {"type": "url", "url": "https://example.com/img.png"}})
    messages = convert_user_message(content)
    assert len(messages) == 1
    parts = messages[0].content
    assert isinstance(parts, list) and len(parts) == 1
    assert isinstance(parts[0], ImageUrlPart)
    assert parts[0].image_url.url == "https://example.com/img.png"


def test_convert_user_message_image_base64():
    content = blocks(
        {
            "type": "image",
            "source": {"type": "base64", "media_type": "image/jpeg", "data": "SGVsbG8="},
        }
    )
    messages = convert_user_message(content)
    part = messages[0].content[0]
    assert isinstance(part, ImageUrlPart)
    assert part.image_url.url.startswith("data:image/jpeg;base64,")


def test_convert_user_message_tool_result_error():
    content = blocks(
        {
            "type": "tool_result",
            "tool_use_id": "tool_123",
            "content": "something failed",
            "is_error": True,
        }
    )
    messages = convert_user_message(content)
    assert len(messages) == 1
    assert messages[0].role == MessageRole.TOOL
    assert messages[0].content == "[ERROR] something failed"
    assert messages[0].tool_call_id == "tool_123"


def test_convert_user_message_text_and_tool_results_order():
    content = blocks(
        {"type": "tool_result", "tool_use_id": "a", "content": [{"type": "text", "text": "one"}]},
        {"type": "text", "text": "question"},
        {"type": "tool_result", "tool_use_id": "b"},
    )
    messages = convert_user_message(content)
    assert [m.role for m in messages] == [MessageRole.USER, MessageRole.TOOL, MessageRole.TOOL]
    assert messages[0].content == [TextPart(text="question")]
    assert (messages[1].tool_call_id, messages[1].content) == ("a", "one")
    assert (messages[2].tool_call_id, messages[2].content) == ("b", "")


def test_tool_result_image_becomes_placeholder():
    content = blocks(
        {
            "type": "tool_result",
            "tool_use_id": "t",
            "content": [{"type": "image", "source": {"type": "url", "url": "https://example.com/x.png"}}],
        }
    )
    messages = convert_user_message(content)
    assert messages[0].content == "[image: https://example.com/x.png]"


def test_user_document_block():
    content = blocks({"type": "document", "source": {"type": "text", "data": "body"}, "title": "Doc"})
    messages = convert_user_message(content)
    assert messages[0].content == [TextPart(text="Doc\nbody")]


def test_user_plain_text():
    messages = convert_user_message("hello")
    assert len(messages) == 1
    assert messages[0].role == MessageRole.USER
    assert messages[0].content == "hello"


def test_convert_assistant_thinking():
    content = blocks(
        {"type": "thinking", "thinking": "Let me think..."},
        {"type": "text", "text": "Here is the answer."},
    )
    messages = convert_assistant_message(content)
    assert len(messages) == 1
    parts = messages[0].content
    assert isinstance(parts, list)
    assert any(isinstance(p, ReasoningPart) for p in parts)
    assert any(isinstance(p, TextPart) for p in parts)
    assert parts == [ReasoningPart(reasoning="Let me think..."), TextPart(text="Here is the answer.")]


def test_convert_assistant_tool_use():
    content = blocks(
        {"type": "text", "text": "calling"},
        {"type": "tool_use", "id": "call_1", "name": "get_weather", "input": {"city": "Paris"}},
    )
    messages = convert_assistant_message(content)
    assert len(messages) == 1
    message = messages[0]
    assert message.content == "calling"
    assert len(message.tool_calls) == 1
    call = message.tool_calls[0]
    assert call.id == "call_1"
    assert call.call_type == "function"
    assert call.function.name == "get_weather"
    assert json.loads(call.function.arguments) == {"city": "Paris"}


def test_convert_assistant_without_tools_has_no_tool_calls():
    messages = convert_assistant_message(blocks({"type": "text", "text": "a"}, {"type": "text", "text": "b"}))
    assert messages[0].content == "ab"
    assert messages[0].tool_calls is None


def test_request_system_and_messages():
    request = make_request(
        system="be nice",
        messages=[
            {"role": "user", "content": "hi"},
            {"role": "assistant", "content": "hello"},
        ],
        max_tokens=100,
        temperature=0.5,
    )
    converted = anthropic_request_to_openai(request)
    assert converted.model == "claude-test"
    assert [m.role for m in converted.messages] == [
        MessageRole.SYSTEM,
        MessageRole.USER,
        MessageRole.ASSISTANT,
    ]
    assert converted.messages[0].content == "be nice"
    assert converted.max_tokens == 100
    assert converted.temperature == 0.5


def test_request_system_blocks_joined():
    request = make_request(system=[{"type": "text", "text": "a"}, {"type": "text", "text": "b"}])
    converted = anthropic_request_to_openai(request)
    assert converted.messages[0].role == MessageRole.SYSTEM
    assert converted.messages[0].content == "a\nb"


def test_request_empty_system_is_dropped():
    converted = anthropic_request_to_openai(make_request(system=""))
    assert [m.role for m in converted.messages] == [MessageRole.USER]


def test_request_tools_and_stop():
    request = make_request(
        tools=[{"name": "lookup", "description": "find", "input_schema": {"type": "object"}}],
        stop_sequences=["END"],
    )
    converted = anthropic_request_to_openai(request)
    assert converted.stop == "END"
    assert len(converted.tools) == 1
    tool = converted.tools[0]
    assert tool.tool_type == "function"
    assert tool.function.name == "lookup"
    assert tool.function.description == "find"
    assert tool.function.parameters == {"type": "object"}


def test_request_multiple_stop_sequences():
    converted = anthropic_request_to_openai(make_request(stop_sequences=["a", "b"]))
    assert converted.stop == ["a", "b"]


def test_request_thinking_and_metadata_go_to_extra():
    request = make_request(thinking={"type": "enabled"}, metadata={"user_id": "u1"})
    converted = anthropic_request_to_openai(request)
    assert converted.extra["thinking"] == {"type": "enabled"}
    assert converted.extra["metadata"] == {"user_id": "u1"}
    assert "thinking" not in converted.to_dict()


def test_request_unknown_role_treated_as_user():
    request = make_request(messages=[{"role": "other", "content": [{"type": "text", "text": "x"}]}])
    converted = anthropic_request_to_openai(request)
    assert converted.messages[0].role == MessageRole.USER
    assert converted.messages[0].content == "x"