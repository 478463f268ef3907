import pytest

from boomgw.chat import (
    ChatCompletionRequest,
    ChatCompletionResponse,
    ChatStreamChunk,
    Choice,
    CompletionRequest,
    FunctionCall,
    FunctionCallDelta,
    ImageUrl,
    ImageUrlPart,
    Message,
    MessageRole,
    ReasoningPart,
    StreamChoice,
    StreamDelta,
    StreamUsage,
    TextPart,
    ToolCall,
    ToolCallDelta,
    Usage,
    content_part_from_dict,
)


def test_normalize_reasoning_single_text_becomes_string():
    msg = Message(
        role=MessageRole.ASSISTANT,
        content=[ReasoningPart("hmm"), TextPart("answer")],
    )
    msg.normalize_reasoning_for_openai()
    assert msg.content == "answer"
    assert msg.reasoning_content == "hmm"


def test_normalize_reasoning_only_reasoning_gives_empty_text():
    msg = Message(role=MessageRole.ASSISTANT, content=[ReasoningPart("a"), ReasoningPart("b")])
    msg.normalize_reasoning_for_openai()
    assert msg.content == ""
    assert msg.reasoning_content == "ab"


def test_normalize_reasoning_keeps_multiple_parts():
    image = ImageUrlPart(ImageUrl(url="https://example.com/x.png"))
    msg = Message(
        role=MessageRole.ASSISTANT,
        content=[TextPart("t"), ReasoningPart("r"), image],
    )
    msg.normalize_reasoning_for_openai()
    assert msg.content == [TextPart("t"), image]
    assert msg.reasoning_content == "r"


def test_normalize_reasoning_leaves_text_content_alone():
    msg = Message(role=MessageRole.USER, content="plain")
    msg.normalize_reasoning_for_openai()
    assert msg.content == "plain"
    assert msg.reasoning_content is None


def test_message_to_dict_skips_absent_fields():
    assert Message(role=MessageRole.USER, content="hi").to_dict() == {
        "role": "user",
        "content": "hi",
    }


def test_message_missing_content_defaults_to_empty_text():
    msg = Message.from_dict({"role": "assistant"})
    assert msg.role is MessageRole.ASSISTANT
    assert msg.content == ""


def test_message_null_content_round_trip():
    msg = Message.from_dict({"role": "assistant", "content": None})
    assert msg.content is None
    assert msg.to_dict()["content"] is None


def test_message_with_tool_calls_round_trip():
    msg = Message(
        role=MessageRole.ASSISTANT,
        content=[TextPart("x"), ImageUrlPart(ImageUrl("https://example.com/i.png", "high"))],
        tool_calls=[ToolCall(id="call_1", function=FunctionCall("f", '{"a":1}'))],
    )
    assert Message.from_dict(msg.to_dict()) == msg


def test_invalid_role_raises():
    with pytest.raises(ValueError):
        Message.from_dict({"role": "robot", "content": "x"})


def test_unknown_content_part_raises():
    with pytest.raises(ValueError):
        content_part_from_dict({"type": "audio", "data": "x"})


def test_content_part_reasoning_tag():
    assert content_part_from_dict({"type": "reasoning", "reasoning": "r"}) == ReasoningPart("r")


def test_chat_request_extra_is_captured_but_not_serialized():
    data = {
        "model": "gpt",
        "messages": [{"role": "user", "content": "hi"}],
        "temperature": 0.5,
        "service_tier": "flex",
        "store": True,
    }
    req = ChatCompletionRequest.from_dict(data)
    assert req.extra == {"service_tier": "flex", "store": True}
    out = req.to_dict()
    assert "service_tier" not in out and "store" not in out
    assert out["temperature"] == 0.5
    assert "top_p" not in out


def test_chat_request_round_trip_with_tools_and_stop():
    data = {
        "model": "m",
        "messages": [{"role": "system", "content": "be nice"}],
        "stop": ["a", "b"],
        "tools": [
            {"type": "function", "function": {"name": "f", "parameters": {"type": "object"}}}
        ],
        "tool_choice": "auto",
    }
    assert ChatCompletionRequest.from_dict(data).to_dict() == data


def test_chat_request_missing_model_raises():
    with pytest.raises(ValueError):
        ChatCompletionRequest.from_dict({"messages": []})


def test_chat_request_bad_stop_raises():
    with pytest.raises(ValueError):
        ChatCompletionRequest.from_dict({"model": "m", "messages": [], "stop": 5})


def test_completion_into_chat_joins_prompts():
    req = CompletionRequest.from_dict(
        {"model": "m", "prompt": ["a", "b"], "max_tokens": 7, "suffix": "s", "foo": 1}
    )
    chat = req.into_chat_request()
    assert chat.model == "m"
    assert chat.max_tokens == 7
    assert len(chat.messages) == 1
    assert chat.messages[0].role is MessageRole.USER
    assert chat.messages[0].content == "a\nb"
    assert chat.extra == {"foo": 1}


def test_completion_string_prompt():
    chat = CompletionRequest(model="m", prompt="hello").into_chat_request()
    assert chat.messages[0].content == "hello"


def test_completion_invalid_prompt_raises():
    with pytest.raises(ValueError):
        CompletionRequest.from_dict({"model": "m", "prompt": 3})


def test_response_round_trip_and_null_finish_reason():
    resp = ChatCompletionResponse(
        id="chatcmpl-123",
        object="chat.completion",
        created=0,
        model="test",
        choices=[Choice(index=0, message=Message(role=MessageRole.ASSISTANT, content="ok"))],
        usage=Usage(prompt_tokens=10, completion_tokens=5, total_tokens=15),
    )
    out = resp.to_dict()
    assert out["choices"][0]["finish_reason"] is None
    assert "cache_read_input_tokens" not in out["usage"]
    assert ChatCompletionResponse.from_dict(out) == resp


def test_stream_chunk_round_trip():
    chunk = ChatStreamChunk(
        id="c",
        object="chat.completion.chunk",
        created=1,
        model="m",
        choices=[
            StreamChoice(
                index=0,
                delta=StreamDelta(
                    role=MessageRole.ASSISTANT,
                    tool_calls=[
                        ToolCallDelta(
                            index=0,
                            id="call_1",
                            call_type="function",
                            function=FunctionCallDelta(name="f", arguments="{"),
                        )
                    ],
                ),
            )
        ],
        usage=StreamUsage(prompt_tokens=3, completion_tokens=4),
    )
    out = chunk.to_dict()
    assert "total_tokens" not in out["usage"]
    assert ChatStreamChunk.from_dict(out) == chunk


def test_stream_chunk_without_usage():
    chunk = ChatStreamChunk.from_dict(
        {"id": "c", "object": "o", "created": 0, "model": "m", "choices": []}
    )
    assert chunk.usage is None
    assert "usage" not in chunk.to_dict()