# boomgw

This package holds the building blocks of a gateway. The gateway puts LLM
providers behind one OpenAI-compatible interface. It also serves clients that
speak the Anthropic Messages API.

## Modules

- `boomgw.chat`: the OpenAI-style chat data types.
  - The main ones are `ChatCompletionRequest`, `ChatCompletionResponse` and
    `ChatStreamChunk`.
  - `CompletionRequest` is the legacy completion request.
    `CompletionRequest.into_chat_request()` wraps its prompt in a single user
    message.
  - The main types can be built with `from_dict` and turned back with `to_dict`.
  - `Message.normalize_reasoning_for_openai()` moves reasoning parts into
    `reasoning_content`.
- `boomgw.anthropic_schema`: the Anthropic Messages request and response types.
  - `content_block_from_dict` and `content_block_to_dict` read and write the
    content blocks.
  - Block types this module does not know are read as `AnthropicUnknownBlock`.
- `boomgw.anthropic_request`: turns an incoming Anthropic request into the
  internal chat format.
  - `anthropic_request_to_openai()` converts the whole request.
  - `convert_user_message()` and `convert_assistant_message()` convert single turns.
- `boomgw.anthropic_response`: works in the other direction.
  - `openai_response_to_anthropic()` converts a complete response.
  - `AnthropicStreamTranscoder` turns OpenAI stream chunks into `AnthropicSseEvent`
    objects. Call `transcode(chunk)` for each chunk, then `drain()` once the stream
    ends.
  - The transcoder holds back the final `message_delta` and `message_stop` events
    until the next chunk arrives. That way a trailing usage chunk is reported.
- `boomgw.normalize`:
  - `ensure_role_alternation()` inserts empty user messages in place where two
    roles clash.
  - `convert_tool_choice_for_anthropic()` translates an OpenAI `tool_choice` value.
    It returns a pair: the translated value, and whether to strip the tools.
  - `convert_image_source()` turns an Anthropic image source into a URL or a data
    URI.
- `boomgw.errors`: the `GatewayError` hierarchy.
  - Each error carries a `status_code` and an `error_type`.
  - Each error answers `should_log_to_db()` and `is_deployment_failure()`.
  - The errors include `AuthError`, `RateLimitExceeded`, `UpstreamError` and
    `FlowControlQueueTimeout`, among others.
- `boomgw.debug_store`: `DebugErrorStore` keeps recent `DebugErrorEntry` records
  in memory.
  - It records only while `enabled` is true, and keeps at most three entries per key.
  - Setting `enabled` to false clears the store.
- `boomgw.audit_log`: the request-log table and how rows get into it.
  - `Database` is an abstract async interface with `execute`, `fetch_all` and
    `fetch_one`. It uses `$n` placeholders.
  - `RequestLog` is one log record.
  - `log_request()` inserts a record in the background and never raises.
  - `request_log_ddl()` returns the DDL for the table.
  - `run_request_log_migration()` creates the table and applies the column upgrades.
- `boomgw.audit_reader`: paginated listing of the request log.
  - `ListLogsQuery` holds the filters. You can filter by key hash or model, and
    `status="error"` keeps only failed requests.
  - `build_list_logs_sql()` builds the SQL.
  - `list_logs()` fetches one page.
  - `logs_page_to_json()` turns a page into the response body.
- `boomgw.auth_models`: `VerificationToken` and `TeamRow`, built from database rows
  with `from_row`.

## Example

```python
from boomgw.anthropic_schema import AnthropicMessagesRequest
from boomgw.anthropic_request import anthropic_request_to_openai

request = AnthropicMessagesRequest.from_dict({
    "model": "claude-test",
    "max_tokens": 256,
    "system": "Be brief.",
    "messages": [{"role": "user", "content": "Hello"}],
})
chat = anthropic_request_to_openai(request)
print(chat.to_dict())
```

## What this package does not do

This is a library of data types, conversions and helpers, not a running gateway.

- It has no HTTP server and no command.
- It has no clients for upstream providers, and no routing or load balancing.
- It has no rate limiter, and no key authentication beyond the row types in
  `boomgw.auth_models`.
- It ships no database driver. To store and read the request log, implement
  `boomgw.audit_log.Database` for the driver you use.

## Running the tests

```
pip install -e ".[test]"
pytest
```