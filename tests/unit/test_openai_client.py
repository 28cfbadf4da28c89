import json
from types import SimpleNamespace
from unittest.mock import MagicMock

import httpx
import openai
import pytest

from prompt_playlist.errors import MalformedResponseError, ProviderUnavailableError
from prompt_playlist.selection.openai_client import OpenAIClient
from prompt_playlist.selection.prompts import build_tool_schema

SCHEMA = build_tool_schema(3)


def _response(tool_calls=None, choices=True):
    message = SimpleNamespace(content=None, tool_calls=tool_calls)
    usage = SimpleNamespace(prompt_tokens=100, completion_tokens=20)
    return SimpleNamespace(
        choices=[SimpleNamespace(message=message, finish_reason="tool_calls")] if choices else [],
        usage=usage,
    )


def _tool_call(name, arguments):
    return SimpleNamespace(function=SimpleNamespace(name=name, arguments=arguments))


def _client_returning(response):
    sdk = MagicMock()
    sdk.chat.completions.create.return_value = response
    return OpenAIClient(api_key="sk-test", client=sdk), sdk


def test_complete_forces_tool_call_and_parses_arguments():
    args = {"playlistName": "Mix", "description": "d", "tracks": []}
    client, sdk = _client_returning(_response([_tool_call(SCHEMA["name"], json.dumps(args))]))

    assert client.complete("system", "user", SCHEMA) == args

    kwargs = sdk.chat.completions.create.call_args.kwargs
    assert kwargs["tool_choice"] == {"type": "function", "function": {"name": SCHEMA["name"]}}
    assert kwargs["tools"][0]["function"] is SCHEMA
    assert kwargs["messages"][0] == {"role": "system", "content": "system"}
    assert kwargs["temperature"] == 0.7


def test_sdk_retries_disabled():
    client = OpenAIClient(api_key="sk-test", timeout=12.0)
    assert client.client.max_retries == 0
    assert client.timeout == 12.0


def test_provider_error_is_wrapped():
    sdk = MagicMock()
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    sdk.chat.completions.create.side_effect = openai.APIConnectionError(request=request)
    client = OpenAIClient(api_key="sk-test", client=sdk)

    with pytest.raises(ProviderUnavailableError):
        client.complete("system", "user", SCHEMA)


def test_missing_tool_call():
    client, _ = _client_returning(_response(tool_calls=None))
    with pytest.raises(MalformedResponseError, match="did not call"):
        client.complete("system", "user", SCHEMA)


def test_wrong_tool_name():
    client, _ = _client_returning(_response([_tool_call("other_tool", "{}")]))
    with pytest.raises(MalformedResponseError):
        client.complete("system", "user", SCHEMA)


def test_unparsable_arguments():
    client, _ = _client_returning(_response([_tool_call(SCHEMA["name"], "{not json")]))
    with pytest.raises(MalformedResponseError, match="Unparsable"):
        client.complete("system", "user", SCHEMA)


def test_non_object_arguments():
    client, _ = _client_returning(_response([_tool_call(SCHEMA["name"], "[1, 2]")]))
    with pytest.raises(MalformedResponseError):
        client.complete("system", "user", SCHEMA)


def test_no_choices():
    client, _ = _client_returning(_response(choices=False))
    with pytest.raises(MalformedResponseError):
        client.complete("system", "user", SCHEMA)
