import pytest

from config import LlmRoute
from llm_gateway import LlmGatewayError, call, chat
from rounds.feedback import RoundFeedback


class FakeResponse:
    def __init__(self, status_code, payload):
        self.status_code = status_code
        self._payload = payload

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class FakeClient:
    def __init__(self, *responses):
        self._responses = list(responses)
        self.requests = []

    def post(self, url, *, json, headers, timeout):
        self.requests.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        return self._responses.pop(0)


def _route(**overrides) -> LlmRoute:
    data = {
        "name": "feedback",
        "base_url": "http://llm.local",
        "endpoint": "/v1/chat/completions",
        "model": "stub-model",
        "timeout_s": 5,
        "max_retries": 1,
        "api_key_env": "FEEDBACK_API_KEY",
    }
    data.update(overrides)
    return LlmRoute(**data)


def _reply(content: str) -> FakeResponse:
    return FakeResponse(200, {"choices": [{"message": {"content": content}}]})


def test_call_validates_schema(monkeypatch):
    monkeypatch.setenv("FEEDBACK_API_KEY", "secret")
    client = FakeClient(_reply('```json\n{"feedback": "Nice work"}\n```'))

    result = call("Review the round", RoundFeedback, cfg=_route(), client=client)

    assert result.feedback == "Nice work"
    request = client.requests[0]
    assert request["url"] == "http://llm.local/v1/chat/completions"
    assert request["headers"]["Authorization"] == "Bearer secret"
    assert request["json"]["messages"][0]["role"] == "system"
    assert request["json"]["messages"][-1] == {"role": "user", "content": "Review the round"}


def test_retry_after_invalid_reply():
    client = FakeClient(_reply("not json"), _reply('{"feedback": "second try"}'))
    result = chat([{"role": "user", "content": "hi"}], RoundFeedback, cfg=_route(), client=client)
    assert result.feedback == "second try"
    assert len(client.requests) == 2
    assert "failed validation" in client.requests[1]["json"]["messages"][-1]["content"]


def test_exhausted_retries_raise():
    client = FakeClient(_reply("{}"), _reply("{}"))
    with pytest.raises(LlmGatewayError):
        call("hi", RoundFeedback, cfg=_route(), client=client)


def test_error_status_raises():
    client = FakeClient(FakeResponse(503, {}))
    with pytest.raises(LlmGatewayError):
        call("hi", RoundFeedback, cfg=_route(sequential=True), client=client)


def test_non_json_body_raises():
    client = FakeClient(FakeResponse(200, ValueError("bad body")))
    with pytest.raises(LlmGatewayError):
        call("hi", RoundFeedback, cfg=_route(), client=client)


def test_missing_content_raises():
    client = FakeClient(FakeResponse(200, {"choices": []}))
    with pytest.raises(LlmGatewayError):
        call("hi", RoundFeedback, cfg=_route(), client=client)
