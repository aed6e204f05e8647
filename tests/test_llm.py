import pytest

from backend import llm
from backend.errors import ProviderError, UnparseableResponse


def test_parse_strict_json():
    assert llm.parse_json_response('{"answer": "ok"}') == {"answer": "ok"}


def test_parse_recovers_outermost_object():
    text = 'Sure! Here you go:\n```json\n{"answer": "ok", "trace": [{"x": 1}]}\n```'
    assert llm.parse_json_response(text) == {"answer": "ok", "trace": [{"x": 1}]}


@pytest.mark.parametrize("text", ["", "no json here", "{broken", "[1, 2]", "} backwards {"])
def test_parse_failure_raises_with_raw(text):
    with pytest.raises(UnparseableResponse) as exc:
        llm.parse_json_response(text)
    assert exc.value.raw == text


class _Msg:
    def __init__(self, content):
        self.content = content


class _Chat:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.calls = 0

    def invoke(self, messages):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return _Msg(self.content)


def _provider(monkeypatch, chat):
    p = llm.OpenAIProvider("sk-test")
    monkeypatch.setattr(p, "_chat", lambda max_tokens, temperature: chat)
    return p


def test_completion_retries_are_left_to_the_client():
    chat = llm.OpenAIProvider("sk-test")._chat(1500, 0.0)
    assert chat.max_retries == 2


def test_embeddings_are_attempted_once():
    assert llm.OpenAIProvider("sk-test")._embedder().max_retries == 0


def test_client_failure_becomes_provider_error_without_reinvoking(monkeypatch):
    chat = _Chat(error=RuntimeError("401 invalid api key"))
    p = _provider(monkeypatch, chat)
    with pytest.raises(ProviderError) as exc:
        p.complete_json("sys", "user")
    assert "invalid api key" in str(exc.value)
    assert chat.calls == 1


def test_complete_json_parses_answer(monkeypatch):
    chat = _Chat('{"answer": "done"}')
    assert _provider(monkeypatch, chat).complete_json("sys", "user") == {"answer": "done"}
    assert chat.calls == 1


def test_content_blocks_are_joined(monkeypatch):
    chat = _Chat([{"type": "text", "text": '{"a":'}, {"type": "text", "text": " 1}"}])
    p = _provider(monkeypatch, chat)
    assert p.complete_json("sys", "user") == {"a": 1}


def test_get_provider_requires_key(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    assert llm.get_provider() is None
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv("LLM_MODEL", "gpt-test")
    p = llm.get_provider()
    assert p.model == "gpt-test"
