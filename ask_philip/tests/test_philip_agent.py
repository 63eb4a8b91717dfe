"""测试 Philip 对话编排。"""

import pytest

from ask_philip.agents.philip_agent import AgentConfig, PhilipAgent, UNKNOWN_ERROR_MESSAGE
from ask_philip.domain.exceptions import ApiError, ConfigurationError, RateLimitError
from ask_philip.domain.models import GenerateResult, GenerateStreamChunk, Part, Turn
from ask_philip.prompts import CONTEXT_PREFIX, PHILIP_SWENSON_URL, PHILPAPERS_URL, load_system_prompt


class FakeProvider:
    """记录请求的模拟 Provider。"""
    name = "fake"

    def __init__(self, text="Yes, in the sense that matters.", error=None):
        self.text = text
        self.error = error
        self.requests = []

    def generate(self, req):
        self.requests.append(req)
        if self.error is not None:
            raise self.error
        return GenerateResult(provider="fake", model=req.model, text=self.text)

    def generate_stream(self, req):
        self.requests.append(req)
        yield GenerateStreamChunk(provider="fake", model=req.model, text="Yes, ")
        if self.error is not None:
            raise self.error
        yield GenerateStreamChunk(provider="fake", model=req.model, text="obviously.")


def _exchange():
    return [
        Turn(role="user", parts=[Part(text="Do we have free will?")]),
        Turn(role="model", parts=[Part(text="Yes.")]),
    ]


def test_first_turn_gets_context_prefix():
    provider = FakeProvider()
    agent = PhilipAgent(provider)
    res = agent.ask("Do we have free will?", [])
    assert res.text == "Yes, in the sense that matters."
    req = provider.requests[0]
    assert len(req.contents) == 1
    text = req.contents[0].text
    assert text.startswith(CONTEXT_PREFIX)
    assert text == f"[Context: {PHILIP_SWENSON_URL}, {PHILPAPERS_URL}] Do we have free will?"
    assert req.contents[0].role == "user"


def test_later_turn_is_sent_verbatim():
    provider = FakeProvider()
    agent = PhilipAgent(provider)
    agent.ask("And moral responsibility?", _exchange())
    req = provider.requests[0]
    assert [t.role for t in req.contents] == ["user", "model", "user"]
    assert req.contents[-1].text == "And moral responsibility?"
    assert all(CONTEXT_PREFIX not in t.text for t in req.contents)


def test_request_carries_persona_and_grounding():
    provider = FakeProvider()
    agent = PhilipAgent(provider, AgentConfig(model="philip-chat", temperature=0.2))
    agent.ask("What is the 'Ability to Do Otherwise'?")
    req = provider.requests[0]
    assert req.system_instruction == load_system_prompt("philip")
    assert req.system_instruction.startswith("You are Philip Swenson")
    assert req.web_grounding is True
    assert req.temperature == 0.2
    assert req.model == "philip-chat"


def test_history_is_not_mutated():
    provider = FakeProvider()
    history = _exchange()
    PhilipAgent(provider).ask("And moral responsibility?", history)
    assert len(history) == 2


def test_empty_reply_is_returned_as_none():
    agent = PhilipAgent(FakeProvider(text=None))
    assert agent.ask("Hello?").text is None


def test_business_errors_pass_through():
    err = RateLimitError(code="RATE_LIMIT", message="429 Too Many Requests", http_status=429)
    agent = PhilipAgent(FakeProvider(error=err))
    with pytest.raises(RateLimitError) as exc:
        agent.ask("Do we have free will?")
    assert exc.value is err


def test_configuration_error_passes_through():
    err = ConfigurationError(code="MISSING_API_KEY", message="API Key is missing.")
    agent = PhilipAgent(FakeProvider(error=err))
    with pytest.raises(ConfigurationError):
        agent.ask("Do we have free will?")


def test_unknown_errors_are_wrapped():
    agent = PhilipAgent(FakeProvider(error=RuntimeError("socket exploded")))
    with pytest.raises(ApiError) as exc:
        agent.ask("Do we have free will?")
    assert exc.value.code == "UNKNOWN_ERROR"
    assert exc.value.message == "socket exploded"
    assert isinstance(exc.value.__cause__, RuntimeError)


def test_unknown_error_without_message_uses_fallback():
    agent = PhilipAgent(FakeProvider(error=RuntimeError()))
    with pytest.raises(ApiError) as exc:
        agent.ask("Do we have free will?")
    assert exc.value.message == UNKNOWN_ERROR_MESSAGE


def test_single_attempt_on_failure():
    provider = FakeProvider(error=RuntimeError("boom"))
    agent = PhilipAgent(provider)
    with pytest.raises(ApiError):
        agent.ask("Do we have free will?")
    assert len(provider.requests) == 1


def test_ask_stream_yields_chunks():
    provider = FakeProvider()
    chunks = list(PhilipAgent(provider).ask_stream("Do we have free will?"))
    assert "".join(c.text for c in chunks) == "Yes, obviously."
    assert provider.requests[0].contents[0].text.startswith(CONTEXT_PREFIX)


def test_ask_stream_translates_errors():
    provider = FakeProvider(error=ValueError("bad chunk"))
    stream = PhilipAgent(provider).ask_stream("Do we have free will?", _exchange())
    assert next(stream).text == "Yes, "
    with pytest.raises(ApiError) as exc:
        next(stream)
    assert exc.value.message == "bad chunk"
