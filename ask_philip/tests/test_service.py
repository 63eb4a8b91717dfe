from ask_philip.api.service import ask_philip, create_agent
from ask_philip.config.settings import Settings
from ask_philip.domain.models import GenerateResult
from ask_philip.prompts import CONTEXT_PREFIX


class FakeProvider:
    name = "fake"

    def __init__(self):
        self.requests = []

    def generate(self, req):
        self.requests.append(req)
        return GenerateResult(provider="fake", model=req.model, text="Libertarianism is true.")


def test_create_agent_uses_settings():
    cfg = Settings(gemini_api_key="k-123456789", temperature=0.3, enable_web_grounding=False)
    provider = FakeProvider()
    agent = create_agent(cfg, provider_client=provider)
    assert agent.config.provider == "fake"
    assert agent.config.temperature == 0.3
    assert agent.config.web_grounding is False


def test_ask_philip_roundtrip():
    provider = FakeProvider()
    agent = create_agent(Settings(gemini_api_key="k-123456789"), provider_client=provider)
    res = ask_philip(agent, "Do we have free will?")
    assert res.text == "Libertarianism is true."
    req = provider.requests[0]
    assert req.contents[0].text.startswith(CONTEXT_PREFIX)
    assert req.web_grounding is True


def test_create_agent_builds_gemini_client():
    agent = create_agent(Settings(gemini_api_key=None))
    assert agent.config.provider == "gemini"
