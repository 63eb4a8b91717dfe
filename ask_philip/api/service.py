"""对外 API 服务模块。

提供简化的函数接口供上层应用调用。
客户端与 Agent 由入口显式构造并传入，不使用模块级单例，测试时可以替换成假客户端。
"""

from typing import Optional, Sequence

from ask_philip.agents.philip_agent import AgentConfig, PhilipAgent
from ask_philip.config.settings import Settings, settings
from ask_philip.domain.models import GenerateResult, Turn
from ask_philip.infrastructure.logging.logger import logger
from ask_philip.providers import create_provider
from ask_philip.providers.base import ProviderClient


def create_agent(
    cfg: Optional[Settings] = None,
    provider_client: Optional[ProviderClient] = None,
) -> PhilipAgent:
    """根据配置构造 PhilipAgent。

    Args:
        cfg: 配置对象（可选，默认使用全局 settings）
        provider_client: Provider 客户端（可选，默认按配置创建）
    """
    cfg = cfg or settings
    client = provider_client or create_provider(cfg=cfg)
    config = AgentConfig(
        provider=getattr(client, "name", cfg.default_provider),
        model=cfg.default_model,
        temperature=cfg.temperature,
        top_p=cfg.top_p,
        web_grounding=cfg.enable_web_grounding,
    )
    logger.info(
        "Agent created",
        extra={"extra": {
            "provider": config.provider,
            "model": config.model,
            "key_set": bool(getattr(client, "configured", True)),
            "web_grounding": config.web_grounding,
        }},
    )
    return PhilipAgent(provider_client=client, config=config)


def ask_philip(agent: PhilipAgent, message: str, history: Sequence[Turn] = ()) -> GenerateResult:
    """向 Philip 提问。

    Args:
        agent: 由 create_agent 构造的 Agent
        message: 已去除首尾空白的非空用户消息
        history: 之前的对话轮次

    Returns:
        GenerateResult；text 为空时由调用方替换为兜底文案

    Raises:
        domain.exceptions 中定义的各类 BusinessError
    """
    return agent.ask(message, history)
