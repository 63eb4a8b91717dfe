"""LLM Provider 集成层。

该包下的模块负责：
- 定义 Provider 抽象接口 (base)。
- 维护 Provider 与模型配置 (registry)。
- 提供具体实现 (gemini_client)。
"""

from typing import Literal, Optional

from ask_philip.config.settings import settings
from ask_philip.providers.base import ProviderClient
from ask_philip.providers.gemini_client import GeminiClient
from ask_philip.providers.registry import get_provider_config


def create_provider(name: Optional[str] = None, cfg=None) -> ProviderClient:
    """根据名称创建 Provider 实例，默认取配置中的 provider。"""

    cfg = cfg or settings
    provider_name = (name or getattr(cfg, "default_provider", "gemini")).lower()
    # 未知名称直接抛 KeyError
    get_provider_config(provider_name)
    return GeminiClient(cfg)


DefaultProviderName = Literal["gemini"]
