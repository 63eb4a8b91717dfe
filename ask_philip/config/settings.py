"""配置管理模块。

支持从环境变量、.env 以及 config.yaml 加载配置。
GEMINI_API_KEY 是唯一必需的密钥，缺失时不在加载阶段报错，
而是在第一次调用 Provider 时以 ConfigurationError 的形式暴露给用户。
"""

import os
import warnings
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _load_config_from_yaml() -> Dict[str, Any]:
    """从 config.yaml 加载配置（若存在）。"""
    candidates = []
    explicit = os.getenv("ASK_PHILIP_CONFIG_FILE")
    if explicit:
        candidates.append(Path(explicit).expanduser())
    candidates.extend([
        Path.cwd() / "config.yaml",
        Path(__file__).resolve().parents[2] / "config.yaml",
    ])

    seen: set[Path] = set()
    for path in candidates:
        if path in seen:
            continue
        seen.add(path)
        try:
            if path.exists():
                data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
                if isinstance(data, dict):
                    return data
                warnings.warn(f"Config file {path} is not a mapping, ignored")
        except (OSError, yaml.YAMLError) as exc:
            warnings.warn(f"Failed to read config file {path}: {exc}")
    return {}


class Settings(BaseSettings):
    """应用配置（使用 Pydantic）。"""

    # ---- Provider 相关配置 ----
    default_provider: str = Field(default="gemini", description="默认 Provider 名称")
    default_model: str = Field(
        default="philip-chat",
        description="逻辑模型名，由 registry 映射为具体的 Gemini 模型",
    )
    gemini_api_key: Optional[str] = Field(default=None, description="Gemini API 密钥")
    gemini_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        description="Gemini REST API 基础URL",
    )
    http_timeout: float = Field(default=60.0, ge=1.0, description="HTTP 超时时间（秒）")

    # ---- 生成参数 ----
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    top_p: float = Field(default=0.95, gt=0.0, le=1.0)
    enable_web_grounding: bool = Field(default=True, description="是否请求 Google 搜索 grounding")
    stream_replies: bool = Field(default=False, description="GUI 是否以流式方式展示回答")

    # ---- 日志 ----
    log_dir: str = Field(default="logs", description="日志目录")
    log_redact_content: bool = Field(default=False, description="是否脱敏日志内容")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @staticmethod
    def _config_source() -> Dict[str, Any]:
        return _load_config_from_yaml()

    @field_validator("gemini_api_key")
    @classmethod
    def normalize_api_key(cls, v: Optional[str]) -> Optional[str]:
        # 空字符串与纯空白一律视为“未配置”
        if v is None:
            return None
        v = v.strip()
        return v or None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            cls._config_source,
            file_secret_settings,
        )


settings = Settings()
