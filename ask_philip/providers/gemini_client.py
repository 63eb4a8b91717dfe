"""Gemini Provider 适配器。

本模块负责：

1. 接收统一的 GenerateRequest。
2. 将其转换为 Gemini generateContent REST 请求：
   - URL: {base_url}/models/{model}:generateContent
   - 流式: {base_url}/models/{model}:streamGenerateContent?alt=sse
   - 认证: x-goog-api-key: <api_key>
3. 调用 HTTP 接口，并把网络/鉴权/限流/其他错误映射为带 kind 的业务异常。
4. 将响应 JSON 解析为统一的 GenerateResult（文本、grounding 来源、用量）。
"""

import json
from typing import Any, Dict, Iterable, List, Optional, Tuple

import httpx

from ask_philip.config.settings import settings
from ask_philip.domain.exceptions import (
    ApiError,
    AuthenticationError,
    ConfigurationError,
    NetworkError,
    RateLimitError,
)
from ask_philip.domain.models import (
    GenerateRequest,
    GenerateResult,
    GenerateStreamChunk,
    GroundingSource,
    Usage,
)
from ask_philip.infrastructure.logging.logger import logger
from ask_philip.providers.registry import GEMINI_CONFIG, ModelConfig, resolve_model


MISSING_KEY_MESSAGE = "API Key is missing. Please check your GEMINI_API_KEY configuration."


class GeminiClient:
    """Gemini Provider 客户端实现。

    - name: Provider 名称（供日志/调试使用）。
    - generate / generate_stream: 对外统一调用入口。

    每次调用都只发一次请求，不做重试。
    """

    name = "gemini"

    def __init__(self, cfg=settings):
        # cfg 里包含 base_url、api_key、超时等配置
        self._settings = cfg

    @property
    def configured(self) -> bool:
        return bool((getattr(self._settings, "gemini_api_key", None) or "").strip())

    # ---- 非流式 ----

    def generate(self, req: GenerateRequest) -> GenerateResult:
        self._require_key()
        model_cfg = resolve_model(GEMINI_CONFIG, req.model)
        payload = self._build_payload(req, model_cfg)
        try:
            with httpx.Client(timeout=self._settings.http_timeout, trust_env=False) as client:
                resp = client.post(
                    f"{self._base_url()}/models/{model_cfg.provider_model}:generateContent",
                    json=payload,
                    headers=self._headers(),
                )
        except httpx.RequestError as e:
            # 网络错误：DNS 失败、连接超时等
            raise NetworkError(code="NETWORK_ERROR", message=str(e) or "Network error while contacting Gemini")
        if resp.status_code >= 400:
            self._raise_for_status(resp.status_code, self._error_message(resp))
        data = resp.json()
        text, finish_reason, sources = self._parse_candidate(data)
        return GenerateResult(
            provider=self.name,
            model=req.model,
            text=text,
            finish_reason=finish_reason,
            usage=self._parse_usage(data),
            sources=sources,
            raw=data,
        )

    # ---- 流式 ----

    def generate_stream(self, req: GenerateRequest) -> Iterable[GenerateStreamChunk]:
        self._require_key()
        model_cfg = resolve_model(GEMINI_CONFIG, req.model)
        payload = self._build_payload(req, model_cfg)
        try:
            with httpx.Client(timeout=self._settings.http_timeout, trust_env=False) as client:
                with client.stream(
                    "POST",
                    f"{self._base_url()}/models/{model_cfg.provider_model}:streamGenerateContent",
                    params={"alt": "sse"},
                    json=payload,
                    headers=self._headers(),
                ) as resp:
                    if resp.status_code >= 400:
                        resp.read()
                        self._raise_for_status(resp.status_code, self._error_message(resp))
                    for line in resp.iter_lines():
                        if not line:
                            continue
                        data_str = line
                        if data_str.startswith("data:"):
                            data_str = data_str[5:].strip()
                        else:
                            data_str = data_str.strip()
                        if not data_str:
                            continue
                        try:
                            data = json.loads(data_str)
                        except json.JSONDecodeError:
                            continue
                        text, finish_reason, sources = self._parse_candidate(data)
                        yield GenerateStreamChunk(
                            provider=self.name,
                            model=req.model,
                            text=text,
                            finish_reason=finish_reason,
                            usage=self._parse_usage(data),
                            sources=sources,
                            raw=data,
                        )
        except httpx.RequestError as e:
            raise NetworkError(code="NETWORK_ERROR", message=str(e) or "Network error while contacting Gemini")

    # ---- 辅助方法 ----

    def _require_key(self) -> None:
        # 配置缺失在发起任何网络请求之前报出
        if not self.configured:
            raise ConfigurationError(code="MISSING_API_KEY", message=MISSING_KEY_MESSAGE)

    def _base_url(self) -> str:
        base = getattr(self._settings, "gemini_base_url", None) or GEMINI_CONFIG.base_url
        return base.rstrip("/")

    def _headers(self) -> Dict[str, str]:
        return {
            "x-goog-api-key": self._settings.gemini_api_key.strip(),
            "Content-Type": "application/json",
        }

    def _build_payload(self, req: GenerateRequest, model_cfg: ModelConfig) -> dict:
        """将 GenerateRequest 转成 Gemini 所需的请求 JSON。"""

        generation_config: Dict[str, Any] = {
            "temperature": req.temperature if req.temperature is not None else model_cfg.default_temperature,
            "maxOutputTokens": req.max_output_tokens or model_cfg.max_output_tokens,
        }
        if req.top_p is not None:
            generation_config["topP"] = req.top_p
        payload: Dict[str, Any] = {
            "contents": [turn.to_payload() for turn in req.contents],
            "generationConfig": generation_config,
        }
        if req.system_instruction:
            payload["systemInstruction"] = {"parts": [{"text": req.system_instruction}]}
        if req.web_grounding:
            payload["tools"] = [{"googleSearch": {}}]
        return payload

    def _raise_for_status(self, status: int, message: str) -> None:
        logger.warning(
            "Gemini request failed",
            extra={"extra": {"provider": self.name, "http_status": status, "error": message}},
        )
        if status == 429:
            # 限流不重试，交给用户稍后再试
            raise RateLimitError(code="RATE_LIMIT", message=message, http_status=status)
        if status in (401, 403):
            raise AuthenticationError(code="UNAUTHORIZED", message=message, http_status=status)
        raise ApiError(code="API_ERROR", message=message, http_status=status)

    @staticmethod
    def _error_message(resp) -> str:
        """优先取 Gemini 错误体里的 error.message，其次是原始响应文本。"""

        try:
            data = resp.json()
        except ValueError:
            data = None
        if isinstance(data, dict):
            err = data.get("error")
            if isinstance(err, dict) and err.get("message"):
                return f"{resp.status_code} {err['message']}"
        text = (getattr(resp, "text", "") or "").strip()
        return text or f"Gemini returned HTTP {resp.status_code}"

    @staticmethod
    def _parse_candidate(data: dict) -> Tuple[Optional[str], Optional[str], List[GroundingSource]]:
        """取第一个候选回答的文本、结束原因和 grounding 来源。"""

        candidates = data.get("candidates") or []
        if not candidates:
            # 请求被安全策略拦截时只有 promptFeedback
            feedback = data.get("promptFeedback") or {}
            return None, feedback.get("blockReason"), []
        cand = candidates[0] or {}
        parts = (cand.get("content") or {}).get("parts") or []
        texts = [p["text"] for p in parts if isinstance(p.get("text"), str) and not p.get("thought")]
        sources: List[GroundingSource] = []
        grounding = cand.get("groundingMetadata") or {}
        for chunk in grounding.get("groundingChunks") or []:
            web = chunk.get("web") or {}
            if web.get("uri"):
                sources.append(GroundingSource(uri=web["uri"], title=web.get("title") or ""))
        return "".join(texts) or None, cand.get("finishReason"), sources

    @staticmethod
    def _parse_usage(data: dict) -> Optional[Usage]:
        usage_raw = data.get("usageMetadata") or {}
        if not usage_raw:
            return None
        return Usage(
            prompt_tokens=usage_raw.get("promptTokenCount", 0),
            completion_tokens=usage_raw.get("candidatesTokenCount", 0),
            total_tokens=usage_raw.get("totalTokenCount", 0),
        )
