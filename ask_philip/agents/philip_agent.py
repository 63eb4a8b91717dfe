"""Philip 对话编排核心。

负责把“新消息 + 之前的对话历史”翻译成一次 Provider 调用：

1. 首轮对话（历史为空）时，在消息前加上一次性的 grounding 上下文前缀；
   之后的轮次原样发送。
2. 附上 persona 的 system instruction 和 Google 搜索 grounding 工具。
3. 只调用一次 Provider，不重试、不退避。
4. 任何异常都转换为一个带可读 message 的 BusinessError 再抛出。

PhilipAgent 不持有会话状态，历史由调用方（ChatSession）以只读快照的形式传入。
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterator, NoReturn, Optional, Sequence
from uuid import uuid4
import logging
import time

from ask_philip.domain.exceptions import ApiError, BusinessError
from ask_philip.domain.models import (
    GenerateRequest,
    GenerateResult,
    GenerateStreamChunk,
    Part,
    Turn,
)
from ask_philip.infrastructure.logging.logger import logger
from ask_philip.prompts import load_system_prompt, with_context_prefix
from ask_philip.providers.base import ProviderClient


UNKNOWN_ERROR_MESSAGE = "An unknown error occurred while contacting the AI."


@dataclass
class AgentConfig:
    persona: str = "philip"
    provider: str = "gemini"
    model: str = "philip-chat"
    temperature: float = 0.7
    top_p: float = 0.95
    web_grounding: bool = True


class PhilipAgent:
    def __init__(self, provider_client: ProviderClient, config: Optional[AgentConfig] = None):
        self._provider_client = provider_client
        self._config = config or AgentConfig(provider=getattr(provider_client, "name", "gemini"))

    @property
    def config(self) -> AgentConfig:
        return self._config

    def build_request(self, message: str, history: Sequence[Turn] = ()) -> GenerateRequest:
        """构造发给 Provider 的请求。

        Args:
            message: 已去除首尾空白的非空用户消息
            history: 之前的对话轮次（可能为空）
        """
        turns = list(history)
        text = with_context_prefix(message) if not turns else message
        turns.append(Turn(role="user", parts=[Part(text=text)]))
        return GenerateRequest(
            model=self._config.model,
            contents=turns,
            system_instruction=load_system_prompt(self._config.persona),
            web_grounding=self._config.web_grounding,
            temperature=self._config.temperature,
            top_p=self._config.top_p,
        )

    def ask(self, message: str, history: Sequence[Turn] = ()) -> GenerateResult:
        """发送一条消息并返回 Provider 的结果。

        result.text 可能为 None，由调用方决定兜底文案。

        Raises:
            BusinessError: 所有失败都会转换成 BusinessError 子类
        """
        start_time = time.time()
        log_ctx = self._log_ctx()
        req = self.build_request(message, history)
        self._log(
            logging.INFO,
            "Calling provider",
            log_ctx,
            history_turns=len(history),
            context_prefix=not history,
        )
        try:
            result = self._provider_client.generate(req)
        except Exception as e:
            self._fail(e, log_ctx)
        self._log(
            logging.INFO,
            "Provider replied",
            log_ctx,
            elapsed_seconds=round(time.time() - start_time, 2),
            empty=not result.text,
            finish_reason=result.finish_reason,
            sources=len(result.sources),
        )
        return result

    def ask_stream(self, message: str, history: Sequence[Turn] = ()) -> Iterator[GenerateStreamChunk]:
        """以流式方式发送消息，逐块产出增量，错误转换规则与 ask 相同。"""

        start_time = time.time()
        log_ctx = self._log_ctx()
        req = self.build_request(message, history)
        self._log(
            logging.INFO,
            "Calling provider (stream)",
            log_ctx,
            history_turns=len(history),
            context_prefix=not history,
        )
        chunks = 0
        try:
            for chunk in self._provider_client.generate_stream(req):
                chunks += 1
                yield chunk
        except Exception as e:
            self._fail(e, log_ctx)
        self._log(
            logging.INFO,
            "Provider stream finished",
            log_ctx,
            elapsed_seconds=round(time.time() - start_time, 2),
            chunks=chunks,
        )

    def _fail(self, exc: Exception, log_ctx: Dict[str, Any]) -> NoReturn:
        err = self.translate_error(exc)
        self._log(logging.ERROR, "Provider call failed", log_ctx, code=err.code, error=err.message)
        if err is exc:
            raise err
        raise err from exc

    @staticmethod
    def translate_error(exc: Exception) -> BusinessError:
        """业务异常原样返回；其他异常包装为 ApiError，保留原始信息。"""

        if isinstance(exc, BusinessError):
            if not exc.message:
                exc.message = UNKNOWN_ERROR_MESSAGE
            return exc
        message = getattr(exc, "message", None) or str(exc) or UNKNOWN_ERROR_MESSAGE
        return ApiError(code="UNKNOWN_ERROR", message=str(message))

    def _log_ctx(self) -> Dict[str, Any]:
        return {
            "trace_id": f"tr-{uuid4().hex}",
            "persona": self._config.persona,
            "provider": getattr(self._provider_client, "name", self._config.provider),
            "model": self._config.model,
        }

    @staticmethod
    def _log(level: int, message: str, log_ctx: Dict[str, Any], **fields: Any) -> None:
        payload = dict(log_ctx)
        payload.update(fields)
        logger.log(level, message, extra={"extra": payload})
