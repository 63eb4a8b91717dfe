"""Provider 抽象接口。

PhilipAgent 不直接依赖具体厂商的 HTTP 细节，而是依赖此协议：

- 每个厂商实现一个 ProviderClient（目前只有 GeminiClient）。
- 负责：将 GenerateRequest 转成具体 API 请求，并把响应 JSON 解析为 GenerateResult。

测试中可以直接注入一个实现了同样方法的假客户端。
"""

from typing import Protocol, Iterable
from ask_philip.domain.models import GenerateRequest, GenerateResult, GenerateStreamChunk


class ProviderClient(Protocol):
    """LLM Provider 客户端协议。

    实现者需要提供：
    - name: Provider 名称，用于日志/统计。
    - generate(req): 执行一次非流式调用，返回统一的 GenerateResult。
    """

    name: str

    def generate(self, req: GenerateRequest) -> GenerateResult:
        ...

    def generate_stream(self, req: GenerateRequest) -> Iterable[GenerateStreamChunk]:
        """执行一次流式调用，逐步产出增量。"""

        ...
