"""统一的对话与结果数据模型。

本模块定义了会话层与 Provider 之间共享的标准数据结构：

- Message: 会话记录中的一条消息（user/model），只存在于当前会话。
- Turn / Part: 发给 Gemini 的单轮内容，结构与其 REST API 的 contents 一致。
- GenerateRequest: 发给 Provider 的完整请求。
- GenerateResult / GenerateStreamChunk: Provider 解析后的统一响应。

Provider 适配器（如 GeminiClient）只依赖这些模型，
并负责在 API JSON 和这些模型之间做转换。
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Literal, Optional


# Gemini 的 contents 只接受这两种角色
Role = Literal["user", "model"]


@dataclass
class Message:
    """会话记录中的一条消息。没有 id、时间戳，也不持久化。"""

    role: Role
    content: str


@dataclass
class Part:
    text: str


@dataclass
class Turn:
    """Gemini contents 中的一项：{role, parts: [{text}]}。"""

    role: Role
    parts: List[Part]

    @property
    def text(self) -> str:
        return "".join(p.text for p in self.parts)

    def to_payload(self) -> Dict[str, Any]:
        return {"role": self.role, "parts": [{"text": p.text} for p in self.parts]}


def message_to_turn(message: Message) -> Turn:
    """Message -> Turn，一一对应，只去掉首尾空白。"""

    return Turn(role=message.role, parts=[Part(text=message.content.strip())])


def history_to_turns(messages: Iterable[Message]) -> List[Turn]:
    return [message_to_turn(m) for m in messages]


@dataclass
class GenerateRequest:
    """一次完整的生成请求。

    model 为逻辑模型名（如 "philip-chat"），由 registry 映射为真实的 Gemini 模型。
    """

    model: str
    contents: List[Turn]
    system_instruction: Optional[str] = None
    web_grounding: bool = True
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    max_output_tokens: Optional[int] = None


@dataclass
class Usage:
    """Provider 返回的 token 统计信息（统一格式）。"""

    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


@dataclass
class GroundingSource:
    """grounding 过程中引用的网页。"""

    uri: str
    title: str = ""


@dataclass
class GenerateResult:
    """一次生成调用的最终结果。

    - text: 第一个候选回答中所有文本片段的拼接；没有文本时为 None，
      由调用方决定替换成什么。
    - sources: 启用 grounding 时模型引用的网页。
    - raw: 原始响应 JSON，用于调试或日志记录。
    """

    provider: str
    model: str
    text: Optional[str]
    finish_reason: Optional[str] = None
    usage: Optional[Usage] = None
    sources: List[GroundingSource] = field(default_factory=list)
    raw: Optional[dict] = None


@dataclass
class GenerateStreamChunk:
    """流式生成的增量结果，结构与 GenerateResult 相同，text 为本次增量。"""

    provider: str
    model: str
    text: Optional[str]
    finish_reason: Optional[str] = None
    usage: Optional[Usage] = None
    sources: List[GroundingSource] = field(default_factory=list)
    raw: Optional[dict] = None
