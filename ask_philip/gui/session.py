"""会话状态与提交流程。

ChatSession 持有当前会话的全部可变状态：消息列表、输入框内容以及
“等待回复”标志，并保证同一时刻最多只有一个请求在途。

提交分为两步，方便 GUI 在事件循环里把网络调用放到工作线程：

- begin(text): 同步部分。追加用户消息、清空输入、置位等待标志，
  返回带历史快照的 PendingReply。
- settle(pending, result, error): 在主线程中落地结果，恰好追加一条 model 消息，
  并无条件清除等待标志。

submit(text) 就是 begin + agent.ask + settle 的同步版本。

reset() 会递增 generation，之后到达的旧请求结果会被直接丢弃。
"""

from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence, Tuple

from ask_philip.domain.models import GenerateResult, Message, Turn, history_to_turns
from ask_philip.gui.presenter import EMPTY_REPLY_FALLBACK, format_error
from ask_philip.infrastructure.logging.logger import logger


class Asker(Protocol):
    def ask(self, message: str, history: Sequence[Turn] = ()) -> GenerateResult:
        ...


@dataclass(frozen=True)
class PendingReply:
    """一次在途请求：所属 generation、发送的消息以及发送前的历史快照。"""

    generation: int
    message: str
    history: Tuple[Turn, ...]


class ChatSession:
    def __init__(self, agent: Asker):
        self._agent = agent
        self.messages: List[Message] = []
        self.input_buffer = ""
        self.awaiting_reply = False
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    def history(self) -> List[Turn]:
        return history_to_turns(self.messages)

    def set_input(self, text: str) -> None:
        self.input_buffer = text

    def begin(self, text: Optional[str] = None) -> Optional[PendingReply]:
        """开始一次提交；输入为空或已有请求在途时返回 None 且不改变任何状态。"""

        raw = self.input_buffer if text is None else text
        message = (raw or "").strip()
        if not message or self.awaiting_reply:
            return None
        history = tuple(self.history())
        self.messages.append(Message(role="user", content=message))
        self.input_buffer = ""
        self.awaiting_reply = True
        return PendingReply(generation=self._generation, message=message, history=history)

    def is_current(self, pending: PendingReply) -> bool:
        return pending.generation == self._generation

    def settle(
        self,
        pending: PendingReply,
        result: Optional[GenerateResult] = None,
        error: Optional[BaseException] = None,
    ) -> Optional[Message]:
        """落地一次请求的结果，返回追加的 model 消息；过期请求返回 None。"""

        if not self.is_current(pending):
            logger.info(
                "Discarded reply from a reset conversation",
                extra={"extra": {"generation": pending.generation, "current": self._generation}},
            )
            return None
        try:
            if error is not None:
                content = format_error(error)
            else:
                content = getattr(result, "text", None) or EMPTY_REPLY_FALLBACK
            reply = Message(role="model", content=content)
            self.messages.append(reply)
            return reply
        finally:
            self.awaiting_reply = False

    def submit(self, text: Optional[str] = None) -> Optional[Message]:
        pending = self.begin(text)
        if pending is None:
            return None
        try:
            result = self._agent.ask(pending.message, pending.history)
        except Exception as e:
            return self.settle(pending, error=e)
        else:
            return self.settle(pending, result=result)
        finally:
            if self.is_current(pending):
                self.awaiting_reply = False

    def reset(self) -> None:
        self.messages = []
        self.input_buffer = ""
        self.awaiting_reply = False
        self._generation += 1
