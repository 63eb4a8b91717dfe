"""把编排层的失败转换为以 Philip 口吻写入对话记录的消息。"""

from ask_philip.domain.exceptions import RateLimitError


EMPTY_REPLY_FALLBACK = "I'm sorry, I couldn't formulate a response at this moment."
GENERIC_ERROR_FALLBACK = "I apologize, but I encountered an error while contemplating your question."
RATE_LIMIT_NOTICE = (
    "We're thinking a bit too fast for the free tier! Please wait about 30-60 seconds "
    "and try your question again. Philip's thoughts take a moment to process."
)
NOTE_MARKER = "**Note:**"


def is_rate_limited(err: BaseException) -> bool:
    # 结构化的 kind 优先；文本匹配只在没有状态码信息时兜底
    if isinstance(err, RateLimitError):
        return True
    text = error_text(err)
    return "429" in text or "quota" in text


def error_text(err: BaseException) -> str:
    return getattr(err, "message", None) or str(err) or ""


def format_error(err: BaseException) -> str:
    if is_rate_limited(err):
        text = RATE_LIMIT_NOTICE
    else:
        text = error_text(err) or GENERIC_ERROR_FALLBACK
    return f"{NOTE_MARKER} {text}"


def is_error_content(content: str) -> bool:
    return content.startswith(NOTE_MARKER)
