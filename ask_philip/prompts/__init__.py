"""系统提示词与 grounding 上下文。

按语言(locale) 从 prompts/<locale> 目录读取 persona 的 system prompt，
并提供首轮对话使用的一次性上下文前缀。
"""

from functools import lru_cache
from pathlib import Path


PROMPTS_DIR = Path(__file__).resolve().parent

PHILIP_SWENSON_URL = "https://sites.google.com/corp/site/philipjswenson/home"
PHILPAPERS_URL = "https://philpapers.org/s/Philip%20Swenson"

CONTEXT_PREFIX = f"[Context: {PHILIP_SWENSON_URL}, {PHILPAPERS_URL}]"


@lru_cache(maxsize=None)
def load_system_prompt(persona: str = "philip", locale: str = "en") -> str:
    """根据 persona 和语言加载系统提示词文本（结果会缓存）。"""

    fname = PROMPTS_DIR / locale / f"{persona}_system.md"
    return fname.read_text(encoding="utf-8").strip()


def with_context_prefix(message: str) -> str:
    """在首条用户消息前加上研究主页与 PhilPapers 链接，方便模型自行检索。"""

    return f"{CONTEXT_PREFIX} {message}"
