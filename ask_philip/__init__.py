"""Ask Philip 顶层包。

该包提供一个以哲学家 Philip Swenson 为 persona 的单窗口对话应用，
包括配置加载、领域模型、Gemini Provider 适配、对话编排、
会话状态管理与 tkinter 界面等能力。
"""

from ask_philip.api.service import ask_philip, create_agent

__all__ = ["ask_philip", "create_agent"]
