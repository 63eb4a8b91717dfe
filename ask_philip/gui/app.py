import threading
import tkinter as tk
import webbrowser
from datetime import date
from tkinter import scrolledtext

from ask_philip.agents.philip_agent import PhilipAgent
from ask_philip.api.service import ask_philip, create_agent
from ask_philip.config.settings import settings
from ask_philip.domain.models import GenerateResult
from ask_philip.gui.presenter import is_error_content
from ask_philip.gui.session import ChatSession, PendingReply
from ask_philip.prompts import PHILIP_SWENSON_URL, PHILPAPERS_URL


SUGGESTIONS = [
    "Do we have free will?",
    "Is moral responsibility compatible with determinism?",
    "How does the Multiverse affect the problem of evil?",
    "What is the 'Ability to Do Otherwise'?",
]


class ChatWindow:
    def __init__(self, root, agent: PhilipAgent, stream_replies: bool = False):
        self.root = root
        self.root.title("Ask Philip")
        self.agent = agent
        self.session = ChatSession(agent)
        self.stream_replies = stream_replies
        self._stream_text = ""

        header = tk.Frame(root)
        header.pack(fill=tk.X, pady=(12, 4))
        title = tk.Label(header, text="Ask Philip", font=("Georgia", 32, "italic"), cursor="hand2")
        title.pack()
        title.bind("<Button-1>", lambda _e: self.on_reset())
        sub = tk.Frame(header)
        sub.pack()
        tk.Label(sub, text="Philosopher · Free Will Specialist ·").pack(side=tk.LEFT)
        self._mk_link(sub, "Research", PHILIP_SWENSON_URL)
        tk.Label(sub, text="·").pack(side=tk.LEFT)
        self._mk_link(sub, "PhilPapers", PHILPAPERS_URL)

        body = tk.Frame(root)
        body.pack(fill=tk.BOTH, expand=True, padx=12)
        self.chat = scrolledtext.ScrolledText(body, width=90, height=24, wrap=tk.WORD)
        self.chat.pack(fill=tk.BOTH, expand=True)
        self.chat.tag_config("user", foreground="#1a73e8")
        self.chat.tag_config("model", foreground="#3d3d29")
        self.chat.tag_config("system", foreground="#5f6368")
        self.chat.tag_config("error", foreground="#d93025")
        self.chat.tag_config("pending", foreground="#808066")

        self.suggestions = tk.Frame(body)
        for text in SUGGESTIONS:
            tk.Button(self.suggestions, text=text, anchor=tk.W, command=lambda t=text: self.on_suggestion(t)).pack(fill=tk.X)

        row = tk.Frame(root)
        row.pack(fill=tk.X, padx=12, pady=8)
        self.reset_btn = tk.Button(row, text="Reset", command=self.on_reset)
        self.reset_btn.pack(side=tk.LEFT)
        self.entry = tk.Entry(row)
        self.entry.pack(side=tk.LEFT, fill=tk.X, expand=True)
        self.entry.bind("<Return>", self.on_send_event)
        self.send_btn = tk.Button(row, text="Send", command=self.on_send)
        self.send_btn.pack(side=tk.LEFT)
        self.status = tk.Label(root, text="Powered by Gemini & Philip Swenson's Research")
        self.status.pack(fill=tk.X)
        tk.Label(
            root,
            text=f"© {date.today().year} Ask Philip. All philosophical inquiries welcomed.",
            foreground="#808066",
        ).pack(pady=(0, 8))
        self.render()

    def _mk_link(self, parent, label, url):
        link = tk.Label(parent, text=label, foreground="#556b2f", cursor="hand2", font=("TkDefaultFont", 9, "underline"))
        link.pack(side=tk.LEFT)
        link.bind("<Button-1>", lambda _e: webbrowser.open(url))
        return link

    def render(self):
        self.chat.config(state=tk.NORMAL)
        self.chat.delete(1.0, tk.END)
        if not self.session.messages and not self.session.awaiting_reply:
            self.chat.insert(tk.END, "Begin the Dialogue\n\n", "system")
            self.chat.insert(
                tk.END,
                "Inquire about moral responsibility, the nature of agency, "
                "or recent developments in the philosophy of free will.\n",
                "system",
            )
            self.suggestions.pack(fill=tk.X, pady=(4, 0))
        else:
            self.suggestions.pack_forget()
        for m in self.session.messages:
            if m.role == "user":
                self.chat.insert(tk.END, f"You: {m.content}\n\n", "user")
            else:
                tag = "error" if is_error_content(m.content) else "model"
                self.chat.insert(tk.END, f"Philip: {m.content}\n\n", tag)
        if self.session.awaiting_reply:
            if self._stream_text:
                self.chat.insert(tk.END, f"Philip: {self._stream_text}\n", "pending")
            else:
                self.chat.insert(tk.END, "Philip is contemplating...\n", "pending")
        self.chat.config(state=tk.DISABLED)
        self.chat.see(tk.END)

    def _set_busy(self, busy: bool):
        state = tk.DISABLED if busy else tk.NORMAL
        self.entry.config(state=state)
        self.send_btn.config(state=state)
        self.status.config(
            text="Philip is contemplating..." if busy else "Powered by Gemini & Philip Swenson's Research"
        )

    def on_suggestion(self, text):
        if self.session.awaiting_reply:
            return
        self.entry.delete(0, tk.END)
        self.entry.insert(0, text)
        self.session.set_input(text)
        self.entry.focus_set()

    def on_send(self):
        self.session.set_input(self.entry.get())
        pending = self.session.begin()
        if pending is None:
            return
        self.entry.delete(0, tk.END)
        self._stream_text = ""
        self._set_busy(True)
        self.render()
        stream = self.stream_replies

        def worker():
            try:
                if stream:
                    result = self._collect_stream(pending)
                else:
                    result = ask_philip(self.agent, pending.message, pending.history)
                self.root.after(0, lambda: self.on_response(pending, result, None))
            except Exception as e:
                self.root.after(0, lambda err=e: self.on_response(pending, None, err))

        threading.Thread(target=worker, daemon=True).start()

    def _collect_stream(self, pending: PendingReply) -> GenerateResult:
        # 工作线程中执行；增量通过 after 交回 Tk 线程
        parts = []
        last = None
        for chunk in self.agent.ask_stream(pending.message, pending.history):
            last = chunk
            if chunk.text:
                parts.append(chunk.text)
                self.root.after(0, lambda t=chunk.text: self.on_delta(pending, t))
        return GenerateResult(
            provider=getattr(last, "provider", self.agent.config.provider),
            model=getattr(last, "model", self.agent.config.model),
            text="".join(parts) or None,
            finish_reason=getattr(last, "finish_reason", None),
            usage=getattr(last, "usage", None),
        )

    def on_send_event(self, event):
        self.on_send()
        return "break"

    def on_delta(self, pending, text):
        if not self.session.is_current(pending) or not self.session.awaiting_reply:
            return
        self._stream_text += text
        self.render()

    def on_response(self, pending, result, err):
        if self.session.settle(pending, result=result, error=err) is None:
            return
        self._stream_text = ""
        self._set_busy(self.session.awaiting_reply)
        self.render()

    def on_reset(self):
        self.session.reset()
        self._stream_text = ""
        self.entry.config(state=tk.NORMAL)
        self.entry.delete(0, tk.END)
        self._set_busy(False)
        self.render()


def main():
    agent = create_agent(settings)
    root = tk.Tk()
    ChatWindow(root, agent, stream_replies=settings.stream_replies)
    root.mainloop()


if __name__ == "__main__":
    main()
