"""Minimal demonstration of a single question to Philip."""

from ask_philip import ask_philip, create_agent

if __name__ == "__main__":
    question = "Is moral responsibility compatible with determinism?"
    agent = create_agent()
    reply = ask_philip(agent, question)
    print("User:", question)
    print("Philip:", reply.text or "(no reply)")
    for source in reply.sources:
        print(" -", source.title or source.uri, source.uri)
