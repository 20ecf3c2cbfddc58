"""Conversation state, exit words, and the system prompt. Used by the client that runs the LLM loop."""

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

EXIT_COMMANDS = frozenset({"exit", "quit", "q", "bye"})


def is_exit_command(line: str) -> bool:
    """Exit words are matched exactly (case-sensitive)."""
    return line in EXIT_COMMANDS


def current_date_context(today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"Today is {today.isoformat()} ({today.strftime('%A')}).\n\n"


def flow_instructions() -> str:
    """Instructions for the LLM: resolve shows with get_show_info, answer with a JSON array of log rows."""
    return """You are a TV watch-log assistant. The user tells you what they watched, when, and for how long. Follow this flow:

1. **Identify** the show from the user's message. If you are unsure of the exact title or which service it is on, call get_show_info with a short search string (e.g. "The Office", "Bachelor", "Agatha all along"). The result tells you the canonical title and the network/service. If the result is blank, fall back to what the user said.

2. **Resolve the day** as an integer days_offset relative to today: 0 for today, -1 for yesterday, -2 for "2 days ago", and so on. Never give an absolute date.

3. **Watch time** is an integer number of minutes. Convert hours to minutes ("an hour and a half" = 90).

4. **Answer** with ONLY a JSON array, one object per viewing session, with exactly these keys:
   [{"days_offset": -2, "service": "Netflix", "title": "The Office", "watch_time": 30}]
   Do not add any other text. Do not use commas inside service or title values. If the message contains nothing to log, answer [].

If the user's message is ambiguous and you cannot produce a row, answer [] and the user will rephrase."""


def system_prompt(today: Optional[date] = None) -> str:
    return current_date_context(today) + flow_instructions()


@dataclass
class ConversationState:
    """Ordered chat history for the session, seeded with the system prompt."""

    messages: list[dict] = field(default_factory=list)

    @classmethod
    def start(cls, today: Optional[date] = None) -> "ConversationState":
        return cls(messages=[{"role": "system", "content": system_prompt(today)}])

    def add_user(self, content: str) -> None:
        self.messages.append({"role": "user", "content": content})

    def add_assistant(self, content: str, tool_calls: Optional[list[dict]] = None) -> None:
        msg: dict = {"role": "assistant", "content": content}
        if tool_calls:
            msg["tool_calls"] = tool_calls
        self.messages.append(msg)

    def add_tool_result(self, tool_call_id: str, content: str) -> None:
        self.messages.append({"role": "tool", "tool_call_id": tool_call_id, "content": content})
