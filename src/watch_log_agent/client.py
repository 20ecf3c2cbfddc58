"""Chat REPL + agent runner. get_show_info runs in-process; replies are parsed into watch log rows."""

import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from openai import OpenAI, OpenAIError
from pydantic import ValidationError

from watch_log_agent.agent import ConversationState, is_exit_command
from watch_log_agent.config import ConfigError, Settings, load_settings
from watch_log_agent.extractor import ProcessResult, ProcessStatus, process_message
from watch_log_agent.models import ShowInfoArgs
from watch_log_agent.show_info import get_show_info
from watch_log_agent.watch_log import WatchLogError, ensure_log_file

SHOW_INFO_TOOL_NAME = "get_show_info"

# Tool definitions for the LLM (OpenAI function-calling format)
TOOLS = [
    {
        "type": "function",
        "function": {
            "name": SHOW_INFO_TOOL_NAME,
            "description": "Get name and service information for a specific show",
            "parameters": {
                "type": "object",
                "properties": {
                    "query_string": {
                        "type": "string",
                        "description": "Search string for the content, e.g. 'The Office', 'Bachelor', 'Agatha all along'",
                    },
                },
                "required": ["query_string"],
            },
        },
    },
]

PROMPT = "> "

logger = logging.getLogger(__name__)


@dataclass
class TurnResult:
    """Outcome of one user turn. state is the same object that was passed in, updated."""

    state: ConversationState
    reply: Optional[str] = None
    processed: Optional[ProcessResult] = None
    error: Optional[str] = None

    @property
    def aborted(self) -> bool:
        return self.error is not None


def _tool_call_to_dict(tc: Any) -> dict:
    return {
        "id": tc.id,
        "type": "function",
        "function": {"name": tc.function.name, "arguments": tc.function.arguments or ""},
    }


def _complete(client: OpenAI, model: str, state: ConversationState) -> Any:
    logger.debug("Calling LLM (model=%s, %d messages)", model, len(state.messages))
    resp = client.chat.completions.create(
        model=model,
        messages=list(state.messages),
        tools=TOOLS,
    )
    logger.debug("LLM responded: %s", resp)
    return resp.choices[0].message


def run_tool(name: str, raw_arguments: str, settings: Settings) -> str:
    """Execute a tool call and return the tool-result content.

    Raises ValidationError when get_show_info arguments cannot be parsed.
    """
    if name == SHOW_INFO_TOOL_NAME:
        args = ShowInfoArgs.model_validate_json(raw_arguments or "")
        info = get_show_info(args.query_string, token=settings.tvdb_token, base_url=settings.tvdb_base_url)
        return info.to_tool_content()
    return json.dumps({"error": f"Unknown tool: {name}"})


def run_turn(client: OpenAI, settings: Settings, state: ConversationState, user_line: str) -> TurnResult:
    """Send one user line, answer at most one tool call, then log the final reply."""
    state.add_user(user_line)
    try:
        msg = _complete(client, settings.model, state)
    except OpenAIError as e:
        logger.error("Chat completion failed: %s", e)
        return TurnResult(state, error=f"ChatCompletion error: {e}")

    if msg.tool_calls:
        tc = msg.tool_calls[0]
        if len(msg.tool_calls) > 1:
            logger.warning("Ignoring %d extra tool call(s) in one reply", len(msg.tool_calls) - 1)
        # Only the honored call is recorded, so every tool_call_id in history has a result.
        state.add_assistant(msg.content or "", [_tool_call_to_dict(tc)])
        logger.info("Tool call %s(%s)", tc.function.name, tc.function.arguments)
        try:
            result = run_tool(tc.function.name, tc.function.arguments, settings)
        except ValidationError as e:
            logger.error("Error parsing tool call arguments: %s", e)
            return TurnResult(state, error=f"Could not parse tool call arguments: {tc.function.arguments}")
        state.add_tool_result(tc.id, result)

        try:
            msg = _complete(client, settings.followup_model, state)
        except OpenAIError as e:
            logger.error("Follow-up chat completion failed: %s", e)
            return TurnResult(state, error=f"ChatCompletion error: {e}")
        if msg.tool_calls:
            logger.warning("Follow-up reply requested another tool call; ignoring it")

    reply = msg.content or ""
    processed = process_message(reply, settings.log_path)
    state.add_assistant(reply)
    return TurnResult(state, reply=reply, processed=processed)


def _report(result: TurnResult, log_path: Path) -> None:
    if result.aborted:
        print(result.error)
        return
    processed = result.processed
    if not processed.ok:
        print(f"Could not process response: {processed.error}")
        print(result.reply)
    elif processed.status is ProcessStatus.WRITTEN:
        print(f"Logged {processed.written} entries to {log_path}")
    else:
        print("Nothing to log.")


def _read_line() -> Optional[str]:
    print(PROMPT, end="", flush=True)
    line = sys.stdin.readline()
    if not line:
        return None
    return line.rstrip("\r\n")


def _setup_logging(level: str, log_file: Optional[Path] = None) -> None:
    """Console logging at level; optional DEBUG file log. The console handler keeps its own level."""
    console_level = getattr(logging, level.upper(), logging.WARNING)
    pkg_logger = logging.getLogger("watch_log_agent")
    for old in list(pkg_logger.handlers):
        pkg_logger.removeHandler(old)
        old.close()
    pkg_logger.propagate = False

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    pkg_logger.addHandler(console)
    pkg_logger.setLevel(console_level)
    if log_file is None:
        return
    handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    pkg_logger.addHandler(handler)
    pkg_logger.setLevel(logging.DEBUG)


def _make_llm_client(settings: Settings) -> OpenAI:
    return OpenAI(api_key=settings.openai_api_key)


def run_agent_loop(settings: Settings, client: Optional[OpenAI] = None) -> ConversationState:
    """Read lines until an exit word or end of input; each line is one turn."""
    client = client or _make_llm_client(settings)
    state = ConversationState.start()
    print("Conversation")
    print("---------------------")
    while True:
        line = _read_line()
        if line is None or is_exit_command(line):
            break
        if not line.strip():
            continue
        result = run_turn(client, settings, state, line)
        state = result.state
        _report(result, settings.log_path)
    print("Goodbye.")
    return state


def main() -> None:
    try:
        settings = load_settings()
    except ConfigError as e:
        print(e, file=sys.stderr)
        sys.exit(1)
    _setup_logging(settings.log_level, settings.log_file)
    try:
        ensure_log_file(settings.log_path)
    except WatchLogError as e:
        logger.error("Watch log setup failed: %s", e)
        print(e, file=sys.stderr)
        sys.exit(1)
    run_agent_loop(settings)


if __name__ == "__main__":
    main()
