from __future__ import annotations

import json

import pytest
from openai.types.chat import ChatCompletion

from computer_use.models.agent_schemas import CommandResult
from computer_use.services.desktop_service import DesktopSession

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake"


class FakeDesktopSession(DesktopSession):
    """Records every call instead of touching a real desktop."""

    def __init__(self, command_results: dict[str, CommandResult] | None = None) -> None:
        self.calls: list[tuple] = []
        self.kill_count = 0
        self.screenshot_count = 0
        self.command_results = command_results or {}
        self.fail_on: str | None = None

    def _record(self, *call) -> None:
        if self.fail_on == call[0]:
            raise RuntimeError(f"{call[0]} failed")
        self.calls.append(call)

    def stream_url(self) -> str:
        return "https://stream.example/desktop"

    def screenshot(self) -> bytes:
        self.screenshot_count += 1
        return PNG_BYTES

    def click(self, x, y, button="left"):
        self._record("click", x, y, button)

    def double_click(self, x, y):
        self._record("double_click", x, y)

    def move_mouse(self, x, y):
        self._record("move_mouse", x, y)

    def write(self, text):
        self._record("write", text)

    def hotkey(self, keys):
        self._record("hotkey", keys)

    def scroll(self, x, y, amount):
        self._record("scroll", x, y, amount)

    def run_command(self, command):
        self._record("run_command", command)
        return self.command_results.get(command, CommandResult(exit_code=0))

    def open(self, url):
        self._record("open", url)

    def kill(self):
        self.kill_count += 1


def make_completion(
    content: str | None = None,
    tool_calls: list[tuple[str, dict]] | None = None,
    finish_reason: str | None = None,
) -> ChatCompletion:
    """Build a ChatCompletion with optional (name, args) tool calls."""
    if finish_reason is None:
        finish_reason = "tool_calls" if tool_calls else "stop"
    message: dict = {"role": "assistant", "content": content}
    if tool_calls:
        message["tool_calls"] = [
            {
                "id": f"call_{i}",
                "type": "function",
                "function": {"name": name, "arguments": json.dumps(args)},
            }
            for i, (name, args) in enumerate(tool_calls)
        ]
    return ChatCompletion.model_validate(
        {
            "id": "chatcmpl-test",
            "object": "chat.completion",
            "created": 0,
            "model": "fake-model",
            "choices": [{"index": 0, "finish_reason": finish_reason, "message": message}],
        }
    )


class ScriptedLLM:
    """Returns canned completions in order, repeating the last one."""

    def __init__(self, responses: list) -> None:
        self.responses = responses
        self.requests: list[list[dict]] = []

    def generate_with_tools(self, messages: list[dict], tools: list[dict]):
        self.requests.append(list(messages))
        response = self.responses[min(len(self.requests), len(self.responses)) - 1]
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def fake_session() -> FakeDesktopSession:
    return FakeDesktopSession()


@pytest.fixture
def completion():
    return make_completion


@pytest.fixture
def scripted_llm():
    return ScriptedLLM
