"""Tests for the rich console callback."""

from __future__ import annotations

import io

from rich.console import Console

from computer_use.agents.computer_use_agent import ComputerUseAgent
from computer_use.agents.console_callback import ConsoleCallback
from computer_use.models.agent_schemas import AgentResult, AgentStatus

MARKUP_TEXT = "see [/etc] for [bold]config[/bold]"


def _callback() -> tuple[ConsoleCallback, io.StringIO]:
    out = io.StringIO()
    return ConsoleCallback(Console(file=out, width=200, color_system=None)), out


def test_markup_in_tool_arguments_is_printed_literally():
    cb, out = _callback()
    cb.on_tool_call("type", {"text": MARKUP_TEXT})
    assert MARKUP_TEXT in out.getvalue()


def test_markup_in_assistant_text_and_task():
    cb, out = _callback()
    cb.on_session_start("https://stream.example/[x]", MARKUP_TEXT)
    cb.on_thinking(MARKUP_TEXT)
    text = out.getvalue()
    assert "https://stream.example/[x]" in text
    assert text.count(MARKUP_TEXT) == 2


def test_markup_in_result_and_error():
    cb, out = _callback()
    cb.on_tool_result("runCommand", {"success": False, "stdout": "", "stderr": "[/oops]", "exitCode": 1})
    cb.on_finish(AgentResult(status=AgentStatus.DONE, output=MARKUP_TEXT, iterations=1, tool_calls_made=0))
    cb.on_error(RuntimeError("[/boom]"))
    text = out.getvalue()
    assert "[/oops]" in text
    assert MARKUP_TEXT in text
    assert "[/boom]" in text


def test_run_with_markup_like_action(fake_session, completion, scripted_llm):
    cb, out = _callback()
    llm = scripted_llm([
        completion(tool_calls=[("type", {"text": "see [/etc] for config"})]),
        completion(content="done"),
    ])
    agent = ComputerUseAgent(llm=llm, session_factory=lambda: fake_session, callback=cb)
    result = agent.run("type a path")

    assert result.status == AgentStatus.DONE
    assert fake_session.calls == [("write", "see [/etc] for config")]
    assert "see [/etc] for config" in out.getvalue()
