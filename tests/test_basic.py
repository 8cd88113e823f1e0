from computer_use.config import Settings
from computer_use.models.agent_schemas import (
    AgentResult,
    AgentStatus,
    CommandResult,
    IterationRecord,
    ToolCallRecord,
)
from computer_use.services.desktop_service import SessionHandle


def test_settings_defaults():
    s = Settings(_env_file=None, e2b_api_key="e", llm_api_key="k")
    assert s.max_iterations == 20
    assert s.max_sub_steps == 5
    assert s.completion_phrases == ["task completed", "done", "finished"]
    assert (s.screen_width, s.screen_height, s.screen_dpi) == (1920, 1080, 96)
    assert s.llm_max_attempts == 1
    assert "news.ycombinator.com" in s.default_task


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("MAX_ITERATIONS", "7")
    monkeypatch.setenv("COMPLETION_PHRASES", '["all good"]')
    s = Settings(_env_file=None)
    assert s.max_iterations == 7
    assert s.completion_phrases == ["all good"]


def test_command_result_success():
    assert CommandResult(exit_code=0).success
    assert not CommandResult(exit_code=127, stderr="not found").success


def test_agent_result_model():
    call = ToolCallRecord(id="c1", name="click", arguments={"x": 1, "y": 2})
    result = AgentResult(
        status=AgentStatus.DONE,
        output="done",
        iterations=1,
        tool_calls_made=1,
        trace=[IterationRecord(iteration=1, text="done", tool_calls=[call], finish_reason="stop")],
    )
    assert result.status == AgentStatus.DONE
    assert result.trace[0].tool_calls[0].name == "click"


def test_session_handle(fake_session):
    handle = SessionHandle(fake_session)
    assert handle.require() is fake_session
    handle.clear()
    assert handle.session is None
