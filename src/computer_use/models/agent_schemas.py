"""Models for the computer-use loop."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class ToolCallRecord(BaseModel):
    id: str
    name: str
    arguments: dict


class AgentStatus(str, Enum):
    RUNNING = "running"
    DONE = "done"
    MAX_ITERATIONS = "max_iterations"
    ERROR = "error"


class ModelTurn(BaseModel):
    """Everything the model said and did during one iteration."""

    text: str = ""
    tool_calls: list[ToolCallRecord] = []
    pending_tool_calls: list[ToolCallRecord] = []
    finish_reason: str | None = None


class IterationRecord(BaseModel):
    iteration: int
    text: str
    tool_calls: list[ToolCallRecord] = []
    finish_reason: str | None = None


class AgentResult(BaseModel):
    status: AgentStatus
    output: str
    iterations: int
    tool_calls_made: int
    trace: list[IterationRecord] = []


class CommandResult(BaseModel):
    exit_code: int
    stdout: str = ""
    stderr: str = ""

    @property
    def success(self) -> bool:
        return self.exit_code == 0


class AgentError(Exception):
    """Base class for errors raised by the agent itself."""


class SessionNotInitializedError(AgentError):
    """Raised when a tool runs before a desktop session exists."""


class ToolValidationError(AgentError):
    """Raised when tool arguments do not match the tool's schema."""


class UnknownToolError(AgentError):
    """Raised when the model asks for a tool that is not registered."""
