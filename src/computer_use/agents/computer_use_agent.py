"""Screenshot -> model -> tool calls loop against a remote desktop."""

from __future__ import annotations

import base64
import json
import logging
from typing import Any, Callable, Iterable, Protocol

from computer_use.models.agent_schemas import (
    AgentResult,
    AgentStatus,
    IterationRecord,
    ModelTurn,
    ToolCallRecord,
    ToolValidationError,
)
from computer_use.prompts.prompt_layer import render_prompt
from computer_use.services.desktop_service import DesktopSession, SessionHandle
from computer_use.services.llm_service import LLMService
from computer_use.tools import ToolRegistry
from computer_use.tools.desktop_tools import SCREENSHOT_MIME_TYPE, create_desktop_tools

logger = logging.getLogger(__name__)

DEFAULT_COMPLETION_PHRASES = ("task completed", "done", "finished")


class StepCallback(Protocol):
    def on_session_start(self, stream_url: str, task: str) -> None: ...
    def on_step_start(self, step: int, max_steps: int) -> None: ...
    def on_thinking(self, text: str) -> None: ...
    def on_tool_call(self, name: str, args: dict[str, Any]) -> None: ...
    def on_tool_result(self, name: str, result: dict[str, Any]) -> None: ...
    def on_finish(self, result: AgentResult) -> None: ...
    def on_error(self, error: BaseException) -> None: ...
    def on_cleanup(self) -> None: ...


class NullCallback:
    def on_session_start(self, stream_url: str, task: str) -> None: ...
    def on_step_start(self, step: int, max_steps: int) -> None: ...
    def on_thinking(self, text: str) -> None: ...
    def on_tool_call(self, name: str, args: dict[str, Any]) -> None: ...
    def on_tool_result(self, name: str, result: dict[str, Any]) -> None: ...
    def on_finish(self, result: AgentResult) -> None: ...
    def on_error(self, error: BaseException) -> None: ...
    def on_cleanup(self) -> None: ...


def matches_completion(text: str, phrases: Iterable[str]) -> bool:
    lowered = text.lower()
    return any(phrase.lower() in lowered for phrase in phrases)


def _image_part(image: bytes, mime_type: str = SCREENSHOT_MIME_TYPE) -> dict[str, Any]:
    encoded = base64.b64encode(image).decode("utf-8")
    return {"type": "image_url", "image_url": {"url": f"data:{mime_type};base64,{encoded}"}}


class ComputerUseAgent:
    def __init__(
        self,
        llm: LLMService,
        session_factory: Callable[[], DesktopSession],
        max_iterations: int = 20,
        max_sub_steps: int = 5,
        completion_phrases: Iterable[str] = DEFAULT_COMPLETION_PHRASES,
        screen_size: tuple[int, int] = (1920, 1080),
        callback: StepCallback | None = None,
    ) -> None:
        self.llm = llm
        self.session_factory = session_factory
        self.max_iterations = max_iterations
        self.max_sub_steps = max_sub_steps
        self.completion_phrases = tuple(completion_phrases)
        self.screen_size = screen_size
        self.cb: StepCallback = callback or NullCallback()

    def run(self, task: str) -> AgentResult:
        handle = SessionHandle(self.session_factory())
        registry = ToolRegistry()
        registry.register_many(create_desktop_tools(handle))

        failed = False
        try:
            self.cb.on_session_start(handle.require().stream_url(), task)
            result = self._loop(task, handle, registry)
        except BaseException as e:
            failed = True
            logger.error("Agent run failed: %s", e)
            self.cb.on_error(e)
            raise
        finally:
            self._cleanup(handle, keep_original_error=failed)

        self.cb.on_finish(result)
        return result

    def _cleanup(self, handle: SessionHandle, keep_original_error: bool) -> None:
        session = handle.session
        handle.clear()
        try:
            if session is not None:
                logger.info("Killing desktop session")
                session.kill()
        except Exception as e:
            logger.error("Failed to kill desktop session: %s", e)
            # The run's own error is the one the caller needs to see.
            if not keep_original_error:
                raise
        finally:
            self.cb.on_cleanup()

    def _loop(self, task: str, handle: SessionHandle, registry: ToolRegistry) -> AgentResult:
        trace: list[IterationRecord] = []
        total_tool_calls = 0
        last_output = ""

        for iteration in range(1, self.max_iterations + 1):
            self.cb.on_step_start(iteration, self.max_iterations)

            screenshot = handle.require().screenshot()
            turn = self._consult(task, screenshot, registry)
            total_tool_calls += len(turn.tool_calls)
            if turn.text:
                last_output = turn.text
            trace.append(
                IterationRecord(
                    iteration=iteration,
                    text=turn.text,
                    tool_calls=turn.tool_calls,
                    finish_reason=turn.finish_reason,
                )
            )

            if matches_completion(turn.text, self.completion_phrases):
                logger.info("Completion phrase found at iteration %d", iteration)
                return self._result(AgentStatus.DONE, last_output, iteration, total_tool_calls, trace)
            if turn.finish_reason == "stop" and not turn.pending_tool_calls:
                logger.info("Model stopped without tool calls at iteration %d", iteration)
                return self._result(AgentStatus.DONE, last_output, iteration, total_tool_calls, trace)

        logger.warning("Agent hit max iterations (%d)", self.max_iterations)
        return self._result(
            AgentStatus.MAX_ITERATIONS, last_output, self.max_iterations, total_tool_calls, trace
        )

    def _consult(self, task: str, screenshot: bytes, registry: ToolRegistry) -> ModelTurn:
        """Ask the model for a decision and dispatch its tool calls locally.

        Makes at most ``max_sub_steps`` model requests, feeding tool results
        back after each one.
        """
        width, height = self.screen_size
        messages: list[dict] = [
            {"role": "system", "content": render_prompt("computer_use_system", width=width, height=height)},
            {
                "role": "user",
                "content": [{"type": "text", "text": task}, _image_part(screenshot)],
            },
        ]
        tools = registry.to_openai_tools()
        turn = ModelTurn()
        texts: list[str] = []

        for _ in range(self.max_sub_steps):
            response = self.llm.generate_with_tools(messages, tools)
            choice = response.choices[0]
            message = choice.message
            messages.append(message.model_dump(exclude_none=True))
            turn.finish_reason = choice.finish_reason

            if message.content:
                texts.append(message.content)
                self.cb.on_thinking(message.content)

            calls = [self._parse_call(tc) for tc in message.tool_calls or []]
            turn.pending_tool_calls = calls
            if not calls:
                break

            images: list[dict[str, Any]] = []
            for call in calls:
                self.cb.on_tool_call(call.name, call.arguments)
                result = registry.execute(call.name, call.arguments)
                turn.tool_calls.append(call)
                self.cb.on_tool_result(call.name, result)
                messages.append(self._tool_message(call, result))
                if result.get("type") == "image":
                    images.append(result)
            # Every tool reply must directly follow the assistant message.
            if images:
                messages.append(self._image_message(images))

        turn.text = "\n".join(texts)
        return turn

    @staticmethod
    def _parse_call(tool_call: Any) -> ToolCallRecord:
        name = tool_call.function.name
        raw = tool_call.function.arguments or "{}"
        try:
            args = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ToolValidationError(f"Arguments for '{name}' are not valid JSON: {raw!r}") from e
        if not isinstance(args, dict):
            raise ToolValidationError(f"Arguments for '{name}' must be an object, got {raw!r}")
        return ToolCallRecord(id=tool_call.id, name=name, arguments=args)

    @staticmethod
    def _tool_message(call: ToolCallRecord, result: dict[str, Any]) -> dict:
        if result.get("type") == "image":
            # Tool messages are text-only; the image follows as a user turn.
            content = "Screenshot captured."
        else:
            content = json.dumps(result)
        return {"role": "tool", "tool_call_id": call.id, "content": content}

    @staticmethod
    def _image_message(images: list[dict[str, Any]]) -> dict:
        parts: list[dict[str, Any]] = [{"type": "text", "text": "Screenshot after your last action:"}]
        for image in images:
            parts.append(_image_part(image["image"], image.get("mime_type", SCREENSHOT_MIME_TYPE)))
        return {"role": "user", "content": parts}

    @staticmethod
    def _result(
        status: AgentStatus,
        output: str,
        iterations: int,
        tool_calls: int,
        trace: list[IterationRecord],
    ) -> AgentResult:
        return AgentResult(
            status=status,
            output=output,
            iterations=iterations,
            tool_calls_made=tool_calls,
            trace=trace,
        )
