"""Tool plugin system for the computer-use loop."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from pydantic import BaseModel, ValidationError

from computer_use.models.agent_schemas import ToolValidationError, UnknownToolError

logger = logging.getLogger(__name__)


@dataclass
class Tool:
    name: str
    description: str
    args_model: type[BaseModel]
    execute: Callable[[Any], dict[str, Any]]

    @property
    def parameters(self) -> dict[str, Any]:
        return self.args_model.model_json_schema()


class ToolRegistry:
    def __init__(self) -> None:
        self._tools: dict[str, Tool] = {}

    def register(self, tool: Tool) -> None:
        self._tools[tool.name] = tool

    def register_many(self, tools: list[Tool]) -> None:
        for tool in tools:
            self.register(tool)

    def get(self, name: str) -> Tool:
        return self._tools[name]

    def list_all(self) -> list[Tool]:
        return list(self._tools.values())

    def to_openai_tools(self) -> list[dict[str, Any]]:
        result = []
        for tool in self._tools.values():
            result.append(
                {
                    "type": "function",
                    "function": {
                        "name": tool.name,
                        "description": tool.description,
                        "parameters": tool.parameters,
                    },
                }
            )
        return result

    def execute(self, name: str, args: dict[str, Any]) -> dict[str, Any]:
        """Validate ``args`` against the tool's model, then run it.

        Errors are not turned into tool results: they end the run.
        """
        tool = self._tools.get(name)
        if tool is None:
            raise UnknownToolError(f"Unknown tool '{name}'")
        try:
            parsed = tool.args_model.model_validate(args)
        except ValidationError as e:
            raise ToolValidationError(f"Invalid arguments for '{name}': {e}") from e
        try:
            return tool.execute(parsed)
        except Exception as e:
            logger.error("Tool '%s' failed: %s", name, e)
            raise
