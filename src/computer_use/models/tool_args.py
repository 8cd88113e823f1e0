"""Argument models for the desktop tools.

The JSON schema of each model is what the LLM sees as the tool's parameters.
"""

from __future__ import annotations

from typing import Literal

from pydantic import AnyUrl, BaseModel, Field, TypeAdapter, field_validator

_url_adapter = TypeAdapter(AnyUrl)


class NoArgs(BaseModel):
    pass


class PointArgs(BaseModel):
    x: float = Field(description="X coordinate on the screen")
    y: float = Field(description="Y coordinate on the screen")


class ClickArgs(PointArgs):
    button: Literal["left", "right", "middle"] = Field(
        default="left", description="Mouse button to click"
    )


class TypeArgs(BaseModel):
    text: str = Field(description="Text to type")


class HotkeyArgs(BaseModel):
    keys: str = Field(description="Keyboard shortcut to press (e.g., 'ctrl+c', 'enter')")


class ScrollArgs(PointArgs):
    direction: Literal["up", "down"] = Field(description="Scroll direction")
    amount: int = Field(default=3, description="Number of scroll steps")


class RunCommandArgs(BaseModel):
    command: str = Field(description="Shell command to execute")


class OpenUrlArgs(BaseModel):
    url: str = Field(description="URL to open", json_schema_extra={"format": "uri"})

    @field_validator("url")
    @classmethod
    def _well_formed(cls, value: str) -> str:
        # AnyUrl normalises (e.g. adds a trailing slash); keep what the model sent.
        _url_adapter.validate_python(value)
        return value
