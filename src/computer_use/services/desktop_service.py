"""Abstract remote desktop session interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from computer_use.models.agent_schemas import CommandResult, SessionNotInitializedError


class DesktopSession(ABC):
    @abstractmethod
    def stream_url(self) -> str: ...

    @abstractmethod
    def screenshot(self) -> bytes: ...

    @abstractmethod
    def click(self, x: float, y: float, button: str = "left") -> None: ...

    @abstractmethod
    def double_click(self, x: float, y: float) -> None: ...

    @abstractmethod
    def move_mouse(self, x: float, y: float) -> None: ...

    @abstractmethod
    def write(self, text: str) -> None: ...

    @abstractmethod
    def hotkey(self, keys: str) -> None: ...

    @abstractmethod
    def scroll(self, x: float, y: float, amount: int) -> None:
        """Scroll at (x, y). Negative amounts scroll up."""

    @abstractmethod
    def run_command(self, command: str) -> CommandResult: ...

    @abstractmethod
    def open(self, url: str) -> None: ...

    @abstractmethod
    def kill(self) -> None: ...


class SessionHandle:
    """Holds the active session for the duration of one agent run."""

    def __init__(self, session: DesktopSession | None = None) -> None:
        self.session = session

    def require(self) -> DesktopSession:
        if self.session is None:
            raise SessionNotInitializedError("Desktop not initialized")
        return self.session

    def clear(self) -> None:
        self.session = None
