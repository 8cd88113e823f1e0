from __future__ import annotations

import logging

from e2b import CommandExitException
from e2b_desktop import Sandbox

from computer_use.config import Settings, settings
from computer_use.models.agent_schemas import CommandResult
from computer_use.services.desktop_service import DesktopSession

logger = logging.getLogger(__name__)


def _px(value: float) -> int:
    # xdotool takes whole pixels; no bounds checking against the screen size.
    return int(round(value))


class E2BDesktopSession(DesktopSession):
    def __init__(self, sandbox: Sandbox) -> None:
        self.sandbox = sandbox
        self._stream_started = False

    @classmethod
    def create(cls, config: Settings | None = None) -> E2BDesktopSession:
        config = config or settings
        resolution = (config.screen_width, config.screen_height)
        logger.info("Creating E2B desktop sandbox %dx%d @ %d dpi", *resolution, config.screen_dpi)
        sandbox = Sandbox.create(
            resolution=resolution,
            dpi=config.screen_dpi,
            api_key=config.e2b_api_key or None,
        )
        logger.info("Sandbox ready: %s", sandbox.sandbox_id)
        return cls(sandbox)

    def stream_url(self) -> str:
        if not self._stream_started:
            self.sandbox.stream.start()
            self._stream_started = True
        return self.sandbox.stream.get_url()

    def screenshot(self) -> bytes:
        return bytes(self.sandbox.screenshot())

    def click(self, x: float, y: float, button: str = "left") -> None:
        clicks = {
            "left": self.sandbox.left_click,
            "right": self.sandbox.right_click,
            "middle": self.sandbox.middle_click,
        }
        clicks[button](_px(x), _px(y))

    def double_click(self, x: float, y: float) -> None:
        self.sandbox.double_click(_px(x), _px(y))

    def move_mouse(self, x: float, y: float) -> None:
        self.sandbox.move_mouse(_px(x), _px(y))

    def write(self, text: str) -> None:
        self.sandbox.write(text)

    def hotkey(self, keys: str) -> None:
        parts = [k.strip() for k in keys.split("+") if k.strip()]
        self.sandbox.press(parts if len(parts) > 1 else keys.strip())

    def scroll(self, x: float, y: float, amount: int) -> None:
        self.sandbox.move_mouse(_px(x), _px(y))
        direction = "up" if amount < 0 else "down"
        self.sandbox.scroll(direction=direction, amount=abs(amount))

    def run_command(self, command: str) -> CommandResult:
        logger.debug("Running command in sandbox: %s", command)
        try:
            result = self.sandbox.commands.run(command)
        except CommandExitException as e:
            # Non-zero exit is an ordinary result, not a failure of the tool.
            return CommandResult(exit_code=e.exit_code, stdout=e.stdout or "", stderr=e.stderr or "")
        return CommandResult(
            exit_code=result.exit_code,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
        )

    def open(self, url: str) -> None:
        self.sandbox.open(url)

    def kill(self) -> None:
        if self._stream_started:
            try:
                self.sandbox.stream.stop()
            except Exception as e:
                logger.warning("Failed to stop stream: %s", e)
        self.sandbox.kill()
