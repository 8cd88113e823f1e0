"""Mouse, keyboard, shell and browser tools backed by a DesktopSession."""

from __future__ import annotations

from computer_use.models.tool_args import (
    ClickArgs,
    HotkeyArgs,
    NoArgs,
    OpenUrlArgs,
    PointArgs,
    RunCommandArgs,
    ScrollArgs,
    TypeArgs,
)
from computer_use.services.desktop_service import SessionHandle
from computer_use.tools import Tool

SCREENSHOT_MIME_TYPE = "image/png"


def create_desktop_tools(handle: SessionHandle) -> list[Tool]:
    def screenshot(args: NoArgs) -> dict:
        image = handle.require().screenshot()
        return {"type": "image", "image": image, "mime_type": SCREENSHOT_MIME_TYPE}

    def click(args: ClickArgs) -> dict:
        handle.require().click(args.x, args.y, args.button)
        return {"success": True, "action": f"Clicked {args.button} at ({args.x:g}, {args.y:g})"}

    def double_click(args: PointArgs) -> dict:
        handle.require().double_click(args.x, args.y)
        return {"success": True, "action": f"Double-clicked at ({args.x:g}, {args.y:g})"}

    def type_text(args: TypeArgs) -> dict:
        handle.require().write(args.text)
        return {"success": True, "action": f'Typed: "{args.text}"'}

    def hotkey(args: HotkeyArgs) -> dict:
        handle.require().hotkey(args.keys)
        return {"success": True, "action": f"Pressed hotkey: {args.keys}"}

    def scroll(args: ScrollArgs) -> dict:
        session = handle.require()
        amount = -args.amount if args.direction == "up" else args.amount
        session.scroll(args.x, args.y, amount)
        return {
            "success": True,
            "action": f"Scrolled {args.direction} {args.amount} steps at ({args.x:g}, {args.y:g})",
        }

    def move_mouse(args: PointArgs) -> dict:
        handle.require().move_mouse(args.x, args.y)
        return {"success": True, "action": f"Moved mouse to ({args.x:g}, {args.y:g})"}

    def run_command(args: RunCommandArgs) -> dict:
        # Unrestricted: the sandbox VM is the isolation boundary.
        result = handle.require().run_command(args.command)
        return {
            "success": result.success,
            "stdout": result.stdout,
            "stderr": result.stderr,
            "exitCode": result.exit_code,
        }

    def open_url(args: OpenUrlArgs) -> dict:
        handle.require().open(args.url)
        return {"success": True, "action": f"Opened URL: {args.url}"}

    return [
        Tool(
            name="screenshot",
            description="Take a screenshot of the current desktop state",
            args_model=NoArgs,
            execute=screenshot,
        ),
        Tool(
            name="click",
            description="Click at specific coordinates on the screen",
            args_model=ClickArgs,
            execute=click,
        ),
        Tool(
            name="doubleClick",
            description="Double-click at specific coordinates on the screen",
            args_model=PointArgs,
            execute=double_click,
        ),
        Tool(
            name="type",
            description="Type text using the keyboard",
            args_model=TypeArgs,
            execute=type_text,
        ),
        Tool(
            name="hotkey",
            description="Press a keyboard shortcut (e.g., 'ctrl+c', 'alt+tab', 'enter')",
            args_model=HotkeyArgs,
            execute=hotkey,
        ),
        Tool(
            name="scroll",
            description="Scroll at specific coordinates",
            args_model=ScrollArgs,
            execute=scroll,
        ),
        Tool(
            name="moveMouse",
            description="Move mouse cursor to specific coordinates",
            args_model=PointArgs,
            execute=move_mouse,
        ),
        Tool(
            name="runCommand",
            description="Run a shell command in the desktop environment",
            args_model=RunCommandArgs,
            execute=run_command,
        ),
        Tool(
            name="openUrl",
            description="Open a URL in the default browser",
            args_model=OpenUrlArgs,
            execute=open_url,
        ),
    ]
