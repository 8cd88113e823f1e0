import logging

import typer
from rich.console import Console
from rich.markup import escape

app = typer.Typer(
    name="computer-use",
    help="Drive an E2B virtual desktop with a tool-calling multimodal model.",
    add_completion=False,
)
console = Console()


def _build_agent():
    """Create a ComputerUseAgent wired to E2B and the configured model."""
    from computer_use.agents.computer_use_agent import ComputerUseAgent
    from computer_use.agents.console_callback import ConsoleCallback
    from computer_use.config import get_model_config, settings
    from computer_use.services.desktop_service import SessionHandle
    from computer_use.services.e2b_service import E2BDesktopSession
    from computer_use.services.llm_service import LLMService
    from computer_use.tools import ToolRegistry
    from computer_use.tools.desktop_tools import create_desktop_tools

    callback = ConsoleCallback(console)
    preview = ToolRegistry()
    preview.register_many(create_desktop_tools(SessionHandle()))
    callback.print_tools(preview)

    llm = LLMService(get_model_config("computer_use"))
    return ComputerUseAgent(
        llm=llm,
        session_factory=lambda: E2BDesktopSession.create(settings),
        max_iterations=settings.max_iterations,
        max_sub_steps=settings.max_sub_steps,
        completion_phrases=settings.completion_phrases,
        screen_size=(settings.screen_width, settings.screen_height),
        callback=callback,
    )


@app.command()
def run(
    task: str = typer.Argument("", help="Task for the agent, in natural language"),
) -> None:
    """Run a computer-use task on a fresh E2B desktop sandbox."""
    from computer_use.config import settings

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(name)s | %(levelname)s | %(message)s",
    )
    logger = logging.getLogger("computer_use.cli")

    task = task or settings.default_task
    console.print("\n🖥️  Starting E2B Desktop Sandbox...\n")

    try:
        agent = _build_agent()
        agent.run(task)
    except Exception as e:
        logger.debug("Agent run failed", exc_info=True)
        console.print(f"[red]Failed to run agent: {escape(str(e))}[/red]")
        raise typer.Exit(1)
