import os
from typing import Iterable, List

from prompt_toolkit import PromptSession
from prompt_toolkit.history import FileHistory
from prompt_toolkit.styles import Style
from rich.console import Console
from rich.live import Live
from rich.markdown import Markdown
from rich.markup import escape
from rich.rule import Rule
from rich.spinner import Spinner
from rich.table import Table

from .banner import Banner


DEFAULT_HISTORY_FILE = os.path.join("~", ".fieri_history")
CODE_THEME = "monokai"


def history_path(path: str = None) -> str:
    """Resolve the REPL history file: explicit path, then $FIERI_HISTORY, then ~/.fieri_history."""
    path = path or os.environ.get("FIERI_HISTORY") or DEFAULT_HISTORY_FILE
    return os.path.expanduser(path)


class UI:
    """Terminal front end using Rich"""

    def __init__(self, console: Console = None, history_file: str = None, session: PromptSession = None):
        self.console = console or Console()
        self.pt_style = Style.from_dict({
            'prompt': 'ansicyan bold',
        })
        self._history_file = history_file
        self._session = session

    @property
    def session(self) -> PromptSession:
        # created lazily, prompt_toolkit needs a terminal
        if self._session is None:
            self._session = PromptSession(history=FileHistory(history_path(self._history_file)))
        return self._session

    def banner(self, model: str = None):
        Banner.print_banner(self.console, model)

    def show_error(self, error: Exception):
        self.console.print(f"[bold red]✗ {escape(str(error))}[/]")

    def notice(self, text: str):
        self.console.print(f"[yellow]{escape(text)}[/]")

    def get_input(self, label: str = "fieri") -> str:
        """Read one line. Ctrl-D reads as ``/exit``."""
        try:
            return self.session.prompt([('class:prompt', f'{label}>> ')], style=self.pt_style)
        except EOFError:
            return "/exit"

    def show_markdown(self, title: str, text: str):
        self.console.print(Rule(f"[bold bright_cyan]{title}[/bold bright_cyan]", style="bright_blue"))
        self.console.print(Markdown(text.strip(), code_theme=CODE_THEME))
        self.console.print(Rule(style="dim bright_blue"))

    def stream_markdown(self, title: str, content_generator: Iterable[str]) -> str:
        """
        Renders Markdown content in real-time as it streams.
        """
        full_response = ""

        self.console.print(Rule(f"[bold bright_cyan]{title}[/bold bright_cyan]", style="bright_blue"))

        with Live(
            Spinner("dots", text="Waiting for the model...", style="bright_cyan"),
            console=self.console,
            refresh_per_second=15,
            transient=True
        ) as live:
            for chunk in content_generator:
                if not chunk:
                    continue
                full_response += chunk
                live.update(Markdown(full_response.strip(), code_theme=CODE_THEME))

        if full_response:
            self.console.print(Markdown(full_response.strip(), code_theme=CODE_THEME))
        else:
            self.console.print("[dim]<empty response>[/]")
        self.console.print(Rule(style="dim bright_blue"))

        return full_response

    def show_models(self, ids: List[str], owners: List[str]):
        table = Table(show_header=True, header_style="bold magenta", border_style="dim white")
        table.add_column("#", style="cyan", justify="right")
        table.add_column("Model", style="green")
        table.add_column("Owner", style="dim white")

        for idx, (model_id, owner) in enumerate(zip(ids, owners), 1):
            table.add_row(str(idx), model_id, owner or "")

        self.console.print(table)
