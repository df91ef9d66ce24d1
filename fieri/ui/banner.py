from rich.align import Align
from rich.text import Text

from .. import __version__


class Banner:
    @staticmethod
    def get_ascii_art():
        return """
[bold bright_cyan] ___ ___ ___ ___ ___ [/]
[bold bright_cyan]| __|_ _| __| _ \\_ _|[/]
[bold bright_green]| _| | || _||   /| | [/]
[bold bright_green]|_| |___|___|_|_\\___|[/]
        """

    @staticmethod
    def print_banner(console, model: str = None):
        tagline = Text(f"OpenAI command-line interface | v{__version__}", style="bold bright_white")
        console.print(Align.center(Banner.get_ascii_art()))
        console.print(Align.center(tagline))
        if model:
            console.print(Align.center(Text(f"model: {model}", style="italic dim green")))
        console.print(Align.center(Text("/reset  /model <id>  /exit", style="dim cyan")))
        console.print("")
