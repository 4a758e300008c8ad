"""Modal screens for the TUI."""

from rich.markup import escape
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import Input, Label, Static


class CommentScreen(ModalScreen[str | None]):
    """Modal dialog for writing a comment on an issue or pull request.

    Returns the comment text on submit, None on cancel.
    """

    CSS = """
    CommentScreen {
        align: center middle;
    }

    CommentScreen > Vertical {
        width: 80;
        height: auto;
        padding: 1 2;
        background: $surface;
        border: thick $primary;
    }

    CommentScreen Label {
        width: 100%;
        text-align: center;
        padding-bottom: 1;
    }

    CommentScreen Input {
        width: 100%;
    }

    CommentScreen .hint {
        color: $text-muted;
        text-style: italic;
        padding-top: 1;
    }
    """

    BINDINGS = [
        ("escape", "cancel", "Cancel"),
    ]

    def __init__(self, target: str = "") -> None:
        super().__init__()
        self.target = target

    def compose(self) -> ComposeResult:
        with Vertical():
            yield Label(f"Comment on {self.target}")
            yield Input(placeholder="Markdown is fine", id="comment-input")
            yield Label("Press Enter to post and quit, Escape to cancel", classes="hint")

    def on_mount(self) -> None:
        self.query_one("#comment-input", Input).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self.dismiss(event.value)

    def action_cancel(self) -> None:
        self.dismiss(None)


class HelpScreen(ModalScreen[None]):
    """Key binding reference."""

    CSS = """
    HelpScreen {
        align: center middle;
    }

    HelpScreen > Vertical {
        width: 64;
        height: auto;
        padding: 1 2;
        background: $surface;
        border: thick $primary;
    }

    HelpScreen .hint {
        color: $text-muted;
        text-style: italic;
        padding-top: 1;
    }
    """

    BINDINGS = [
        ("escape", "close", "Close"),
        ("question_mark", "close", "Close"),
    ]

    def __init__(self, entries: list[tuple[str, str]]) -> None:
        super().__init__()
        self.entries = entries

    def compose(self) -> ComposeResult:
        width = max((len(key) for key, _ in self.entries), default=0)
        lines = [
            f"[bold green]{escape(key.ljust(width))}[/]  {escape(label)}"
            for key, label in self.entries
        ]
        with Vertical():
            yield Label("[b]Key Bindings[/b]")
            yield Static("\n".join(lines))
            yield Label("Press Escape to close", classes="hint")

    def action_close(self) -> None:
        self.dismiss(None)
