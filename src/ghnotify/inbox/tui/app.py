"""Main ghnotify TUI application."""

import contextlib
import threading
from collections.abc import Callable

from rich.text import Text
from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, VerticalScroll
from textual.widgets import DataTable, Footer, Header, Input, Static

from ...config import Options
from ...errors import FatalError
from ...log import get_logger
from .. import actions
from ..filters import FilterResult
from ..models import Row, SubjectType
from ..pipeline import collect
from ..session import Session
from .screens import CommentScreen, HelpScreen
from .utils import set_terminal_title, styled_cell

_log = get_logger("tui")

# Title is the only column that takes up the slack.
_TITLE_COLUMN = 7


def _build_bindings(keys: str, action: str, label: str, show: bool = True) -> list[Binding]:
    """Build Binding objects for all keys mapped to an action.

    Args:
        keys: Comma separated Textual key names, e.g. "ctrl+t,m"
        action: The action name (without 'action_' prefix)
        label: Human-readable label for the action
        show: Whether to show in footer (only first key will be shown)

    Returns:
        List of Binding objects
    """
    names = [k.strip() for k in keys.split(",") if k.strip()]
    if not names:
        return []

    bindings = []
    # First key gets the visible binding
    bindings.append(Binding(names[0], action, label, show=show))

    # Additional keys get hidden bindings
    for key in names[1:]:
        bindings.append(Binding(key, action, label, show=False))

    return bindings


def _stretch_columns(
    table: DataTable,
    flex_specs: list[tuple[int, int, float]],
    total_width: int,
) -> None:
    """Distribute remaining table width among flex columns.

    Textual DataTable doesn't natively expand columns to fill available width.
    Each flex_spec is (column_index, min_width, weight).
    Remaining space after fixed columns is divided proportionally by weight,
    with a minimum floor of min_width.
    """
    if not flex_specs or not table.columns or total_width <= 0:
        return

    columns = list(table.columns.values())
    flex_indices = {idx for idx, _, _ in flex_specs}
    padding_total = 2 * table.cell_padding * len(columns) + 1
    fixed_total = sum(c.width for i, c in enumerate(columns) if i not in flex_indices)
    remaining = total_width - fixed_total - padding_total
    if remaining <= 0:
        return

    total_weight = sum(frac for _, _, frac in flex_specs)
    for idx, min_w, frac in flex_specs:
        if idx < len(columns):
            share = int(remaining * frac / total_weight) if total_weight else min_w
            columns[idx].auto_width = False
            columns[idx].width = max(share, min_w)


class NotifyApp(App):
    """ghnotify TUI - browse and triage GitHub notifications."""

    ENABLE_COMMAND_PALETTE = False

    CSS = """
    #body {
        height: 1fr;
    }

    #rows {
        width: 1fr;
        height: 1fr;
    }

    #preview_pane {
        width: 50%;
        height: 1fr;
        border-left: solid $accent;
        padding: 0 1;
    }

    #query {
        height: 3;
        border: solid $accent;
    }

    #status {
        height: 1;
        background: $surface;
        color: $text-muted;
        padding: 0 1;
    }
    """

    def __init__(
        self,
        options: Options,
        result: FilterResult,
        fetch_rows: Callable[[Options], list[Row]] = collect,
    ) -> None:
        super().__init__()
        self.options = options
        self.session = Session(options, result)
        self._fetch_rows = fetch_rows
        self._preview_cache: dict[str, Text] = {}
        self._preview_target: str | None = None
        self._help_entries: list[tuple[str, str]] = []
        self._setup_keybindings()
        # Enable ANSI colors for terminal transparency support
        if options.tui.transparent:
            self.ansi_color = True
            self.dark = True  # Use dark theme as base

    def _bind_all(self, keys: str, action: str, label: str, show: bool = True) -> None:
        bindings = _build_bindings(keys, action, label, show=show)
        for b in bindings:
            self.bind(b.key, b.action, description=b.description, show=b.show)
        if bindings:
            self._help_entries.append((keys.replace(",", " "), label))

    def _setup_keybindings(self) -> None:
        """Build keybindings from config."""
        kb = self.options.tui.keybindings

        self._bind_all(kb.quit, "quit", "Quit")
        self.bind("escape", "quit", description="Quit", show=False)
        self._help_entries.append(("enter", "View in pager"))
        self._bind_all(kb.view, "view", "View", show=False)
        self._bind_all(kb.toggle_preview, "toggle_preview", "Preview")
        self._bind_all(kb.reload, "reload", "Reload")
        self._bind_all(kb.mark_read, "mark_read", "Read")
        self._bind_all(kb.mark_done, "mark_done", "Done")
        self._bind_all(kb.mark_all_read, "mark_all_read", "All Read", show=False)
        self._bind_all(kb.open_browser, "open_browser", "Browser")
        self._bind_all(kb.view_diff, "view_diff", "Diff", show=False)
        self._bind_all(kb.view_patch, "view_patch", "Patch", show=False)
        self._bind_all(kb.comment, "comment", "Comment", show=False)
        self._bind_all(kb.toggle, "toggle", "Toggle", show=False)
        self._bind_all(kb.select_all, "select_all", "Toggle All", show=False)
        self._bind_all(kb.query, "query", "Search", show=False)
        self._bind_all(kb.help, "help", "Help")

        # Arrow key alternatives (if configured)
        if len(kb.up_down) == 2:
            up, down = kb.up_down
            self.bind(up, "cursor_up", description="Up", show=False)
            self.bind(down, "cursor_down", description="Down", show=False)

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="body"):
            yield DataTable(id="rows")
            with VerticalScroll(id="preview_pane"):
                yield Static("", id="preview")
        yield Input(placeholder="Search (terms, 'exact, !exclude)", id="query")
        yield Static("", id="status")
        yield Footer()

    def on_mount(self) -> None:
        self.title = "ghnotify"
        self.sub_title = "participating" if self.options.participating else "notifications"

        table = self.query_one("#rows", DataTable)
        if self.options.tui.transparent:
            self.screen.styles.background = "transparent"
            table.styles.background = "transparent"

        table.cursor_type = "row"
        table.add_column("", width=1)  # Selection marker
        table.add_column("", width=1)  # Unread indicator
        table.add_column("Updated", width=13)
        table.add_column("Repository", width=24)
        table.add_column("Type", width=11)
        table.add_column("Number", width=10)
        table.add_column("Reason", width=12)
        table.add_column("Title", width=30)  # Stretched on resize

        self.query_one("#query", Input).display = False
        self._populate()
        self._sync_preview()
        table.focus()
        self.call_later(self._stretch_table)
        # Kick Footer to pick up dynamically-bound keys
        self.refresh_bindings()

    def on_resize(self) -> None:
        self.call_after_refresh(self._stretch_table)

    def _stretch_table(self) -> None:
        table = self.query_one("#rows", DataTable)
        _stretch_columns(table, [(_TITLE_COLUMN, 20, 1.0)], table.size.width)

    # --- Rendering ---

    def _current_key(self) -> str | None:
        """Get the row key (thread id) at current cursor."""
        table = self.query_one("#rows", DataTable)
        if table.row_count == 0:
            return None
        try:
            row_key, _ = table.coordinate_to_cell_key(table.cursor_coordinate)
            return row_key.value if row_key else None
        except Exception:
            return None

    def _current_row(self) -> Row | None:
        return self.session.find(self._current_key())

    def _populate(self) -> None:
        table = self.query_one("#rows", DataTable)
        current_key = self._current_key()
        current_index = table.cursor_coordinate.row

        table.clear()
        unread_count = 0
        visible = self.session.visible

        for row in visible:
            is_unread = row.is_unread
            if is_unread:
                unread_count += 1

            symbol, time_ago, owner_name, type_name, number, reason, title = row.display_cells()
            marker = (
                Text("▌", style="bold magenta")
                if self.session.is_selected(row.thread_id)
                else Text("")
            )
            table.add_row(
                marker,
                Text(symbol, style="bold magenta"),
                Text(time_ago, style="dim"),
                styled_cell(owner_name, is_unread),
                Text(type_name, style="yellow" if is_unread else "dim yellow"),
                styled_cell(number, is_unread, "green"),
                Text(reason, style="dim"),
                styled_cell(title, is_unread, "white"),
                key=row.thread_id,
            )

        # Restore cursor position
        if table.row_count > 0:
            target_index = None
            if current_key:
                with contextlib.suppress(Exception):
                    target_index = table.get_row_index(current_key)
            if target_index is None:
                target_index = min(current_index, table.row_count - 1)
            table.move_cursor(row=target_index)

        status = self.query_one("#status", Static)
        if self.session.message and not visible:
            status.update(self.session.message)
            return

        status_text = f"{unread_count} unread, {len(visible) - unread_count} read"
        if self.session.selected:
            status_text += f", {len(self.session.selected)} selected"
        if self.session.query.strip():
            status_text += f"  |  {len(visible)}/{len(self.session.rows)} match"
        status.update(status_text)

    def _sync_preview(self) -> None:
        pane = self.query_one("#preview_pane", VerticalScroll)
        pane.display = self.session.previewing
        if self.session.previewing:
            self._update_preview()
        self.call_after_refresh(self._stretch_table)

    def _update_preview(self) -> None:
        preview = self.query_one("#preview", Static)
        row = self._current_row()
        if row is None:
            self._preview_target = None
            preview.update("")
            return

        self._preview_target = row.thread_id
        cached = self._preview_cache.get(row.thread_id)
        if cached is not None:
            preview.update(cached)
            return

        preview.update(Text("Loading…", style="dim"))

        def load() -> None:
            try:
                text = Text.from_ansi(actions.view_text(row))
            except Exception as e:
                _log.error("preview %s: %s", row.thread_id, e)
                text = Text(str(e), style="red")
            self.call_from_thread(self._set_preview, row.thread_id, text)

        threading.Thread(target=load, daemon=True).start()

    def _set_preview(self, thread_id: str, text: Text) -> None:
        """Store a loaded preview and show it if still relevant (main thread)."""
        self._preview_cache[thread_id] = text
        if self.session.previewing and self._preview_target == thread_id:
            self.query_one("#preview", Static).update(text)

    def on_data_table_row_highlighted(self, event: DataTable.RowHighlighted) -> None:
        if self.session.previewing:
            self._update_preview()

    # --- Reload ---

    def _reload(self, before: Callable[[], object] | None = None) -> None:
        """Run an optional remote action, then refetch everything off the UI thread."""
        if not self.session.begin_reload():
            return
        self._sync_preview()
        self.query_one("#status", Static).update("Reloading…")

        def work() -> None:
            try:
                if before is not None:
                    before()
                rows = self._fetch_rows(self.options)
            except Exception as e:
                self.call_from_thread(self._fail, e)
                return
            self.call_from_thread(self._finish_reload, rows)

        threading.Thread(target=work, daemon=True).start()

    def _finish_reload(self, rows: list[Row]) -> None:
        self.session.finish_reload(rows)
        self._preview_cache.clear()
        self._populate()
        self._sync_preview()

    def _fail(self, error: Exception) -> None:
        """End the app with a non-zero status (called from main thread)."""
        _log.error("fatal: %s", error)
        self.session.exit(1, f"ERROR: {error}")
        self.exit(return_code=1)

    def _single_target(self) -> Row | None:
        try:
            return self.session.single_target(self._current_row())
        except FatalError as e:
            self._fail(e)
            return None

    # --- Actions ---

    def action_quit(self) -> None:
        self.session.exit(0)
        self.exit()

    def action_reload(self) -> None:
        self._reload()

    def action_toggle_preview(self) -> None:
        self.session.toggle_preview()
        self._sync_preview()

    def action_mark_read(self) -> None:
        targets = self.session.targets(self._current_row())
        if not targets:
            return
        self._reload(lambda: actions.mark_read(targets))

    def action_mark_done(self) -> None:
        targets = self.session.targets(self._current_row())
        if not targets:
            return

        def read_then_done() -> None:
            actions.mark_read(targets)
            actions.mark_done(targets)

        self._reload(read_then_done)

    def action_mark_all_read(self) -> None:
        if self.session.has_active_filter:
            self.notify(
                "Can't mark all as read while a filter is active.",
                severity="error",
            )
            return
        rows = list(self.session.rows)
        self._reload(lambda: actions.mark_all_read(rows, self.options))

    def action_open_browser(self) -> None:
        row = self._single_target()
        if row is None:
            return
        try:
            actions.open_in_browser(row)
        except FatalError as e:
            self._fail(e)

    def action_view(self) -> None:
        row = self._single_target()
        if row is None:
            return
        try:
            text = actions.view_text(row)
            with self.suspend():
                actions.page(text)
        except FatalError as e:
            self._fail(e)

    def _view_diff(self, patch: bool) -> None:
        row = self._single_target()
        if row is None:
            return
        if row.subject_type is not SubjectType.PULL_REQUEST:
            self.notify(f"No diff for a {row.type_name}", severity="warning")
            return
        try:
            text = actions.diff_text(row, patch=patch)
            with self.suspend():
                actions.page(text)
        except FatalError as e:
            self._fail(e)

    def action_view_diff(self) -> None:
        self._view_diff(patch=False)

    def action_view_patch(self) -> None:
        self._view_diff(patch=True)

    def action_comment(self) -> None:
        """Write a comment on the issue/PR, then quit."""
        row = self._single_target()
        if row is None:
            return
        try:
            actions.ensure_commentable(row)
        except FatalError as e:
            self._fail(e)
            return

        def handle_comment(body: str | None) -> None:
            if body is None or not body.strip():
                # User cancelled
                return
            try:
                actions.comment(row, body)
            except FatalError as e:
                self._fail(e)
                return
            self.session.exit(0, f"Commented on {row.repo_full_name}{row.number}")
            self.exit()

        self.push_screen(
            CommentScreen(target=f"{row.repo_full_name} {row.number}"),
            handle_comment,
        )

    def action_toggle(self) -> None:
        row = self._current_row()
        if row is None:
            return
        self.session.toggle_selected(row.thread_id)
        self._populate()
        self.query_one("#rows", DataTable).action_cursor_down()

    def action_select_all(self) -> None:
        self.session.toggle_all()
        self._populate()

    def action_query(self) -> None:
        query = self.query_one("#query", Input)
        query.display = True
        query.focus()

    def action_help(self) -> None:
        self.push_screen(HelpScreen(self._help_entries))

    def action_cursor_up(self) -> None:
        self.query_one("#rows", DataTable).action_cursor_up()

    def action_cursor_down(self) -> None:
        self.query_one("#rows", DataTable).action_cursor_down()

    # --- Events ---

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id == "query":
            self.session.set_query(event.value)
            self._populate()
            if self.session.previewing:
                self._update_preview()

    def on_key(self, event: events.Key) -> None:
        """Handle special keys in the query input."""
        if not (isinstance(self.focused, Input) and self.focused.id == "query"):
            return

        # Down/Enter: keep query active, move focus to table for navigation
        if event.key in ("down", "enter"):
            event.prevent_default()
            event.stop()
            self.query_one("#rows", DataTable).focus()
            return

        # Escape: clear query, hide it, focus table
        if event.key == "escape":
            event.prevent_default()
            event.stop()
            query = self.query_one("#query", Input)
            query.value = ""
            query.display = False
            self.session.set_query("")
            self._populate()
            self.query_one("#rows", DataTable).focus()

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        """Enter on a row opens it in the pager."""
        if event.row_key is None:
            return
        self.action_view()


def main(options: Options, result: FilterResult) -> Session:
    """Run the TUI until the user quits; returns the finished session."""
    set_terminal_title("ghnotify")
    app = NotifyApp(options, result)
    app.run()
    return app.session
