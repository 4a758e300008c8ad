"""State of one interactive browsing session, independent of the UI toolkit.

The TUI owns the widgets; the Session owns what they show: the fetched rows,
the live query, the multi-selection, and which state the loop is in.

    LISTING <-> PREVIEWING      toggle_preview()
    LISTING/PREVIEWING -> RELOADING -> LISTING
                                begin_reload() / finish_reload()
    any -> EXITED               exit()
"""

from enum import Enum

from ..config import Options
from ..errors import FatalError
from . import filters
from .filters import FilterResult
from .models import Row


class State(Enum):
    LISTING = "listing"
    PREVIEWING = "previewing"
    RELOADING = "reloading"
    EXITED = "exited"


class Session:
    """Rows, live query, selection and loop state of one interactive run."""

    def __init__(self, options: Options, result: FilterResult) -> None:
        self.options = options
        self.rows: list[Row] = list(result.rows)
        self.message: str | None = result.message
        self.query = ""
        self.selected: set[str] = set()
        self.state = State.PREVIEWING if options.preview else State.LISTING
        self.exit_code: int | None = None
        self.exit_message: str | None = None

    # --- What is shown ---

    @property
    def visible(self) -> list[Row]:
        """Rows narrowed by the live query (no remote call involved)."""
        return filters.narrow(self.rows, self.query)

    @property
    def previewing(self) -> bool:
        return self.state is State.PREVIEWING

    @property
    def has_active_filter(self) -> bool:
        return self.options.has_patterns or bool(self.query.strip())

    def set_query(self, query: str) -> None:
        self.query = query

    def find(self, thread_id: str | None) -> Row | None:
        for row in self.rows:
            if row.thread_id == thread_id:
                return row
        return None

    # --- Transitions ---

    def toggle_preview(self) -> None:
        if self.state is State.LISTING:
            self.state = State.PREVIEWING
        elif self.state is State.PREVIEWING:
            self.state = State.LISTING

    def begin_reload(self) -> bool:
        """Enter RELOADING. False if a reload is already running or we exited."""
        if self.state in (State.RELOADING, State.EXITED):
            return False
        self.state = State.RELOADING
        return True

    def finish_reload(self, rows: list[Row]) -> FilterResult:
        """Replace the rows with a fresh fetch and go back to LISTING."""
        result = filters.apply(
            rows,
            self.options.exclude,
            self.options.include,
            is_reload=True,
            query=self.query,
        )
        self.rows = list(result.rows)
        self.message = result.message
        self.selected.clear()
        if self.state is State.RELOADING:
            self.state = State.LISTING
        return result

    def exit(self, code: int = 0, message: str | None = None) -> None:
        self.state = State.EXITED
        self.exit_code = code
        self.exit_message = message

    # --- Selection ---

    def toggle_selected(self, thread_id: str) -> bool:
        """Flip a row's selection; returns whether it is now selected."""
        if thread_id in self.selected:
            self.selected.discard(thread_id)
            return False
        self.selected.add(thread_id)
        return True

    def toggle_all(self) -> None:
        """Select every visible row, or clear the selection if all are selected."""
        visible_ids = {row.thread_id for row in self.visible}
        if visible_ids and visible_ids <= self.selected:
            self.selected -= visible_ids
        else:
            self.selected |= visible_ids

    def is_selected(self, thread_id: str) -> bool:
        return thread_id in self.selected

    def targets(self, highlighted: Row | None) -> list[Row]:
        """Rows an action applies to: the selection, else the highlighted row."""
        if self.selected:
            return [row for row in self.rows if row.thread_id in self.selected]
        return [highlighted] if highlighted is not None else []

    def single_target(self, highlighted: Row | None) -> Row | None:
        """The one row a single-target action applies to.

        More than one selected row is an error, not a guess.
        """
        if len(self.selected) > 1:
            raise FatalError(
                f"This action works on a single notification, but {len(self.selected)} are selected."
            )
        targets = self.targets(highlighted)
        return targets[0] if targets else None
