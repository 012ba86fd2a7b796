# sticky_note_app.py
# Description: Textual app for one sticky-note window (one group, one process)
#
# Imports
from typing import Optional, Tuple
#
# Third-Party Imports
from loguru import logger
from textual import on
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.css.query import NoMatches
from textual.containers import Horizontal, Vertical
from textual.reactive import reactive
from textual.timer import Timer
from textual.widgets import Footer, Input, OptionList, Static, TextArea
from textual.widgets.option_list import Option
#
# Local Imports
from ..IPC.client import StoreClient
from ..Models.planner_models import FOREVER, THEMES, TodoItem
from ..Notes.focus_timer import TimerState, timer_state
from ..state.note_window_state import NoteWindowSession, SessionHost
from ..Utils.NotificationHelper import show_notification
from ..Utils.date_keys import format_display_date, format_time
#
#######################################################################################################################
#
# Classes:

NOTES_SAVE_DELAY = 1.0


class _AppHost(SessionHost):
    """Routes session callbacks to the Textual app."""

    def __init__(self, app: "StickyNoteApp"):
        self.app = app

    def show_toast(self, message: str, severity: str = "information", timeout: Optional[float] = None) -> None:
        show_notification(self.app, message, severity=severity, timeout=timeout)

    def close_window(self, delay: float) -> None:
        self.app.schedule_close(delay)

    def refresh_view(self) -> None:
        self.app.refresh_view()


def render_todo(todo: TodoItem) -> str:
    box = "[x]" if todo.completed else "[ ]"
    line = f"{box} {todo.text}"
    state = timer_state(todo)
    if state is TimerState.RUNNING:
        line += f"  > {format_time(todo.remaining_time or 0)}"
    elif state in (TimerState.PAUSED, TimerState.EXPIRED):
        line += f"  || {format_time(todo.remaining_time or 0)}"
    if todo.is_expanded and todo.description:
        line += f"\n      {todo.description}"
    return line


class StickyNoteApp(App):
    """A floating note for one group: today's (or the backlog's) todos and notes."""

    CSS = """
    StickyNoteApp {
        background: $surface;
    }
    #header {
        height: 1;
        padding: 0 1;
    }
    #title {
        width: 1fr;
        text-style: bold;
    }
    #date-label, #progress {
        width: auto;
        padding: 0 1;
    }
    #now-playing {
        height: auto;
        padding: 0 1;
        color: $accent;
    }
    #prompt {
        display: none;
    }
    #prompt.visible {
        display: block;
    }
    #todos {
        height: 1fr;
    }
    #notes {
        height: 1fr;
    }
    .collapsed {
        display: none;
    }
    Screen.theme-yellow { background: #fff7b1 10%; }
    Screen.theme-blue { background: #bde0fe 10%; }
    Screen.theme-green { background: #caffbf 10%; }
    Screen.theme-pink { background: #ffc8dd 10%; }
    Screen.theme-purple { background: #cdb4db 10%; }
    Screen.theme-dark { background: #1e1e1e; }
    """

    BINDINGS = [
        Binding("space", "toggle_todo", "Done"),
        Binding("t", "toggle_timer", "Timer"),
        Binding("x", "stop_timer", "Stop"),
        Binding("d", "delete_todo", "Delete"),
        Binding("e", "toggle_expansion", "Details"),
        Binding("i", "edit_description", "Describe"),
        Binding("u", "edit_duration", "Minutes"),
        Binding("alt+up", "reorder(-1)", "Up", show=False),
        Binding("alt+down", "reorder(1)", "Down", show=False),
        Binding("ctrl+n", "move_todo('tomorrow')", "Task to tomorrow"),
        Binding("ctrl+f", "move_todo_forever", "Task to forever/today"),
        Binding("ctrl+t", "move_notes('tomorrow')", "Notes to tomorrow", show=False),
        Binding("ctrl+g", "move_notes_forever", "Notes to forever/today", show=False),
        Binding("comma", "previous_day", "Prev day"),
        Binding("full_stop", "next_day", "Next day"),
        Binding("g", "go_to_today", "Today"),
        Binding("v", "toggle_view_mode", "Forever/Date"),
        Binding("p", "toggle_always_on_top", "Pin"),
        Binding("c", "cycle_theme", "Theme", show=False),
        Binding("r", "rename", "Rename", show=False),
        Binding("1", "toggle_tasks_section", "Tasks", show=False),
        Binding("2", "toggle_notes_section", "Notes", show=False),
        Binding("ctrl+s", "save_notes", "Save notes", priority=True),
        Binding("ctrl+d", "delete_group", "Delete group", show=False),
        Binding("escape", "cancel_prompt", "Cancel", show=False),
        Binding("ctrl+q", "quit", "Close"),
    ]

    # What the prompt input is editing: "", "description", "duration" or "title"
    prompt_mode: reactive[str] = reactive("", init=False)

    def __init__(self, client: StoreClient, group_id: str, poll_interval: float = 2.0,
                 close_delay: float = 1.0, toast_timeout: float = 2.0,
                 celebration_timeout: float = 3.0, tick_interval: float = 1.0,
                 move_separator: str = "\n\n", timer_minutes: int = 25):
        super().__init__()
        self.client = client
        self.poll_interval = poll_interval
        self.session = NoteWindowSession(
            client,
            group_id,
            _AppHost(self),
            close_delay=close_delay,
            toast_timeout=toast_timeout,
            celebration_timeout=celebration_timeout,
            tick_interval=tick_interval,
            move_separator=move_separator,
            timer_minutes=timer_minutes,
        )
        self._poll_timer: Optional[Timer] = None
        self._prompt_todo_id: Optional[str] = None
        self._notes_timer: Optional[Timer] = None
        # Bucket whose notes the text area holds, and unsaved (bucket, text)
        self._notes_bucket: Optional[str] = None
        self._pending_notes: Optional[Tuple[str, str]] = None

    def compose(self) -> ComposeResult:
        with Horizontal(id="header"):
            yield Static("", id="title")
            yield Static("", id="date-label")
            yield Static("", id="progress")
        yield Static("", id="now-playing")
        with Vertical(id="tasks-section"):
            yield Input(placeholder="Add a task...", id="new-todo")
            yield Input(id="prompt")
            yield OptionList(id="todos")
        yield TextArea(id="notes")
        yield Footer()

    async def on_mount(self) -> None:
        await self.session.load()
        if not self.session.state.closing:
            self._poll_timer = self.set_interval(self.poll_interval, self.session.poll)

    def on_unmount(self) -> None:
        self.session.close()
        if self._poll_timer is not None:
            self._poll_timer.stop()

    def schedule_close(self, delay: float) -> None:
        if self._poll_timer is not None:
            self._poll_timer.stop()
            self._poll_timer = None
        if delay <= 0:
            self.exit()
        else:
            self.set_timer(delay, self.exit)

    # ---- rendering ----

    def refresh_view(self) -> None:
        group = self.session.group
        if group is None:
            return
        try:
            todos = self.query_one("#todos", OptionList)
        except NoMatches:
            logger.debug("View not composed yet; skipping refresh")
            return
        self.title = group.title

        pin = " (pinned)" if group.is_always_on_top else ""
        self.query_one("#title", Static).update(f"{group.title}{pin}")
        bucket = self.session.current_bucket
        label = "Forever" if bucket == FOREVER else format_display_date(bucket)
        self.query_one("#date-label", Static).update(label)
        self.query_one("#progress", Static).update(f"{self.session.progress}%")

        playing = self.session.now_playing
        now_playing = self.query_one("#now-playing", Static)
        if playing is not None:
            now_playing.update(f"Now focusing: {playing.text}  {format_time(playing.remaining_time or 0)}")
            now_playing.display = True
        else:
            now_playing.display = False

        content = self.session.current_content
        highlighted = todos.highlighted
        todos.clear_options()
        todos.add_options([Option(render_todo(todo), id=todo.id) for todo in content.todos])
        if content.todos:
            todos.highlighted = min(highlighted or 0, len(content.todos) - 1)

        notes = self.query_one("#notes", TextArea)
        if bucket != self._notes_bucket:
            self._notes_bucket = bucket
            notes.load_text(content.notes)
        elif self._pending_notes is None or self._pending_notes[0] != bucket:
            # Never clobber what the user is typing
            if not notes.has_focus and notes.text != content.notes:
                notes.load_text(content.notes)

        self.query_one("#tasks-section").set_class(not group.is_tasks_expanded, "collapsed")
        notes.set_class(not group.is_notes_expanded, "collapsed")

        for theme in THEMES:
            self.screen.set_class(theme == group.theme, f"theme-{theme}")

    def _highlighted_todo_id(self) -> Optional[str]:
        todos = self.query_one("#todos", OptionList)
        if todos.highlighted is None or todos.option_count == 0:
            return None
        return todos.get_option_at_index(todos.highlighted).id

    def _other_bucket(self) -> str:
        return "today" if self.session.current_bucket == FOREVER else FOREVER

    # ---- inputs ----

    @on(Input.Submitted, "#new-todo")
    async def handle_new_todo(self, event: Input.Submitted) -> None:
        text = event.value
        event.input.value = ""
        await self.session.add_todo(text)

    @on(Input.Submitted, "#prompt")
    async def handle_prompt(self, event: Input.Submitted) -> None:
        mode, todo_id = self.prompt_mode, self._prompt_todo_id
        value = event.value
        self.action_cancel_prompt()
        if mode == "description" and todo_id:
            await self.session.update_description(todo_id, value)
        elif mode == "duration" and todo_id:
            try:
                minutes = int(value)
            except ValueError:
                show_notification(self, "Enter a number of minutes", "warning")
                return
            await self.session.set_timer_duration(todo_id, minutes)
        elif mode == "title":
            await self.session.rename(value)

    @on(TextArea.Changed, "#notes")
    def handle_notes_changed(self, event: TextArea.Changed) -> None:
        group = self.session.group
        if group is None:
            return
        bucket = self._notes_bucket or self.session.current_bucket
        text = event.text_area.text
        if text == group.content_for(bucket).notes:
            if self._pending_notes is not None and self._pending_notes[0] == bucket:
                self._cancel_notes_timer()
                self._pending_notes = None
            return
        # Save once typing pauses, into the bucket the text was typed for
        self._pending_notes = (bucket, text)
        self._cancel_notes_timer()
        self._notes_timer = self.set_timer(NOTES_SAVE_DELAY, self._save_pending_notes)

    def _cancel_notes_timer(self) -> None:
        if self._notes_timer is not None:
            self._notes_timer.stop()
            self._notes_timer = None

    async def _save_pending_notes(self) -> None:
        self._cancel_notes_timer()
        pending, self._pending_notes = self._pending_notes, None
        if pending is not None:
            bucket, text = pending
            await self.session.set_notes(text, bucket=bucket)

    def watch_prompt_mode(self, mode: str) -> None:
        prompt = self.query_one("#prompt", Input)
        prompt.set_class(bool(mode), "visible")
        if mode:
            prompt.focus()

    def _open_prompt(self, mode: str, value: str, placeholder: str) -> None:
        prompt = self.query_one("#prompt", Input)
        prompt.value = value
        prompt.placeholder = placeholder
        self.prompt_mode = mode

    # ---- actions ----

    async def action_toggle_todo(self) -> None:
        todo_id = self._highlighted_todo_id()
        if todo_id:
            await self.session.toggle_todo(todo_id)

    async def action_toggle_timer(self) -> None:
        todo_id = self._highlighted_todo_id()
        if todo_id:
            await self.session.toggle_timer(todo_id)

    async def action_stop_timer(self) -> None:
        todo_id = self._highlighted_todo_id()
        if todo_id:
            await self.session.stop_timer(todo_id)

    async def action_delete_todo(self) -> None:
        todo_id = self._highlighted_todo_id()
        if todo_id:
            await self.session.delete_todo(todo_id)

    async def action_toggle_expansion(self) -> None:
        todo_id = self._highlighted_todo_id()
        if todo_id:
            await self.session.toggle_expansion(todo_id)

    def action_edit_description(self) -> None:
        todo_id = self._highlighted_todo_id()
        todo = self.session.current_content.find_todo(todo_id) if todo_id else None
        if todo is not None:
            self._prompt_todo_id = todo.id
            self._open_prompt("description", todo.description or "", "Description")

    def action_edit_duration(self) -> None:
        todo_id = self._highlighted_todo_id()
        todo = self.session.current_content.find_todo(todo_id) if todo_id else None
        if todo is not None:
            self._prompt_todo_id = todo.id
            self._open_prompt("duration", str(todo.timer_duration), "Timer minutes")

    def action_rename(self) -> None:
        if self.session.group is not None:
            self._prompt_todo_id = None
            self._open_prompt("title", self.session.group.title, "Title")

    def action_cancel_prompt(self) -> None:
        self.prompt_mode = ""
        self._prompt_todo_id = None
        self.query_one("#todos", OptionList).focus()

    async def action_reorder(self, offset: int) -> None:
        todos = self.query_one("#todos", OptionList)
        if todos.highlighted is None:
            return
        source = todos.highlighted
        if await self.session.reorder_todo(source, source + offset) is not None:
            todos.highlighted = source + offset

    async def action_move_todo(self, target: str) -> None:
        todo_id = self._highlighted_todo_id()
        if todo_id:
            await self.session.move_todo(todo_id, target)

    async def action_move_todo_forever(self) -> None:
        await self.action_move_todo(self._other_bucket())

    async def action_move_notes(self, target: str) -> None:
        await self._save_pending_notes()
        await self.session.move_notes(target)

    async def action_move_notes_forever(self) -> None:
        await self.action_move_notes(self._other_bucket())

    async def action_previous_day(self) -> None:
        await self._save_pending_notes()
        await self.session.previous_day()

    async def action_next_day(self) -> None:
        await self._save_pending_notes()
        await self.session.next_day()

    async def action_go_to_today(self) -> None:
        await self._save_pending_notes()
        await self.session.go_to_today()

    async def action_toggle_view_mode(self) -> None:
        await self._save_pending_notes()
        await self.session.toggle_view_mode()

    async def action_toggle_always_on_top(self) -> None:
        await self.session.toggle_always_on_top()

    async def action_cycle_theme(self) -> None:
        group = self.session.group
        if group is not None:
            await self.session.set_theme(THEMES[(THEMES.index(group.theme) + 1) % len(THEMES)])

    async def action_toggle_tasks_section(self) -> None:
        await self.session.toggle_tasks_section()

    async def action_toggle_notes_section(self) -> None:
        await self.session.toggle_notes_section()

    async def action_save_notes(self) -> None:
        await self._save_pending_notes()
        group = self.session.group
        if group is None:
            return
        bucket = self._notes_bucket or self.session.current_bucket
        notes = self.query_one("#notes", TextArea).text
        if notes != group.content_for(bucket).notes:
            await self.session.set_notes(notes, bucket=bucket)

    async def action_quit(self) -> None:
        await self.action_save_notes()
        self.exit()

    async def action_delete_group(self) -> None:
        await self.session.delete_group()

#
# End of sticky_note_app.py
#######################################################################################################################
