# home_app.py
# Description: Textual home window listing every group, with search, create, open and delete
#
# Imports
from typing import List, Optional
#
# Third-Party Imports
from loguru import logger
from textual import on
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.timer import Timer
from textual.widgets import Footer, Header, Input, OptionList
from textual.widgets.option_list import Option
#
# Local Imports
from ..DB.store_errors import NotFoundError, StorageUnavailableError
from ..IPC.client import StoreClient
from ..Models.planner_models import Group
from ..Notes.content_ops import filter_groups
from ..Utils.NotificationHelper import show_notification
#
#######################################################################################################################
#
# Classes:

class HomeApp(App):
    """Overview of all note groups."""

    CSS = """
    #search, #new-group {
        margin: 0 1;
    }
    #groups {
        height: 1fr;
    }
    """

    TITLE = "Sticky Plan"

    BINDINGS = [
        Binding("ctrl+o", "open_group", "Open"),
        Binding("ctrl+d", "delete_group", "Delete"),
        Binding("ctrl+r", "reload", "Refresh"),
        Binding("ctrl+q", "quit", "Quit"),
    ]

    def __init__(self, client: StoreClient, poll_interval: float = 2.0):
        super().__init__()
        self.client = client
        self.poll_interval = poll_interval
        self.groups: List[Group] = []
        self.query_text = ""
        self._poll_timer: Optional[Timer] = None

    def compose(self) -> ComposeResult:
        yield Header()
        yield Input(placeholder="Search groups...", id="search")
        yield Input(placeholder="New group title, then Enter", id="new-group")
        yield OptionList(id="groups")
        yield Footer()

    async def on_mount(self) -> None:
        await self.action_reload()
        self._poll_timer = self.set_interval(self.poll_interval, self.action_reload)

    def on_unmount(self) -> None:
        if self._poll_timer is not None:
            self._poll_timer.stop()

    @property
    def visible_groups(self) -> List[Group]:
        return filter_groups(self.groups, self.query_text)

    def render_groups(self) -> None:
        groups_list = self.query_one("#groups", OptionList)
        highlighted = groups_list.highlighted
        groups_list.clear_options()
        visible = self.visible_groups
        groups_list.add_options([Option(group.title, id=group.id) for group in visible])
        if visible:
            groups_list.highlighted = min(highlighted or 0, len(visible) - 1)

    def _highlighted_group_id(self) -> Optional[str]:
        groups_list = self.query_one("#groups", OptionList)
        if groups_list.highlighted is None or groups_list.option_count == 0:
            return None
        return groups_list.get_option_at_index(groups_list.highlighted).id

    async def action_reload(self) -> None:
        try:
            self.groups = await self.client.list_groups()
        except StorageUnavailableError as e:
            logger.debug(f"Could not list groups: {e}")
            return
        self.render_groups()

    @on(Input.Changed, "#search")
    def handle_search(self, event: Input.Changed) -> None:
        self.query_text = event.value
        self.render_groups()

    @on(Input.Submitted, "#new-group")
    async def handle_create(self, event: Input.Submitted) -> None:
        title = event.value
        event.input.value = ""
        try:
            group = await self.client.create_group(title)
        except StorageUnavailableError as e:
            logger.error(f"Creating group failed: {e}")
            show_notification(self, "Could not save changes", "error")
            return
        if group is None:
            return
        await self.action_reload()
        await self._open(group.id)

    @on(OptionList.OptionSelected, "#groups")
    async def handle_selected(self, event: OptionList.OptionSelected) -> None:
        if event.option.id:
            await self._open(event.option.id)

    async def _open(self, group_id: str) -> None:
        try:
            await self.client.open_note(group_id)
        except NotFoundError:
            show_notification(self, "Group was deleted", "warning")
            await self.action_reload()
        except StorageUnavailableError as e:
            logger.error(f"Opening group {group_id} failed: {e}")
            show_notification(self, "Could not open the note window", "error")

    async def action_open_group(self) -> None:
        group_id = self._highlighted_group_id()
        if group_id:
            await self._open(group_id)

    async def action_delete_group(self) -> None:
        group_id = self._highlighted_group_id()
        if not group_id:
            return
        try:
            await self.client.delete_group(group_id)
        except NotFoundError:
            logger.info(f"Group {group_id} was already deleted")
        except StorageUnavailableError as e:
            logger.error(f"Deleting group {group_id} failed: {e}")
            show_notification(self, "Could not save changes", "error")
            return
        await self.action_reload()

#
# End of home_app.py
#######################################################################################################################
