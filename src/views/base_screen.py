from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.screen import Screen
from textual.widgets import Footer, Header, Label, ListItem, ListView, Markdown

from utils.analytics import format_currency
from utils.messages import CartChangedMessage, CheckoutCompletedMessage, ModeSwitchedMessage
from utils.pure import generate_markdown_table
from views.modal_dialog import QuitDialogModal


class Sidebar(Container):
    init_mode = ""

    def compose(self) -> ComposeResult:
        yield Label("Register", id="label-info-1")
        yield Markdown("", id="md-register-info")
        yield Label("Menu", id="label-info-2")
        yield ListView(id="list-menu")

    async def on_mount(self):
        self.init_mode = self.app.current_mode

        list_menu: ListView = self.query_one("#list-menu")
        await list_menu.clear()
        await list_menu.extend(
            [
                ListItem(Label(title), id="list-menu-item-" + mode)
                for mode, title in self.app.MODE_TITLES.items()
            ]
        )
        self.highlight_item(self.init_mode)
        self.refresh_info()

    @work(exclusive=True)
    async def refresh_info(self) -> None:
        state = self.app.state
        ledger = await state.store.get_ledger()
        rows = [
            ["Products", len(state.store.catalog)],
            ["Transactions", len(ledger)],
            ["Cart lines", len(state.cart)],
            ["Cart total", format_currency(state.cart.total())],
        ]
        await self.query_one(Markdown).update(
            generate_markdown_table(None, [["Item", "Value"], *rows], ["l", "r"])
        )

    async def on_list_view_selected(self, event: ListView.Selected):
        selected_mode = event.item.id.removeprefix("list-menu-item-")
        self.highlight_item(self.init_mode)
        if self.app.current_mode != selected_mode:
            self.app.post_message(ModeSwitchedMessage(self.app.current_mode, selected_mode))
            await self.app.switch_mode(selected_mode)

    def highlight_item(self, mode_str: str):
        list_menu = self.query_one("#list-menu")
        for item in list_menu.children:
            item.highlighted = item.id == "list-menu-item-" + mode_str


class BaseScreen(Screen):
    """
    Inherited by all screens, contains common elements like
    headers, footers, sidebar, and keybindings.
    """

    BINDINGS = [
        Binding("ctrl+z", "quit", "Quit App", show=True),
    ]

    def __init__(self):
        super().__init__()

        self.configure()

    def configure(
        self,
        header_sub_title: str = "Register",
        show_sidebar: bool = True,
    ) -> None:
        self.app.title = "Corner Register"
        self.sub_title = header_sub_title
        for mode, screen_cls in self.app.MODES.items():
            if isinstance(self, screen_cls):
                self.sub_title = self.app.MODE_TITLES.get(mode, header_sub_title)

        self._show_sidebar = show_sidebar

    def compose(self) -> ComposeResult:
        if self._show_sidebar:
            yield Sidebar()
        yield Header()
        yield Footer(show_command_palette=False)

    @on(CartChangedMessage)
    @on(CheckoutCompletedMessage)
    def handle_register_changed(self):
        if self._show_sidebar:
            self.query_one(Sidebar).refresh_info()

    @work()
    async def action_quit(self):
        await self.app.push_screen_wait(QuitDialogModal())
