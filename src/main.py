from textual import on, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import LoadingIndicator

from db.catalog import load_catalog
from db.database import SqliteKeyValueStore
from db.store import CatalogLedgerStore
from utils.config import Settings, load_settings
from utils.logger import get_logger
from utils.messages import QuitRequestedMessage
from utils.state import AppState
from views.scr_dashboard import DashboardScreen
from views.scr_journal import SalesJournalScreen

_logger = get_logger(__name__)


class PosApp(App):
    BINDINGS = [
        Binding("ctrl+t", "switch_light", "Toggle Theme", show=True),
    ]

    MODES = {
        "journal": SalesJournalScreen,
        "dashboard": DashboardScreen,
    }

    MODE_TITLES = {"journal": "Sales Journal", "dashboard": "Sales Dashboard"}

    CSS_PATH = [
        "styles/index.tcss",
        "styles/journal.tcss",
        "styles/dashboard.tcss",
    ]

    state: AppState

    def __init__(self, settings: Settings | None = None):
        super().__init__()
        settings = settings or load_settings()
        store = CatalogLedgerStore(
            SqliteKeyValueStore(settings.db_path), load_catalog(settings.catalog_path)
        )
        self.state = AppState(settings=settings, store=store)

    def compose(self) -> ComposeResult:
        yield LoadingIndicator()

    async def on_mount(self) -> None:
        # seeds the inventory map on a fresh database
        await self.state.store.get_inventory()
        await self.switch_mode("journal")

    def action_switch_light(self):
        if self.theme == "textual-dark":
            self.theme = "solarized-light"
        else:
            self.theme = "textual-dark"
        self.notify(f"Theme changed to {self.theme}")

    @on(QuitRequestedMessage)
    @work
    async def handle_quit(self):
        if len(self.state.cart):
            _logger.info(f"Discarding {len(self.state.cart)} unsold cart line(s)")
        self.exit()


def main() -> None:
    PosApp().run()


if __name__ == "__main__":
    main()
