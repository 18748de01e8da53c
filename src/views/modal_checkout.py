from datetime import datetime, timezone
from typing import List, Optional

from textual import events, on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, MarkdownViewer

from db.errors import InsufficientInventoryError, PosError, StorageWriteError
from db.models import Transaction
from utils.analytics import format_currency, format_date
from utils.pure import generate_markdown_table
from views.modal_dialog import DialogModal, ErrorDialogModal


class CheckoutModal(ModalScreen[Optional[List[Transaction]]]):
    """
    Order summary plus confirmation. Dismisses with the created transactions
    on success, None when cancelled or when checkout failed.
    """

    def compose(self) -> ComposeResult:
        with Vertical():
            yield MarkdownViewer("", show_table_of_contents=False)
            with Horizontal():
                yield Button("Go Back", id="btn-quit")
                yield Button("Complete Sale", id="btn-submit", variant="primary")

    def on_mount(self):
        cart = self.app.state.cart
        rows = [
            [
                line.product_name,
                format_currency(line.unit_price),
                line.quantity,
                format_currency(line.total_price),
            ]
            for line in cart.lines
        ]
        md = "### Sale Summary\n\n" + generate_markdown_table(
            ["Product", "Unit Price", "Quantity", "Total"], rows, ["l", "r", "r", "r"]
        )
        md += f"\n\n**Total:** {format_currency(cart.total())}"
        self.query_one(MarkdownViewer).document.update(md)
        self.query_one("#btn-submit").focus()

    def on_key(self, event: events.Key) -> None:
        if event.key == "escape":
            self.dismiss(None)

    @on(Button.Pressed, "#btn-submit")
    @work(exclusive=True)
    async def handle_submit(self):
        cart = self.app.state.cart
        total = cart.total()
        if not await self.app.push_screen_wait(
            DialogModal(
                f"Charge {format_currency(total)}? This cannot be undone.",
                primary_text="Yes",
                secondary_text="No",
                tone="positive",
            )
        ):
            return

        try:
            created = await cart.checkout(datetime.now(timezone.utc))
        except InsufficientInventoryError as e:
            await self.app.push_screen_wait(
                ErrorDialogModal(
                    f"Not enough {e.product_name} in stock: "
                    f"{e.available} left, {e.requested} requested."
                )
            )
            self.dismiss(None)
            return
        except StorageWriteError as e:
            await self.app.push_screen_wait(ErrorDialogModal(f"Checkout failed: {e}"))
            self.dismiss(None)
            return
        except PosError as e:
            self.notify(str(e), severity="error")
            self.dismiss(None)
            return

        stamp = format_date(created[0].date, self.app.state.settings.display_tz)
        self.notify(f"Sale completed at {stamp}. Total: {format_currency(total)}")
        self.dismiss(created)

    @on(Button.Pressed, "#btn-quit")
    def handle_quit(self):
        self.dismiss(None)
