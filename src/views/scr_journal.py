from typing import List

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.events import ScreenResume
from textual.widgets import Button, DataTable, Input, Label, Select

from db.errors import InsufficientInventoryError
from db.models import CartLine, Product
from utils.analytics import format_currency, format_date
from utils.messages import CartChangedMessage, CheckoutCompletedMessage, ModeSwitchedMessage
from views.base_screen import BaseScreen
from views.modal_checkout import CheckoutModal
from views.modal_dialog import DialogModal

ALL_CATEGORIES = "all"
RECENT_TRANSACTIONS = 50


class SalesJournalScreen(BaseScreen):
    """
    Product browser on the left, cart on the right, recent sales below.
    Enter on a product adds one unit to the cart.
    """

    # only here to be displayed in footer
    BINDINGS = [
        Binding("enter", "noop", "Add To Cart", show=True, key_display="⏎"),
    ]

    def __init__(self) -> None:
        super().__init__()
        self._products: List[Product] = []
        self._cart_lines: List[CartLine] = []

    def compose(self) -> ComposeResult:
        yield from super().compose()
        categories = [(ALL_CATEGORIES.title(), ALL_CATEGORIES)] + [
            (c, c) for c in self.app.state.store.categories()
        ]
        with Horizontal(id="hort-journal"):
            with Vertical(id="vert-products"):
                yield Input(id="input-search", placeholder="Search products...")
                yield Select(
                    categories,
                    value=ALL_CATEGORIES,
                    allow_blank=False,
                    id="select-category",
                )
                yield DataTable(id="table-products")
            with Vertical(id="vert-cart"):
                yield DataTable(id="table-cart")
                with Horizontal(id="hort-cart-edit"):
                    yield Input(placeholder="Qty", id="input-qty", type="integer")
                    yield Button("Set Qty", id="btn-set-qty")
                    yield Button("Remove", id="btn-remove", variant="warning")
                yield Label("Cart Total: $0.00", id="label-cart-total")
                with Horizontal(id="hort-buttons"):
                    yield Button("Clear Cart", id="btn-clear-cart")
                    yield Button("Checkout", id="btn-checkout", variant="primary")
        yield DataTable(id="table-transactions")

    def on_mount(self) -> None:
        products = self.query_one("#table-products", DataTable)
        products.add_columns("Product", "Category", "Price", "In Stock")
        cart = self.query_one("#table-cart", DataTable)
        cart.add_columns("Product", "Qty", "Unit", "Total")
        transactions = self.query_one("#table-transactions", DataTable)
        transactions.add_columns("Date", "Product", "Category", "Qty", "Total")
        for table in (products, cart, transactions):
            table.cursor_type = "row"
            table.zebra_stripes = True

        self.query_one("#input-search").focus()
        self.reload_products()
        self.reload_transactions()
        self.render_cart()

    # ---------------------------
    # Products
    # ---------------------------

    @on(Input.Changed, "#input-search")
    @on(Select.Changed, "#select-category")
    @on(ScreenResume)
    @on(ModeSwitchedMessage)
    @work(exclusive=True, group="products")
    async def reload_products(self) -> None:
        term = self.query_one("#input-search", Input).value
        category = self.query_one("#select-category", Select).value
        self._products = await self.app.state.store.search_catalog(
            term, None if category == ALL_CATEGORIES else category
        )

        table = self.query_one("#table-products", DataTable)
        table.clear()
        for p in self._products:
            stock = p.current_inventory
            table.add_row(
                p.item_name,
                p.category,
                format_currency(p.unit_price),
                "Out of stock" if not stock else str(stock),
            )

    @on(DataTable.RowSelected, "#table-products")
    async def handle_add_to_cart(self, event: DataTable.RowSelected) -> None:
        if not 0 <= event.cursor_row < len(self._products):
            return
        product = self._products[event.cursor_row]
        try:
            await self.app.state.cart.add(product)
        except InsufficientInventoryError as e:
            if e.available:
                self.notify(
                    f"Insufficient inventory! Only {e.available} available.",
                    severity="error",
                )
            else:
                self.notify("Out of stock!", severity="error")
            return
        self.post_message(CartChangedMessage())

    # ---------------------------
    # Cart
    # ---------------------------

    @on(CartChangedMessage)
    def render_cart(self) -> None:
        cart = self.app.state.cart
        self._cart_lines = cart.lines

        table = self.query_one("#table-cart", DataTable)
        table.clear()
        for line in self._cart_lines:
            table.add_row(
                line.product_name,
                str(line.quantity),
                format_currency(line.unit_price),
                format_currency(line.total_price),
            )
        self.query_one(
            "#label-cart-total", Label
        ).content = f"Cart Total: {format_currency(cart.total())}"

    def _selected_line(self) -> CartLine | None:
        table = self.query_one("#table-cart", DataTable)
        if table.row_count == 0 or not 0 <= table.cursor_row < len(self._cart_lines):
            return None
        return self._cart_lines[table.cursor_row]

    @on(DataTable.RowHighlighted, "#table-cart")
    def handle_cart_highlight(self) -> None:
        line = self._selected_line()
        if line is not None:
            self.query_one("#input-qty", Input).value = str(line.quantity)

    @on(Button.Pressed, "#btn-set-qty")
    @on(Input.Submitted, "#input-qty")
    async def handle_set_qty(self) -> None:
        line = self._selected_line()
        if line is None:
            self.notify("Select a cart line first.", severity="warning")
            return
        raw = self.query_one("#input-qty", Input).value
        try:
            qty = int(raw)
        except ValueError:
            self.notify("Quantity must be a whole number.", severity="error")
            return
        try:
            await self.app.state.cart.set_quantity(line.product_name, qty)
        except InsufficientInventoryError as e:
            self.notify(
                f"Insufficient inventory! Only {e.available} available.",
                severity="error",
            )
            return
        self.post_message(CartChangedMessage())

    @on(Button.Pressed, "#btn-remove")
    def handle_remove(self) -> None:
        line = self._selected_line()
        if line is None:
            return
        self.app.state.cart.remove(line.product_name)
        self.post_message(CartChangedMessage())

    @on(Button.Pressed, "#btn-clear-cart")
    @work()
    async def handle_clear_cart(self) -> None:
        if not len(self.app.state.cart):
            self.notify("Cart is empty.", severity="warning")
            return
        if await self.app.push_screen_wait(
            DialogModal(
                "Remove all items from the cart?",
                primary_text="Yes",
                secondary_text="No",
                tone="error",
            )
        ):
            self.app.state.cart.clear()
            self.post_message(CartChangedMessage())

    @on(Button.Pressed, "#btn-checkout")
    @work()
    async def handle_checkout(self) -> None:
        if not len(self.app.state.cart):
            self.notify("Cart is empty!", severity="warning")
            return

        created = await self.app.push_screen_wait(CheckoutModal())
        if created:
            self.post_message(CheckoutCompletedMessage(len(created)))
        self.post_message(CartChangedMessage())

    # ---------------------------
    # Transactions
    # ---------------------------

    @on(CheckoutCompletedMessage)
    def handle_checkout_completed(self) -> None:
        self.reload_products()
        self.reload_transactions()

    @work(exclusive=True, group="transactions")
    async def reload_transactions(self) -> None:
        ledger = await self.app.state.store.get_ledger()
        tz = self.app.state.settings.display_tz

        table = self.query_one("#table-transactions", DataTable)
        table.clear()
        # newest first
        for t in reversed(ledger[-RECENT_TRANSACTIONS:]):
            table.add_row(
                format_date(t.date, tz),
                t.product_name,
                t.category,
                str(t.quantity),
                format_currency(t.total_price),
            )
