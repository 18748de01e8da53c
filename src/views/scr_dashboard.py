from textual import on, work
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.events import ScreenResume
from textual.widgets import MarkdownViewer, Select

import utils.analytics as analytics
from utils.messages import CheckoutCompletedMessage, ModeSwitchedMessage
from utils.pure import product_sales_table, revenue_table
from views.base_screen import BaseScreen


class DashboardScreen(BaseScreen):
    """
    Sales dashboard: all-time and per-period totals, top sellers,
    revenue by product and category, and the period trend.
    """

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield Select(
                [(p.value, p.value) for p in analytics.Period],
                value=analytics.Period.DAILY.value,
                allow_blank=False,
                id="select-period",
            )
            yield MarkdownViewer(id="md-dashboard", show_table_of_contents=False)

    def on_mount(self) -> None:
        self.handle_reload()

    @on(Select.Changed, "#select-period")
    @on(CheckoutCompletedMessage)
    @on(ScreenResume)
    @on(ModeSwitchedMessage)
    @work(exclusive=True)
    async def handle_reload(self) -> None:
        state = self.app.state
        period = analytics.Period(self.query_one("#select-period", Select).value)
        ledger = await state.store.get_ledger()
        catalog = await state.store.get_catalog()

        summary = analytics.summarize(
            ledger, catalog, period, top=state.settings.top_items
        )
        money = analytics.format_currency

        md = (
            "### Sales Dashboard\n\n"
            f"- Total Sales (All Time): **{money(summary.all_time_total)}**\n"
            f"- {period.value} Sales: **{money(summary.period_total)}**\n"
            f"- Transactions ({period.value}): **{summary.period_count}**\n\n"
            f"#### {period.value} Sales Trend\n\n"
            + revenue_table("Bucket", summary.trend)
            + f"\n\n#### Top {state.settings.top_items} Selling Items (All Time)\n\n"
            + product_sales_table(summary.top_items)
            + "\n\n#### Sales by Product\n\n"
            + product_sales_table(summary.by_product)
            + "\n\n#### Sales by Category\n\n"
            + revenue_table("Category", summary.by_category)
            + "\n"
        )
        self.query_one("#md-dashboard", MarkdownViewer).document.update(md)
