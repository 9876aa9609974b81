"""
Streamlit Frontend for Ledger Guard

The interface the account holders use day to day:
- switch between accounts (sidebar)
- see the current balance and this month's movements
- record a deposit, withdrawal or correction
- settle monthly interest
- browse the yearly spreadsheet and the raw transaction history

DESIGN PRINCIPLES:
1. All numbers on screen come from the pure ledger engine
2. Every mutation goes through the orchestrator flows
3. Rejections (future dates, already-settled months) are shown, not raised
4. Data never leaves this machine
"""

from datetime import date
from decimal import Decimal

import streamlit as st

from ledger_guard.book import LedgerBook
from ledger_guard.config import get_settings
from ledger_guard.ledger import (
    available_years,
    balance_at,
    current_month_stats,
    interest_for,
    max_transaction_rows,
    yearly_overview,
)
from ledger_guard.log import configure_logging
from ledger_guard.models.ledger import (
    REMARKS_MAX_LENGTH,
    USER_NAME_MAX_LENGTH,
    TransactionType,
)
from ledger_guard.orchestrator import (
    SettlementFlow,
    TransactionEntryFlow,
    create_app_components,
)


st.set_page_config(
    page_title="Ledger Guard",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .balance-box {
        padding: 24px;
        background: linear-gradient(135deg, #1d4ed8, #4338ca);
        color: white;
        border-radius: 16px;
        margin: 10px 0;
    }
    .big-number {
        font-size: 2.8em;
        font-weight: bold;
    }
</style>
""", unsafe_allow_html=True)


ENTRY_TYPES = [
    TransactionType.DEPOSIT,
    TransactionType.WITHDRAWAL,
    TransactionType.CORRECTION,
]


@st.cache_resource
def get_components():
    """Get or create application components (cached per server process)."""
    configure_logging()
    return create_app_components()


def money(amount: Decimal) -> str:
    symbol = get_settings().ledger.currency_symbol
    return f"{symbol}{amount:,.2f}"


def main():
    """Main application entry point."""
    book, entry_flow, settlement_flow = get_components()

    render_sidebar(book)

    user = book.active_user
    if user is None:
        st.info("Add an account in the sidebar to get started.")
        return

    render_balance_card(book, settlement_flow)

    with st.expander("➕ Deposit / Withdraw", expanded=False):
        render_entry_form(entry_flow)

    summary_tab, sheet_tab, history_tab = st.tabs(
        ["📊 Monthly Summary", "📅 Yearly Sheet", "🕒 History"]
    )
    with summary_tab:
        render_monthly_summary(settlement_flow)
    with sheet_tab:
        render_yearly_sheet(book)
    with history_tab:
        render_history(book)

    st.caption(
        "All ledger data is stored in a local file on this machine. "
        "Nothing is sent over the network."
    )


def render_sidebar(book: LedgerBook):
    """Account switcher and account creation."""
    st.sidebar.title("💰 Ledger Guard")
    rate = get_settings().ledger.annual_rate
    st.sidebar.caption(f"{rate:.0%} annual rate, settled monthly")
    st.sidebar.markdown("---")

    users = book.users
    if users:
        ids = [u.id for u in users]
        index = ids.index(book.active_user_id) if book.active_user_id in ids else 0
        selected = st.sidebar.radio(
            "Account",
            options=ids,
            index=index,
            format_func=lambda user_id: book.get_user(user_id).name,
        )
        if selected != book.active_user_id:
            book.select_user(selected)
            st.rerun()

    st.sidebar.markdown("---")
    with st.sidebar.form("add_user", clear_on_submit=True):
        name = st.text_input("New account name", max_chars=USER_NAME_MAX_LENGTH)
        if st.form_submit_button("Add account") and name.strip():
            try:
                book.add_user(name)
            except ValueError as e:
                st.sidebar.error(str(e))
            else:
                st.rerun()


def render_balance_card(book: LedgerBook, settlement_flow: SettlementFlow):
    """Current balance and this month's movements."""
    user = book.active_user
    balance = balance_at(book.transactions, user.id)
    stats = current_month_stats(settlement_flow.reports(user.id))

    st.markdown(f"""
    <div class="balance-box">
        <p>Current balance ({user.name})</p>
        <div class="big-number">{money(balance)}</div>
    </div>
    """, unsafe_allow_html=True)

    col1, col2, col3 = st.columns(3)
    col1.metric("Deposited this month", money(stats.deposits))
    col2.metric("Withdrawn this month", money(stats.withdrawals))
    col3.metric("Interest this month", money(stats.interest))


def render_entry_form(entry_flow: TransactionEntryFlow):
    """Deposit / withdrawal / correction form."""
    with st.form("entry", clear_on_submit=True):
        col1, col2 = st.columns(2)
        with col1:
            transaction_type = st.selectbox(
                "Type",
                options=ENTRY_TYPES,
                format_func=lambda t: t.value.title(),
            )
            amount = st.number_input(
                "Amount",
                min_value=0.0,
                step=100.0,
                format="%.2f",
            )
        with col2:
            occurred_on = st.date_input(
                "Date",
                value=date.today(),
                max_value=date.today(),
            )
            is_outflow = st.checkbox(
                "Correction reduces the balance",
                help="Only used for corrections",
            )
        remarks = st.text_input("Remarks (optional)", max_chars=REMARKS_MAX_LENGTH)

        if st.form_submit_button("Save", type="primary"):
            result = entry_flow.record_values(
                amount=Decimal(str(amount)),
                transaction_type=transaction_type,
                remarks=remarks,
                occurred_on=occurred_on,
                is_outflow=is_outflow,
            )
            if result.success:
                st.success(result.message)
                st.rerun()
            else:
                st.error(result.message)


def render_monthly_summary(settlement_flow: SettlementFlow):
    """Monthly reports, newest first, with settle buttons."""
    reports = settlement_flow.reports()
    if not reports:
        st.info("No transactions yet.")
        return

    for report in reversed(reports):
        with st.container(border=True):
            cols = st.columns([2, 2, 2, 2, 2, 2])
            cols[0].markdown(f"**{report.month}**")
            cols[1].metric("Opening", money(report.opening_balance))
            cols[2].metric("In", money(report.deposits))
            cols[3].metric("Out", money(report.withdrawals))
            cols[4].metric("Closing", money(report.closing_balance))

            if report.is_settled:
                cols[5].success(f"Interest {money(report.interest)}")
            else:
                projected = interest_for(report, settlement_flow.annual_rate)
                if cols[5].button(
                    f"Settle {money(projected)}",
                    key=f"settle-{report.month}",
                ):
                    result = settlement_flow.settle(report.month)
                    if result.success:
                        st.success(result.message)
                        st.rerun()
                    else:
                        st.warning(result.message)


def render_yearly_sheet(book: LedgerBook):
    """Twelve-column spreadsheet for one year."""
    user = book.active_user
    years = available_years(book.transactions, user.id)
    year = st.selectbox("Year", options=years, index=0)

    columns = yearly_overview(book.transactions, user.id, year)
    rows = max_transaction_rows(columns)

    def fmt(value: Decimal, signed: bool = False) -> str:
        if value == 0:
            return ""
        return f"{value:+,.0f}" if signed else f"{value:,.0f}"

    table = {"": ["Opening"] + [f"#{i + 1}" for i in range(rows)] + [
        "Income", "Expense", "Interest", "Month total", "Closing",
    ]}
    for column in columns:
        details = [fmt(t.amount, signed=True) for t in column.transactions]
        details += [""] * (rows - len(details))
        table[column.month[5:]] = (
            [fmt(column.opening_balance)]
            + details
            + [
                fmt(column.income_subtotal, signed=True),
                fmt(column.expense_subtotal, signed=True),
                f"{column.interest_amount:,.1f}" if column.interest_amount > 0 else "",
                f"{column.monthly_total:,.1f}" if column.monthly_total != 0 else "",
                fmt(column.closing_balance),
            ]
        )

    st.markdown(f"#### {user.name} - {year}")
    st.dataframe(table, hide_index=True, use_container_width=True)
    st.caption("Income counts positive entries only; expense counts negative entries only.")


def render_history(book: LedgerBook):
    """Raw transaction log of the active user, newest first."""
    transactions = sorted(
        book.transactions_for(book.active_user_id),
        key=lambda t: t.timestamp,
        reverse=True,
    )
    if not transactions:
        st.info("No transactions yet.")
        return

    st.dataframe(
        [
            {
                "Date": t.timestamp.strftime("%Y-%m-%d"),
                "Type": t.type.value.title(),
                "Amount": f"{t.amount:+,.2f}",
                "Remarks": t.remarks,
            }
            for t in transactions
        ],
        hide_index=True,
        use_container_width=True,
    )


if __name__ == "__main__":
    main()
