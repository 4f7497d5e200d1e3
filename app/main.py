"""
Streamlit Frontend for Budget Tracker

DESIGN PRINCIPLES:
1. Every page view passes through the route guard first
2. Forms render from controller state and call back into it
3. Clear notifications for every write
4. No hidden actions

Pages:
- /sign-in    pick a name and email to start a session
- /wizard     choose the preferred currency
- /dashboard  create income/expense transactions, view the overview
"""

import asyncio
from datetime import date, datetime, time, timezone

import streamlit as st

from src.auth import Identity, UnauthenticatedError
from src.config import get_settings, validate_all_settings
from src.forms import CategoryPicker, NotificationKind, format_date
from src.models.transaction import TransactionType
from src.models.user_settings import CURRENCY_DETAILS, Currency
from src.orchestrator import (
    create_app_components,
    create_storage_backends,
    create_transaction_dialog,
)
from src.validation import ValidationError


st.set_page_config(
    page_title="Budget Tracker",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)

MAX_REDIRECTS = 3


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_backends():
    """Storage shared by every session (cached)."""
    return create_storage_backends(use_storage=True)


def get_components():
    """This session's services, created on first use."""
    if "components" not in st.session_state:
        st.session_state.components = create_app_components(backends=get_backends())
    return st.session_state.components


def navigate(path: str) -> str:
    """Run the route guard, following redirects, and store the final path."""
    components = get_components()
    for _ in range(MAX_REDIRECTS):
        action = run_async(components.route_guard.intercept(path, components.auth))
        if not action.is_redirect:
            break
        path = action.location
    st.session_state.path = path
    return path


def go(path: str) -> None:
    navigate(path)
    st.rerun()


def render_notifications():
    components = get_components()
    for notification in components.notifications.active:
        if notification.kind == NotificationKind.SUCCESS:
            st.success(notification.message)
        elif notification.kind == NotificationKind.ERROR:
            st.error(notification.message)
        elif notification.kind == NotificationKind.LOADING:
            st.info(notification.message)
        else:
            st.toast(notification.message)
        components.notifications.dismiss(notification.id)


def render_sign_in_page():
    st.title("👋 Welcome")
    st.markdown("Sign in to start tracking your budget.")

    with st.form("sign-in"):
        name = st.text_input("Your name")
        email = st.text_input("Email *")
        submitted = st.form_submit_button("Sign in", type="primary")

    if submitted:
        if not email.strip():
            st.error("Email is required")
            return
        components = get_components()
        components.auth.sign_in(
            Identity(user_id=email.strip().lower(), email=email.strip(), display_name=name or None)
        )
        go("/wizard")


def render_wizard_page():
    components = get_components()
    identity = run_async(components.auth.get_current_identity())

    st.title(f"Welcome, {identity.display_name or identity.email} 👋")
    st.markdown("Let's get started by setting up your currency.")

    settings = run_async(components.user_settings.get_user_settings())
    options = list(Currency)

    choice = st.selectbox(
        "Currency",
        options=options,
        index=options.index(settings.currency),
        format_func=lambda c: CURRENCY_DETAILS[c][0],
        help="Set your default currency for transactions",
    )

    if choice != settings.currency:
        components.notifications.loading("update-currency", "Updating currency...")
        try:
            run_async(components.user_settings.update_user_currency(choice.value))
            components.notifications.success("update-currency", "Currency updated successfully 🎉")
        except ValidationError as e:
            components.notifications.error("update-currency", str(e))
        except UnauthenticatedError as e:
            go(e.redirect_to)
        except Exception:
            components.notifications.error("update-currency", "Something went wrong")
        st.rerun()

    st.markdown("---")
    if st.button("I'm done! Take me to the dashboard", type="primary"):
        go(get_settings().routing.dashboard_path)


def get_dialog(type_: TransactionType):
    key = f"dialog_{type_.value}"
    if key not in st.session_state:
        components = get_components()
        dialog = create_transaction_dialog(components, type_)
        picker = CategoryPicker(type_, components.categories, on_change=dialog.set_category)
        st.session_state[key] = (dialog, picker)
    return st.session_state[key]


def render_transaction_dialog(type_: TransactionType):
    dialog, picker = get_dialog(type_)
    if not dialog.is_open:
        return

    color = "green" if type_ == TransactionType.INCOME else "red"
    st.markdown(f"#### Create a new :{color}[{type_.value}] transaction")

    options = run_async(picker.load_options())
    names = [c.name for c in options]
    labels = {c.name: f"{c.icon} {c.name}".strip() for c in options}

    with st.form(f"create-{type_.value}"):
        description = st.text_input(
            "Description",
            value=dialog.draft.description,
            help="Transaction description (optional)",
        )
        amount = st.text_input(
            "Amount",
            value=str(dialog.draft.amount),
            help="Transaction amount (required)",
        )
        if "amount" in dialog.errors:
            st.caption(f":red[{dialog.errors['amount']}]")

        category = st.selectbox(
            "Category",
            options=names,
            index=names.index(dialog.draft.category) if dialog.draft.category in names else None,
            format_func=lambda n: labels.get(n, n),
            placeholder="Select category",
            help="Select a category for this transaction",
        )
        if "category" in dialog.errors:
            st.caption(f":red[{dialog.errors['category']}]")

        picked = st.date_input("Transaction date", value=dialog.draft.date.date())
        st.caption(format_date(datetime.combine(picked, time())))

        col1, col2 = st.columns(2)
        with col1:
            create = st.form_submit_button("Create", type="primary", disabled=not dialog.can_submit)
        with col2:
            cancel = st.form_submit_button("Cancel")

    if cancel:
        dialog.cancel()
        st.rerun()

    if create:
        dialog.set_description(description)
        dialog.set_amount(amount)
        if category:
            picker.select_value(category)
        dialog.set_date(picked)
        result = run_async(dialog.submit())
        if result.redirect_to:
            go(result.redirect_to)
        st.rerun()


def render_overview():
    components = get_components()
    settings = run_async(components.user_settings.get_user_settings())

    today = date.today()
    col1, col2 = st.columns(2)
    with col1:
        start = st.date_input("From", value=today.replace(day=1))
    with col2:
        end = st.date_input("To", value=today)

    date_from = datetime.combine(start, time(), tzinfo=timezone.utc)
    date_to = datetime.combine(end, time.max, tzinfo=timezone.utc)
    try:
        overview = run_async(components.overview.get_overview(date_from, date_to))
    except ValueError as e:
        st.error(str(e))
        return

    symbol = CURRENCY_DETAILS[settings.currency][0].split(" ")[0]
    c1, c2, c3 = st.columns(3)
    c1.metric("Income", f"{symbol}{overview.income:,.2f}")
    c2.metric("Expense", f"{symbol}{overview.expense:,.2f}")
    c3.metric("Balance", f"{symbol}{overview.balance:,.2f}")

    if not overview.transaction_count:
        st.info("No transactions in this period yet.")
        return

    left, right = st.columns(2)
    with left:
        st.markdown("##### Incomes by category")
        for item in overview.by_category:
            if item.type == TransactionType.INCOME:
                st.write(f"{item.category_icon} {item.category}: {symbol}{item.total:,.2f}")
    with right:
        st.markdown("##### Expenses by category")
        for item in overview.by_category:
            if item.type == TransactionType.EXPENSE:
                st.write(f"{item.category_icon} {item.category}: {symbol}{item.total:,.2f}")

    st.markdown("##### History")
    st.bar_chart(
        {
            "month": [m.key for m in overview.monthly],
            "income": [float(m.income) for m in overview.monthly],
            "expense": [float(m.expense) for m in overview.monthly],
        },
        x="month",
        y=["income", "expense"],
    )


def render_dashboard_page():
    components = get_components()
    identity = run_async(components.auth.get_current_identity())

    header, income_col, expense_col = st.columns([3, 1, 1])
    with header:
        st.title(f"Hello, {identity.display_name or identity.email}! 👋")
    with income_col:
        if st.button("New income 🤑"):
            get_dialog(TransactionType.INCOME)[0].open()
    with expense_col:
        if st.button("New expense 😤"):
            get_dialog(TransactionType.EXPENSE)[0].open()

    render_transaction_dialog(TransactionType.INCOME)
    render_transaction_dialog(TransactionType.EXPENSE)

    st.markdown("---")
    st.subheader("📊 Overview")
    render_overview()


def render_connection_status():
    st.markdown("---")
    st.markdown("### Connection Status")

    status = validate_all_settings()

    services = [
        ("Google Sheets (Storage)", "google_sheets"),
        ("Routing", "routing"),
        ("App settings", "app"),
    ]

    for name, key in services:
        if status.get(key, False):
            st.success(f"✅ {name} - Configured")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} - {error}")

    if not status.get("google_sheets", False):
        st.caption("Data is kept in memory until Google Sheets is configured.")


def main():
    """Main application entry point."""
    components = get_components()
    routing = get_settings().routing

    path = navigate(st.session_state.get("path", routing.root_path))

    with st.sidebar:
        st.title("💰 Budget Tracker")
        st.markdown("---")
        if components.auth.is_authenticated:
            if st.button("Dashboard"):
                go(routing.dashboard_path)
            if st.button("Manage currency"):
                go("/wizard")
            if st.button("Sign out"):
                components.auth.sign_out()
                go(routing.root_path)

        render_connection_status()

    render_notifications()

    if path == routing.sign_in_path or path.startswith("/sign-up"):
        render_sign_in_page()
    elif path == "/wizard":
        render_wizard_page()
    else:
        render_dashboard_page()


if __name__ == "__main__":
    main()
