# frontend/streamlit_app.py

from datetime import date

import plotly.express as px
import streamlit as st

from frontend.api_client import ApiClient, ApiClientError, SessionExpiredError
from frontend.dashboard import (
    categories_for_type,
    expense_breakdown,
    filter_options,
    income_expense_split,
    summarize,
    transactions_frame,
)
from frontend.session import BROWSER_ID_RE, ClientSession, new_browser_id

# ---------------- Page config ----------------
st.set_page_config(page_title="Expense Tracker", layout="wide", page_icon="💸")


# ---------------- Session ----------------
def browser_id():
    """Per-browser id kept in the page URL, so each tab/browser restores only its own session."""
    sid = st.query_params.get("sid")
    if not sid or not BROWSER_ID_RE.match(sid):
        sid = new_browser_id()
        st.query_params["sid"] = sid
    return sid


def get_client():
    """One ApiClient per browser session, hydrated from that browser's file on first use."""
    if "client" not in st.session_state:
        session = ClientSession.for_browser(browser_id())
        st.session_state.client = ApiClient(session)
        st.session_state.loaded = False
        st.session_state.filtered_transactions = None
    return st.session_state.client


def refresh(client):
    """Reload everything from the API; drops back to login if the token is rejected."""
    try:
        client.load_all()
        st.session_state.loaded = True
        st.session_state.filtered_transactions = None
    except SessionExpiredError as e:
        st.session_state.loaded = False
        st.warning(f"🔐 {e.message}")
    except ApiClientError as e:
        st.error(f"❌ Error loading data: {e.message}")


def run_action(client, action, success_message):
    """Call the API, report the outcome and reload the lists on success."""
    try:
        action()
    except SessionExpiredError as e:
        st.session_state.loaded = False
        st.warning(f"🔐 {e.message}")
        return False
    except ApiClientError as e:
        st.error(f"❌ {e.message}")
        return False
    st.success(f"✅ {success_message}")
    refresh(client)
    return True


def money(value):
    return f"{value:,.2f}"


# ---------------- Authentication ----------------
def render_auth(client):
    st.header("🔐 Welcome")
    auth_tab = st.radio("Action", ["Login", "Register"], horizontal=True, key="auth_tab")

    with st.form("auth_form"):
        username = None
        if auth_tab == "Register":
            username = st.text_input("👤 Username", key="username_input")
        email = st.text_input("📧 Email", key="email_input")
        password = st.text_input("🔒 Password", type="password", key="password_input")
        submitted = st.form_submit_button("Submit", use_container_width=True)

    if not submitted:
        return
    if not email or not password or (auth_tab == "Register" and not username):
        st.warning("Please fill in all fields")
        return
    try:
        if auth_tab == "Register":
            client.register(username, email, password)
            st.success("✅ Registration successful! Please login.")
            return
        client.login(email, password)
    except ApiClientError as e:
        st.error(f"❌ {e.message}")
        return
    st.success("✅ Login successful!")
    refresh(client)
    st.rerun()


# ---------------- Sidebar ----------------
def render_sidebar(client):
    with st.sidebar:
        st.title("💸 Expense Tracker")
        user = client.session.user
        st.success(f"Logged in as **{user.get('username') or user.get('email')}**")
        section = st.radio("Navigate", ["Dashboard", "Transactions", "Categories", "Profile"], key="nav")

        st.markdown("---")
        if st.button("🔄 Refresh Data", use_container_width=True, key="refresh_btn"):
            refresh(client)
        if st.button("🚪 Logout", use_container_width=True, key="logout_btn"):
            client.logout()
            st.session_state.loaded = False
            st.session_state.filtered_transactions = None
            st.rerun()
    return section


# ---------------- Dashboard ----------------
def render_dashboard(client):
    st.header("📊 Dashboard Overview")
    transactions = client.session.transactions

    summary = summarize(transactions)
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Income", money(summary['total_income']))
    col2.metric("Expenses", money(summary['total_expense']))
    col3.metric("Balance", money(summary['balance']))
    col4.metric("Transactions", summary['count'])

    if not transactions:
        st.info("💳 No transactions found. Add your first transaction!")
        return

    split = income_expense_split(transactions)
    if split['total'].sum() > 0:
        fig_split = px.pie(split, names='type', values='total', title="Income vs Expenses", hole=0.4,
                           color='type', color_discrete_map={'income': '#2ca02c', 'expense': '#d62728'})
        st.plotly_chart(fig_split, use_container_width=True)

    col1, col2 = st.columns([2, 1])
    with col1:
        breakdown = expense_breakdown(transactions)
        if breakdown.empty:
            st.info("No expense data yet")
        else:
            fig_pie = px.pie(breakdown, names='category', values='total',
                             title="Expenses by Category", hole=0.4)
            st.plotly_chart(fig_pie, use_container_width=True)

    with col2:
        st.subheader("🕒 Recent Transactions")
        df = transactions_frame(transactions).head(5)
        display = df[['date', 'type', 'category', 'amount']].copy()
        display['date'] = display['date'].dt.strftime('%Y-%m-%d')
        display['amount'] = display['amount'].map(money)
        st.dataframe(display, use_container_width=True, hide_index=True)


# ---------------- Transactions ----------------
def render_transaction_form(client, tx=None):
    """Create form, or edit form when ``tx`` is given."""
    categories = client.session.categories
    key = f"tx_form_{tx['id']}" if tx else "tx_form_new"
    types = ["expense", "income"]

    tx_type = st.selectbox("🔸 Type", types, key=f"{key}_type",
                           index=types.index(tx['type']) if tx else 0)
    options = categories_for_type(categories, tx_type)
    if tx and tx['category'] not in options:
        options.append(tx['category'])

    with st.form(key, clear_on_submit=not tx):
        col_a, col_b = st.columns(2)
        with col_a:
            tx_date = st.date_input("📅 Date", value=date.fromisoformat(tx['date']) if tx else date.today())
            amount = st.number_input("💰 Amount", min_value=0.0, format="%.2f", step=10.0,
                                     value=float(tx['amount']) if tx else 0.0)
        with col_b:
            category = st.selectbox("🏷️ Category", options,
                                    index=options.index(tx['category']) if tx else 0)
            description = st.text_input("📝 Description", value=(tx or {}).get('description') or "")
        submitted = st.form_submit_button("💾 Save" if tx else "💾 Add Transaction", use_container_width=True)

    if not submitted:
        return
    if amount <= 0:
        st.error("❌ Amount must be greater than 0")
        return
    fields = {
        "type": tx_type,
        "category": category,
        "amount": float(amount),
        "date": tx_date.isoformat(),
        "description": description,
    }
    if tx:
        run_action(client, lambda: client.update_transaction(tx['id'], **fields), "Transaction updated successfully!")
    else:
        run_action(client, lambda: client.create_transaction(**fields), "Transaction created successfully!")


def render_transactions(client):
    st.header("💳 Transactions")

    with st.expander("➕ Add Transaction", expanded=False):
        render_transaction_form(client)

    st.subheader("🔍 Filters")
    with st.form("tx_filters"):
        col1, col2, col3, col4 = st.columns(4)
        with col1:
            start = st.date_input("From", value=None, key="flt_start")
        with col2:
            end = st.date_input("To", value=None, key="flt_end")
        with col3:
            tx_type = st.selectbox("Type", ["All", "income", "expense"], key="flt_type")
        with col4:
            category = st.selectbox("Category", filter_options(client.session.categories), key="flt_category")
        applied = st.form_submit_button("Apply Filters")

    if applied:
        try:
            st.session_state.filtered_transactions = client.list_transactions(
                start_date=start, end_date=end,
                tx_type=None if tx_type == "All" else tx_type,
                category=category,
            )
        except SessionExpiredError as e:
            st.session_state.loaded = False
            st.warning(f"🔐 {e.message}")
            return
        except ApiClientError as e:
            st.error(f"❌ {e.message}")

    # filter results are kept apart so the dashboard always sees the full list
    transactions = st.session_state.get("filtered_transactions")
    if transactions is None:
        transactions = client.session.transactions
    if not transactions:
        st.info("💳 No transactions match.")
        return

    for tx in transactions:
        sign = "+" if tx['type'] == "income" else "-"
        label = f"{tx['date']} · {tx['category']} · {sign}{money(tx['amount'])}"
        with st.expander(label):
            st.write(tx.get('description') or "_No description_")
            render_transaction_form(client, tx)
            if st.button("🗑️ Delete", key=f"del_tx_{tx['id']}"):
                run_action(client, lambda: client.delete_transaction(tx['id']), "Transaction deleted successfully!")


# ---------------- Categories ----------------
def render_categories(client):
    st.header("🏷️ Categories")

    with st.form("new_category", clear_on_submit=True):
        col1, col2 = st.columns([2, 1])
        with col1:
            name = st.text_input("Name")
        with col2:
            category_type = st.selectbox("Type", ["expense", "income"])
        submitted = st.form_submit_button("➕ Create Category", use_container_width=True)
    if submitted:
        if not name:
            st.warning("Please enter a category name")
        else:
            run_action(client, lambda: client.create_category(name, category_type), "Category created successfully!")

    categories = client.session.categories
    if not categories:
        st.info("No categories yet")
        return

    for cat in categories:
        with st.expander(f"{cat['name']} ({cat['type']})"):
            with st.form(f"edit_cat_{cat['id']}"):
                new_name = st.text_input("Name", value=cat['name'])
                types = ["expense", "income"]
                new_type = st.selectbox("Type", types, index=types.index(cat['type']))
                saved = st.form_submit_button("💾 Save")
            if saved:
                run_action(client, lambda: client.update_category(cat['id'], new_name, new_type),
                           "Category updated successfully!")
            st.caption("Deleting moves its transactions to Uncategorized.")
            if st.button("🗑️ Delete", key=f"del_cat_{cat['id']}"):
                run_action(client, lambda: client.delete_category(cat['id']), "Category deleted successfully!")


# ---------------- Profile ----------------
def render_profile(client):
    st.header("👤 Profile")
    profile = client.session.profile or client.session.user

    with st.form("profile_form"):
        username = st.text_input("Username", value=profile.get('username') or "")
        email = st.text_input("Email", value=profile.get('email') or "")
        saved = st.form_submit_button("💾 Update Profile")
    if saved:
        run_action(client, lambda: client.update_profile(username=username, email=email),
                   "Profile updated successfully!")

    with st.form("password_form", clear_on_submit=True):
        new_password = st.text_input("New password", type="password")
        confirm = st.text_input("Confirm password", type="password")
        changed = st.form_submit_button("🔒 Change Password")
    if changed:
        if not new_password:
            st.warning("Please enter a new password")
        elif new_password != confirm:
            st.error("❌ Passwords do not match")
        else:
            run_action(client, lambda: client.change_password(new_password), "Password changed successfully!")


def main():
    client = get_client()

    if not client.session.is_authenticated:
        render_auth(client)
        return

    if not st.session_state.get("loaded"):
        refresh(client)
        if not client.session.is_authenticated:
            st.rerun()

    section = render_sidebar(client)
    if section == "Dashboard":
        render_dashboard(client)
    elif section == "Transactions":
        render_transactions(client)
    elif section == "Categories":
        render_categories(client)
    else:
        render_profile(client)


if __name__ == "__main__":
    main()
