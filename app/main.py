"""
Streamlit Frontend for the BP Diagnostic back office

A desktop companion to the mobile app for front-desk and cashier staff.

DESIGN PRINCIPLES:
1. Every screen reads from the API; nothing is cached across sign-ins
2. Errors are shown in plain language and the screen keeps what it had
3. The cash count shows its variance before anything is submitted
4. Nothing is submitted without an explicit button press

Each browser session gets its own components (and so its own token) and
its own event loop, since the httpx client is bound to the loop it was
first used on.
"""

import asyncio

import streamlit as st

from src.config import validate_all_settings
from src.formatting import format_currency, format_variance, status_label
from src.models.operations import LabStatus
from src.models.reconciliation import ReconciliationStatus
from src.orchestrator import AppComponents, create_app_components
from src.queries import PERIOD_LABELS, PERIODS
from src.reconciliation import DuplicateSubmissionError
from src.services.api import ApiError, RequestValidationError
from src.validation import FormValidationError


# Page configuration
st.set_page_config(
    page_title="BP Diagnostic Back Office",
    page_icon="🧪",
    layout="wide",
    initial_sidebar_state="expanded",
)


def run_async(coro):
    """Run a coroutine on this session's event loop."""
    if "event_loop" not in st.session_state:
        st.session_state.event_loop = asyncio.new_event_loop()
    return st.session_state.event_loop.run_until_complete(coro)


def get_components() -> AppComponents:
    """Get or create this session's components, restoring a saved sign-in."""
    if "components" not in st.session_state:
        components = create_app_components()
        run_async(components.auth.hydrate())
        st.session_state.components = components
    return st.session_state.components


def show_api_error(error: ApiError, default: str) -> None:
    st.error(error.user_message(default))


def main():
    """Main application entry point."""
    components = get_components()

    if not components.auth.is_authenticated:
        render_login_page(components)
        return

    user = components.auth.user
    st.sidebar.title("🧪 BP Diagnostic")
    st.sidebar.markdown(f"Signed in as **{user.name}** ({user.role.replace('_', ' ')})")
    st.sidebar.markdown("---")

    pages = ["📊 Dashboard", "👥 Patients", "🔬 Lab Queue"]
    if user.can_reconcile:
        pages.append("💵 Cash Reconciliation")
    pages.append("⚙️ Settings")

    page = st.sidebar.radio("Navigate to:", pages, index=0)

    st.sidebar.markdown("---")
    if st.sidebar.button("Sign out"):
        run_async(components.auth.logout())
        st.session_state.pop("reconciliation_list", None)
        st.rerun()

    if page == "📊 Dashboard":
        render_dashboard_page(components)
    elif page == "👥 Patients":
        render_patients_page(components)
    elif page == "🔬 Lab Queue":
        render_lab_queue_page(components)
    elif page == "💵 Cash Reconciliation":
        render_reconciliation_page(components)
    elif page == "⚙️ Settings":
        render_settings_page()


def render_login_page(components: AppComponents):
    """Render the sign-in form."""
    st.title("🧪 BP Diagnostic Back Office")
    st.markdown("Sign in with your staff account.")

    with st.form("login"):
        username = st.text_input("Username")
        password = st.text_input("Password", type="password")
        remember = st.checkbox("Remember me")
        submitted = st.form_submit_button("Sign in", type="primary")

    if submitted:
        try:
            run_async(components.auth.login(username, password, remember=remember))
        except FormValidationError as e:
            st.error(e.message)
            return
        except RequestValidationError as e:
            for field in ("username", "password"):
                if e.first_error(field):
                    st.error(e.first_error(field))
            return
        except ApiError as e:
            show_api_error(e, "Unable to log in. Please double-check your credentials.")
            return
        st.rerun()


def render_dashboard_page(components: AppComponents):
    """Render headline stats for the selected period."""
    st.title("📊 Dashboard")

    period = st.radio(
        "Period",
        PERIODS,
        format_func=lambda p: PERIOD_LABELS[p],
        horizontal=True,
    )

    try:
        dashboard = run_async(components.dashboard.get(period))
    except ApiError as e:
        show_api_error(e, "Failed to load dashboard data.")
        return

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Revenue", format_currency(dashboard.stats.total_revenue))
    col2.metric("Patients Today", dashboard.stats.patients_today)
    col3.metric("Low Stock Items", dashboard.stats.low_stock_items)
    col4.metric("Pending Tests", dashboard.stats.pending_tests)

    if dashboard.revenue_chart:
        st.markdown("### Revenue")
        st.bar_chart(
            {
                "label": [point.label for point in dashboard.revenue_chart],
                "revenue": [point.value for point in dashboard.revenue_chart],
            },
            x="label",
            y="revenue",
        )

    if dashboard.low_stock:
        st.markdown("### Low Stock")
        for item in dashboard.low_stock:
            st.progress(
                min(item.percentage, 100) / 100,
                text=f"{item.name}: {item.current_stock:g} / {item.minimum_stock:g} {item.unit or ''}",
            )


def render_patients_page(components: AppComponents):
    """Render the patient list with search."""
    st.title("👥 Patients")

    search = st.text_input("Search patients", placeholder="Name or contact number")
    page_number = st.number_input("Page", min_value=1, value=1, step=1)

    try:
        page = run_async(components.patients.list(page=int(page_number), search=search))
    except ApiError as e:
        show_api_error(e, "Failed to load patients")
        return

    if page.is_empty:
        st.info("No patients found.")
        return

    st.caption(f"Page {page.current_page} of {page.last_page}")
    for patient in page.data:
        with st.expander(f"{patient.full_name} · {patient.age or '?'} · {patient.gender or ''}"):
            st.markdown(f"Contact: {patient.contact_number or 'N/A'}")
            st.markdown(f"Transactions: {patient.total_transactions}")
            st.markdown(f"Total spent: {format_currency(patient.total_spent)}")


def render_lab_queue_page(components: AppComponents):
    """Render queue counts and tests by status."""
    st.title("🔬 Lab Queue")

    try:
        summary = run_async(components.lab_queue.summary())
    except ApiError as e:
        show_api_error(e, "Failed to load lab queue")
        return

    counts = summary.counts
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Pending", counts.pending)
    col2.metric("Processing", counts.processing)
    col3.metric("Completed", counts.completed)
    col4.metric("Released", counts.released)

    status = st.selectbox(
        "Status",
        [s.value for s in LabStatus] + ["all"],
        format_func=lambda s: s.title(),
    )
    try:
        tests = run_async(components.lab_queue.tests(status=status))
    except ApiError as e:
        show_api_error(e, "Failed to load tests")
        return

    if tests.is_empty:
        st.info("No tests in this stage.")
    for test in tests.data:
        st.markdown(f"**{test.test}** · {test.patient} · `{test.status.value}`")


def render_reconciliation_page(components: AppComponents):
    """Render the cash count form and the reconciliation history."""
    st.title("💵 Cash Reconciliation")
    workflow = components.reconciliation

    # Step 1: Count
    st.markdown("### New count")
    if workflow.create_data is None:
        if st.button("Start cash count", type="primary"):
            try:
                run_async(workflow.start())
            except ApiError as e:
                show_api_error(e, "Failed to load reconciliation data")
            else:
                st.rerun()
    else:
        data = workflow.create_data
        col1, col2 = st.columns(2)
        col1.metric("Expected cash", format_currency(data.expected_cash))
        col2.metric("Cash transactions", data.transaction_count)

        actual_text = st.text_input("Actual cash counted", placeholder="Enter actual cash amount")
        notes = st.text_area("Notes (optional)")

        # Step 2: Preview
        if actual_text:
            try:
                preview = workflow.preview(actual_text)
                st.markdown(
                    f"**{status_label(preview.status)}** · variance {format_variance(preview.variance)}"
                )
            except FormValidationError as e:
                st.warning(e.message)

        # Step 3: Submit
        if st.button("Submit reconciliation", type="primary", disabled=workflow.submitting):
            try:
                receipt = run_async(workflow.submit(actual_text, notes=notes))
                st.success(receipt.message)
            except FormValidationError as e:
                st.error(e.message)
            except DuplicateSubmissionError as e:
                st.warning(str(e))
            except ApiError as e:
                show_api_error(e, "Failed to create reconciliation")

    st.markdown("---")

    # History
    st.markdown("### History")
    col1, col2 = st.columns(2)
    with col1:
        search = st.text_input("Search by cashier")
    with col2:
        status = st.selectbox(
            "Status",
            ["all"] + [s.value for s in ReconciliationStatus],
            format_func=lambda s: "All" if s == "all" else status_label(s),
        )

    listing = st.session_state.get("reconciliation_list")
    filters = {"search": search or None, "status": None if status == "all" else status}
    if listing is None:
        listing = workflow.list_view(**filters)
        st.session_state.reconciliation_list = listing
        run_async(listing.refresh())
    elif listing.filters != {k: v for k, v in filters.items() if v}:
        run_async(listing.set_filters(**filters))

    if listing.last_error:
        show_api_error(listing.last_error, "Failed to load reconciliations")

    stats = getattr(listing.last_result, "stats", None)
    if stats:
        col1, col2, col3, col4 = st.columns(4)
        col1.metric("Total", stats.total_reconciliations)
        col2.metric("Balanced", stats.balanced_count)
        col3.metric("Overage", f"{stats.overage_count} · {format_currency(stats.total_overage)}")
        col4.metric("Shortage", f"{stats.shortage_count} · {format_currency(stats.total_shortage)}")

    if listing.is_empty:
        st.info("No reconciliations yet.")
    for record in listing.items:
        cashier = record.cashier.name if record.cashier else "Unknown"
        st.markdown(
            f"**{record.reconciliation_date or ''}** · {cashier} · "
            f"{format_currency(record.expected_cash)} expected · "
            f"{format_currency(record.actual_cash)} counted · "
            f"{format_variance(record.variance)} · {status_label(record.status)}"
        )

    if listing.has_more and st.button("Load more"):
        run_async(listing.load_more())
        st.rerun()


def render_settings_page():
    """Render the configuration status."""
    st.title("⚙️ Settings")

    st.markdown("### Configuration")
    status = validate_all_settings()
    groups = [
        ("API connection", "api"),
        ("Session storage", "session"),
        ("Application", "app"),
    ]
    for name, key in groups:
        if status.get(key, False):
            st.success(f"✅ {name}")
        else:
            st.error(f"❌ {name} - {status.get(f'{key}_error', 'Invalid')}")

    st.markdown(
        "Settings are read from environment variables (`BP_API_*`, `BP_SESSION_*`) "
        "or a `.env` file."
    )


if __name__ == "__main__":
    main()
