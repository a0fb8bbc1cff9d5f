# app.py
"""
Sales Operations Dashboard - Main Entry Point

Login page plus a welcome screen; the dashboards live under pages/.

Version: 1.0.0
"""

import streamlit as st
from sales_ops.auth import AuthManager, UserSession
from sales_ops.db import check_db_connection, get_connection_pool_status
from sales_ops.config import config
import logging

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if config.get_app_setting("ENABLE_DEBUG_MODE", False) else logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# ==================== PAGE CONFIGURATION ====================

APP_NAME = "Sales Operations"
APP_ICON = "📊"
APP_VERSION = "1.0.0"

st.set_page_config(
    page_title=f"{APP_NAME} Dashboard",
    page_icon=APP_ICON,
    layout="wide",
    initial_sidebar_state="expanded"
)

# ==================== CUSTOM CSS ====================

st.markdown("""
<style>
    .main-header {
        font-size: 2.5rem;
        font-weight: bold;
        margin-bottom: 0.5rem;
        color: #1f77b4;
    }

    .sub-header {
        font-size: 1.1rem;
        color: #666;
        margin-bottom: 2rem;
    }

    .welcome-box {
        background: linear-gradient(120deg, #1f77b4 0%, #27ae60 100%);
        color: white;
        padding: 2rem;
        border-radius: 0.75rem;
        margin-bottom: 2rem;
    }

    .welcome-title {
        font-size: 1.75rem;
        font-weight: 600;
        margin-bottom: 0.5rem;
    }

    .welcome-subtitle {
        opacity: 0.9;
        font-size: 1rem;
    }
</style>
""", unsafe_allow_html=True)

# ==================== INITIALIZATION ====================

session = UserSession(st.session_state)
auth = AuthManager(session)

# ==================== HELPER FUNCTIONS ====================

def show_login_page():
    """Display the login page"""
    st.markdown(f'<p class="main-header">{APP_ICON} {APP_NAME}</p>', unsafe_allow_html=True)
    st.markdown('<p class="sub-header">Agents, customers and acquisition at a glance</p>', unsafe_allow_html=True)

    # Check database connection
    db_ok, db_error = check_db_connection()
    if not db_ok:
        st.error(f"⚠️ {db_error}")
        st.info("Please check your network connection or contact support.")
        return

    # Center the login form
    col1, col2, col3 = st.columns([1, 2, 1])

    with col2:
        with st.form("login_form", clear_on_submit=False):
            st.markdown("#### 🔐 Login")

            email = st.text_input(
                "Email",
                placeholder="you@company.com",
                key="login_email"
            )
            password = st.text_input(
                "Password",
                type="password",
                placeholder="Enter your password",
                key="login_password"
            )

            submit = st.form_submit_button(
                "🔑 Login",
                type="primary",
                use_container_width=True
            )

            if submit:
                with st.spinner("Authenticating..."):
                    success, result = auth.authenticate(email, password)

                if success:
                    auth.login(result)
                    st.success("✅ Login successful!")
                    st.rerun()
                else:
                    st.error(result.get("error", "Authentication failed"))

        with st.expander("ℹ️ Need Help?"):
            st.info(f"""
            - Sign in with your dashboard e-mail and password
            - Contact your administrator if your account is inactive
            - Session expires after {config.get_app_setting("SESSION_TIMEOUT_HOURS", 8)} hours
            """)


def show_main_app():
    """Display the welcome screen after login"""

    # Sidebar
    with st.sidebar:
        st.markdown(f"### 👤 {session.display_name}")
        st.caption(f"{session.account_name} · {session.account_number}")
        st.caption(f"Last login: {session.last_login_display}")
        st.markdown("---")

        # Logout
        if st.button("🚪 Logout", use_container_width=True):
            auth.logout()
            st.rerun()

    # Main content - Welcome
    st.markdown(f"""
    <div class="welcome-box">
        <div class="welcome-title">Welcome, {session.display_name}! 👋</div>
        <div class="welcome-subtitle">Select a page from the sidebar menu to get started.</div>
    </div>
    """, unsafe_allow_html=True)

    st.markdown("### 📊 Available Pages")

    st.page_link("pages/1_📊_Dashboard.py", label="Dashboard: totals, weekly and monthly acquisition, top and inactive agents", icon="📊")
    st.page_link("pages/2_🪪_Agents.py", label="Agents: search, sort, export and rename", icon="🪪")
    st.page_link("pages/3_👥_Customers.py", label="Customers: search, sort and export with their agent", icon="👥")

    # System Status (debug mode only)
    if config.get_app_setting("ENABLE_DEBUG_MODE", False):
        st.markdown("---")
        with st.expander("🔧 System Status"):
            pool_status = get_connection_pool_status()

            col1, col2, col3 = st.columns(3)
            with col1:
                st.metric("Pool", pool_status.get("status", "unknown"))
            with col2:
                st.metric("Checked Out", pool_status.get("checked_out", 0))
            with col3:
                st.metric("Idle", pool_status.get("checked_in", 0))

    st.markdown("---")
    st.caption(f"{APP_NAME} v{APP_VERSION}")


# ==================== MAIN ====================

def main():
    """Main application entry point"""
    if not auth.check_session():
        show_login_page()
    else:
        show_main_app()


if __name__ == "__main__":
    main()
