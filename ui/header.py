import streamlit as st

from core.config import settings


def global_header(role: str = "", name: str = ""):
    col1, col2 = st.columns([6, 2])

    # === TITLE (LEFT) ===
    with col1:
        st.markdown(
            f"""
            <h3 style='margin-bottom:0;'>{settings.PROJECT_TITLE}</h3>
            <p style='color:gray; margin-top:0;'>
                Leaves • Holidays • Permissions
            </p>
            """,
            unsafe_allow_html=True
        )

    # === ACTING PERSON (RIGHT) ===
    with col2:
        if name or role:
            st.markdown(
                f"""
                <div style='text-align:right; padding-top:22px;'>
                    👤 <b>{name}</b> {f"({role})" if role else ""}
                </div>
                """,
                unsafe_allow_html=True
            )

    st.divider()


def breakdown_summary(info: dict | None):
    """Labeled summary of a leave's day breakdown."""
    if not info:
        return

    st.markdown(
        f"""
        <div style="font-size:13px; background:#f9fafb; border-radius:6px; padding:8px;">
            <b>Total days:</b> {info['total_days']} &nbsp;|&nbsp;
            <b>Sundays:</b> {info['sundays']} &nbsp;|&nbsp;
            <b>Holidays:</b> {info['holidays']} &nbsp;|&nbsp;
            <b>Already leave:</b> {info['already_leave']} &nbsp;|&nbsp;
            <b>Leave days:</b> {info['countable_leave_days']}
        </div>
        """,
        unsafe_allow_html=True
    )
