import streamlit as st
import pandas as pd
from datetime import date

from ui.header import breakdown_summary, global_header
from utils.api import api_get, api_patch, api_post

# ======================================================
# SESSION GUARD
# ======================================================
st.set_page_config(page_title="Member Dashboard", layout="wide")
st.markdown("""
<style>
section[data-testid="stSidebar"] { display: none; }
</style>
""", unsafe_allow_html=True)

user_id = st.session_state.get("person_id")

if not user_id:
    st.warning("Please choose who you are first.")
    st.switch_page("app.py")
    st.stop()

kind = st.session_state.get("kind", "member")

global_header(kind.replace("_", " "), st.session_state.get("person_name", ""))

if st.button("Switch person"):
    st.session_state.clear()
    st.switch_page("app.py")

# ======================================================
# MENU
# ======================================================
MENU_LEAVE = "➕ Apply for Leave"
MENU_HISTORY = "📜 Leave History"
MENU_NOTIFICATIONS = "🔔 Notifications"
menu = st.radio(
    "Menu",
    [MENU_LEAVE, MENU_HISTORY, MENU_NOTIFICATIONS],
    horizontal=True
)

# ======================================================
# APPLY FOR LEAVE
# ======================================================
if menu == MENU_LEAVE:
    st.subheader("➕ Apply for Leave")

    multi = st.checkbox("Multiple days (date range)", value=False)

    col1, col2 = st.columns(2)
    with col1:
        leave_type = st.selectbox("Leave Type", ["Casual Leave", "Sick Leave", "Paid Leave"])
        if multi:
            from_date = st.date_input("From", value=date.today())
            to_date = st.date_input("To", value=date.today())
        else:
            leave_date = st.date_input("Date", value=date.today())
    with col2:
        reason = st.text_area("Reason", height=120)

    # live preview of the days that would be debited
    if multi:
        if to_date < from_date:
            st.error("End date cannot be earlier than start date.")
            st.stop()

        p = api_post("/leaves/breakdown/preview", json={
            "user_id": user_id,
            "from_date": from_date.isoformat(),
            "to_date": to_date.isoformat(),
        }, timeout=5)
        if p.status_code == 200:
            breakdown_summary(p.json())

    if st.button("Submit Leave Request"):
        payload = {
            "user_id": user_id,
            "leave_type": leave_type,
            "category": "multi-day" if multi else "single-day",
            "reason": reason or None,
        }
        if multi:
            payload["from_date"] = from_date.isoformat()
            payload["to_date"] = to_date.isoformat()
        else:
            payload["leave_date"] = leave_date.isoformat()

        r = api_post("/leaves", json=payload, timeout=5)
        if r.status_code == 201:
            st.success("✅ Leave request submitted and waiting for approval.")
        else:
            st.error(f"Failed to submit leave: {r.json().get('detail')}")

# ======================================================
# LEAVE HISTORY
# ======================================================
elif menu == MENU_HISTORY:
    st.subheader("📜 Leave History")

    r = api_get("/leaves", params={"user_id": user_id}, timeout=5)
    rows = r.json() if r.status_code == 200 else []

    if not rows:
        st.info("No leave history found.")
    else:
        df = pd.DataFrame(rows)
        df["Period"] = [
            f"{x['from_date']} → {x['to_date']}" if x["category"] == "multi-day" else x["leave_date"]
            for x in rows
        ]
        df = df[["Period", "leave_type", "status", "created_at"]]
        df.columns = ["Period", "Type", "Status", "Submitted At"]
        st.dataframe(df, width="stretch")

# ======================================================
# NOTIFICATIONS
# ======================================================
elif menu == MENU_NOTIFICATIONS:
    st.subheader("🔔 Notifications")

    r = api_get(f"/notifications/{user_id}", timeout=5)
    notifications = r.json()["notifications"] if r.status_code == 200 else []

    if not notifications:
        st.info("No notifications.")

    for n in notifications:
        marker = "" if n["is_read"] else "🆕 "
        st.markdown(f"{marker}**{n['title']}**  \n{n.get('message') or ''}")
        st.caption(n.get("created_at") or "")

        if not n["is_read"] and st.button("Mark as read", key=f"read_{n['id']}"):
            m = api_patch(f"/notifications/{n['id']}/read", timeout=5)
            if m.status_code == 204:
                st.rerun()
            else:
                st.error("Failed to update notification")
