import streamlit as st
import pandas as pd
from datetime import date

from ui.header import breakdown_summary, global_header
from utils.api import api_delete, api_get, api_patch, api_post, api_put

st.set_page_config(page_title="Admin Dashboard", layout="wide")
st.markdown("""
<style>
section[data-testid="stSidebar"] { display: none; }
</style>
""", unsafe_allow_html=True)

# ======================================================
# SESSION GUARD
# ======================================================
if st.session_state.get("kind") != "admin":
    st.session_state.clear()
    st.switch_page("app.py")
    st.stop()

global_header("admin", st.session_state.get("person_name", ""))

if st.button("Switch person"):
    st.session_state.clear()
    st.switch_page("app.py")

MENU_PENDING = "⏳ Pending Leaves"
MENU_ALL = "📜 All Leaves"
MENU_HOLIDAYS = "📅 Company Holidays"
MENU_BALANCES = "🧮 Leave Balances"
MENU_PERMISSIONS = "🔐 Permissions"

menu = st.radio(
    "Menu",
    [MENU_PENDING, MENU_ALL, MENU_HOLIDAYS, MENU_BALANCES, MENU_PERMISSIONS],
    horizontal=True
)


def _fmt(value):
    return value or "-"


def _period(leave):
    if leave["category"] == "multi-day":
        return f"{_fmt(leave['from_date'])} → {_fmt(leave['to_date'])}"
    return _fmt(leave["leave_date"])


LEAVE_TYPES = ["Casual Leave", "Sick Leave", "Paid Leave"]


# ======================================================
# 1. PENDING LEAVES
# ======================================================
if menu == MENU_PENDING:
    st.subheader("⏳ Pending Leaves")

    if st.button("🔄 Refresh"):
        st.rerun()

    r = api_get("/leaves/pending", timeout=5)
    leaves = r.json() if r.status_code == 200 else []

    if not leaves:
        st.info("No pending leave requests.")

    for leave in leaves:
        leave_id = leave["id"]
        multi = leave["category"] == "multi-day"

        if multi:
            period = f"From: {_fmt(leave['from_date'])} To: {_fmt(leave['to_date'])}"
        else:
            period = f"Date: {_fmt(leave['leave_date'])}"

        with st.expander(f"{leave['user_name']} | {leave['leave_type']} | {period}"):
            st.write(f"Type: {'Multi-day' if multi else 'Single Day'}")
            st.write(f"Reason: {leave.get('reason') or '-'}")

            # breakdown kept current by the backend
            if multi and leave.get("breakdown"):
                breakdown_summary(leave["breakdown"])

            col1, col2 = st.columns(2)
            with col1:
                approve = st.button("✅ Approve", key=f"ok_{leave_id}")
            with col2:
                decline = st.button("❌ Decline", key=f"no_{leave_id}")

            if approve or decline:
                d = api_post(
                    f"/leaves/{leave_id}/decision",
                    json={"status": "approved" if approve else "rejected"},
                    timeout=5
                )
                if d.status_code == 200:
                    st.success("Decision saved")
                    st.rerun()
                else:
                    st.error(d.json().get("detail", "Failed to save decision"))

# ======================================================
# 2. ALL LEAVES
# ======================================================
elif menu == MENU_ALL:
    st.subheader("📜 All Leaves")

    # member options come from everyone who has filed a leave
    r = api_get("/leaves", timeout=5)
    everyone_leaves = r.json() if r.status_code == 200 else []
    people = {l["user_id"]: l["user_name"] for l in everyone_leaves}

    col1, col2, col3 = st.columns(3)
    with col1:
        status_filter = st.selectbox("Status", ["all", "pending", "approved", "rejected"])
    with col2:
        member_filter = st.selectbox(
            "Member",
            ["all"] + sorted(people, key=lambda i: people[i]),
            format_func=lambda i: "All members" if i == "all" else people[i],
        )
    with col3:
        search = st.text_input("Search by name or leave type")

    params = {} if status_filter == "all" else {"status": status_filter}
    if member_filter != "all":
        params["user_id"] = member_filter
    r = api_get("/leaves", params=params, timeout=5)
    leaves = r.json() if r.status_code == 200 else []

    if search:
        term = search.lower()
        leaves = [
            l for l in leaves
            if term in l["user_name"].lower() or term in (l["leave_type"] or "").lower()
        ]

    if not leaves:
        st.info("No leaves found.")
    else:
        df = pd.DataFrame(leaves)
        df = df[[
            "user_name", "category", "leave_type", "leave_date",
            "from_date", "to_date", "status", "created_at"
        ]]
        df.columns = ["Member", "Category", "Type", "Date", "From", "To", "Status", "Submitted At"]
        st.dataframe(df, width="stretch")

        # =========================
        # EDIT / DELETE
        # =========================
        st.markdown("### ✏️ Edit Leave")

        by_id = {l["id"]: l for l in leaves}
        picked = st.selectbox(
            "Leave",
            list(by_id),
            format_func=lambda i: f"{by_id[i]['user_name']} | {by_id[i]['leave_type']} | {_period(by_id[i])}",
        )
        leave = by_id[picked]
        multi = leave["category"] == "multi-day"

        col1, col2 = st.columns(2)
        with col1:
            new_type = st.selectbox(
                "Leave Type",
                LEAVE_TYPES,
                index=LEAVE_TYPES.index(leave["leave_type"]) if leave["leave_type"] in LEAVE_TYPES else 0,
                key=f"type_{picked}",
            )
            if multi:
                new_from = st.date_input("From", value=date.fromisoformat(leave["from_date"]), key=f"from_{picked}")
                new_to = st.date_input("To", value=date.fromisoformat(leave["to_date"]), key=f"to_{picked}")
            else:
                new_day = st.date_input("Date", value=date.fromisoformat(leave["leave_date"]), key=f"day_{picked}")
        with col2:
            new_reason = st.text_area("Reason", value=leave.get("reason") or "", key=f"reason_{picked}")

        col1, col2 = st.columns(2)
        with col1:
            if st.button("Save Changes", key=f"save_{picked}"):
                payload = {"leave_type": new_type, "reason": new_reason or None}
                if multi:
                    payload["from_date"] = new_from.isoformat()
                    payload["to_date"] = new_to.isoformat()
                else:
                    payload["leave_date"] = new_day.isoformat()

                u = api_patch(f"/leaves/{picked}", json=payload, timeout=5)
                if u.status_code == 200:
                    st.success("Leave updated successfully!")
                    st.rerun()
                else:
                    st.error(f"Failed to update leave: {u.json().get('detail')}")
        with col2:
            if st.button("Delete Leave", key=f"drop_{picked}"):
                d = api_delete(f"/leaves/{picked}", timeout=5)
                if d.status_code == 204:
                    st.success("Leave deleted successfully!")
                    st.rerun()
                else:
                    st.error("Failed to delete leave")

# ======================================================
# 3. COMPANY HOLIDAYS
# ======================================================
elif menu == MENU_HOLIDAYS:
    st.subheader("📅 Company Holidays")

    # =========================
    # ADD HOLIDAY
    # =========================
    st.markdown("### ➕ Add Holiday")

    with st.form("add_holiday"):
        col1, col2 = st.columns(2)
        with col1:
            holiday_name = st.text_input("Holiday Name")
            holiday_date = st.date_input("Holiday Date", value=date.today())
        with col2:
            holiday_desc = st.text_input("Description")
            recurring = st.checkbox("Repeats every year")

        add = st.form_submit_button("Add Holiday")

    if add:
        if not holiday_name:
            st.error("Holiday name is required")
        else:
            r = api_post("/holidays", json={
                "holiday_name": holiday_name,
                "date": holiday_date.isoformat(),
                "description": holiday_desc or None,
                "is_recurring": recurring,
            }, timeout=5)
            if r.status_code == 201:
                st.success("Holiday added successfully!")
                st.rerun()
            else:
                st.error(f"Failed to add holiday: {r.json().get('detail')}")

    st.divider()

    # =========================
    # LIST HOLIDAYS
    # =========================
    st.markdown("### 📋 Holiday List")

    year = st.number_input("Year", value=date.today().year, step=1)
    r = api_get("/holidays", params={"year": int(year)}, timeout=5)
    holidays = r.json() if r.status_code == 200 else []

    if not holidays:
        st.info("No holidays defined")

    for h in holidays:
        hid = h["id"]
        label = f"{h['date']} — {h['holiday_name']}"
        if h["is_recurring"]:
            label += " (every year)"

        with st.expander(label):
            col1, col2 = st.columns(2)

            # EDIT
            with col1:
                new_name = st.text_input("Holiday Name", value=h["holiday_name"], key=f"name_{hid}")
                new_desc = st.text_input("Description", value=h.get("description") or "", key=f"desc_{hid}")

                if st.button("Update", key=f"update_{hid}"):
                    u = api_patch(f"/holidays/{hid}", json={
                        "holiday_name": new_name,
                        "description": new_desc or None,
                    }, timeout=5)
                    if u.status_code == 200:
                        st.success("Holiday updated successfully!")
                        st.rerun()
                    else:
                        st.error("Failed to update holiday")

            # DELETE
            with col2:
                st.warning("Danger Zone")
                if st.button("Delete", key=f"delete_{hid}"):
                    d = api_delete(f"/holidays/{hid}", timeout=5)
                    if d.status_code == 204:
                        st.success("Holiday deleted successfully!")
                        st.rerun()
                    else:
                        st.error("Failed to delete holiday")

# ======================================================
# 4. LEAVE BALANCES
# ======================================================
elif menu == MENU_BALANCES:
    st.subheader("🧮 Leave Balances")

    year = st.number_input("Year", value=date.today().year, step=1, key="balance_year")
    r = api_get("/balances", params={"year": int(year)}, timeout=5)
    balances = r.json() if r.status_code == 200 else []

    if not balances:
        st.info("No members or project managers found")
    else:
        df = pd.DataFrame(balances)
        df = df[["name", "person_kind", "sick_leaves", "casual_leaves", "paid_leaves"]]
        df["person_kind"] = df["person_kind"].str.replace("_", " ").str.title()
        df.columns = ["Name", "Role", "Sick", "Casual", "Paid"]
        st.dataframe(df, width="stretch")

    for b in balances:
        pid = b["person_id"]
        with st.expander(f"{b['name']} ({b['person_kind'].replace('_', ' ')})"):
            col1, col2, col3 = st.columns(3)
            with col1:
                sick = st.number_input("Sick", min_value=0, value=b["sick_leaves"], step=1, key=f"sick_{pid}")
            with col2:
                casual = st.number_input("Casual", min_value=0, value=b["casual_leaves"], step=1, key=f"casual_{pid}")
            with col3:
                paid = st.number_input("Paid", min_value=0, value=b["paid_leaves"], step=1, key=f"paid_{pid}")

            if st.button("Save Balance", key=f"balance_{pid}"):
                u = api_put(f"/balances/{pid}", json={
                    "year": int(year),
                    "sick_leaves": int(sick),
                    "casual_leaves": int(casual),
                    "paid_leaves": int(paid),
                }, timeout=5)
                if u.status_code == 200:
                    st.success("Balance saved")
                    st.rerun()
                else:
                    st.error(f"Failed to save balance: {u.json().get('detail')}")

# ======================================================
# 5. PERMISSIONS
# ======================================================
elif menu == MENU_PERMISSIONS:
    st.subheader("🔐 Permission Settings")
    st.caption("Admins always have every permission.")

    for role in ["project_manager", "member"]:
        st.markdown(f"### {role.replace('_', ' ').title()}")

        r = api_get(f"/permissions/{role}", timeout=5)
        permissions = r.json() if r.status_code == 200 else []
        permissions.sort(key=lambda p: (p["permission_type"], p["action"]))

        for p in permissions:
            enabled = st.toggle(
                f"{p['permission_type']} · {p['action']}",
                value=p["is_enabled"],
                key=f"perm_{p['id']}"
            )
            if enabled != p["is_enabled"]:
                api_patch(f"/permissions/{p['id']}", json={"is_enabled": enabled}, timeout=5)
                st.rerun()
