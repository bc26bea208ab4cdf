import streamlit as st

from core.db import RowStore, get_conn, init_db
from core.directory import DirectoryKind, everyone
from core.seed import seed_defaults

# Schema + defaults (idempotent)
conn = get_conn()
init_db(conn)
store = RowStore(conn)
seed_defaults(store)

st.set_page_config(page_title="Brokerage Back Office", layout="wide")

# Hide sidebar
st.markdown("""
<style>
section[data-testid="stSidebar"] { display: none; }
</style>
""", unsafe_allow_html=True)

# ==========================
# ALREADY CHOSEN
# ==========================
if st.session_state.get("person_id"):
    if st.session_state.get("kind") == DirectoryKind.ADMIN.value:
        st.switch_page("pages/admin.py")
    else:
        st.switch_page("pages/member.py")

# ==========================
# CHOOSE ACTING PERSON
# ==========================
st.title("🏢 Brokerage Back Office")

people = [p for p in everyone(store) if p.kind != DirectoryKind.BROKER]
store.close()

if not people:
    st.info("No people in the directory yet.")
    st.stop()

labels = {f"{p.name} ({p.kind.value.replace('_', ' ')})": p for p in people}
selected = st.selectbox("Continue as", list(labels.keys()))

if st.button("Open"):
    person = labels[selected]
    st.session_state["person_id"] = person.id
    st.session_state["person_name"] = person.name
    st.session_state["kind"] = person.kind.value
    st.rerun()
