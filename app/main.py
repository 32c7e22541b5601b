# app/main.py

import streamlit as st
from dotenv import load_dotenv
from ui.login import login_page, logout
from ui.posts import posts_page


load_dotenv()


def main_page():
    st.sidebar.markdown(f"## 👋 {st.session_state.get('username', '')}")

    if st.sidebar.button("🔓 Sign out"):
        logout()
        st.session_state.clear()
        st.rerun()

    posts_page()


if "access_token" not in st.session_state:
    login_page()
else:
    main_page()
