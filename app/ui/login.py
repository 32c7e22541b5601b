# app/ui/login.py

import os
import streamlit as st
from dotenv import load_dotenv
from streamlit_cookies_manager import EncryptedCookieManager
from services.api import ApiError, login_user, logout_user, register_user

load_dotenv()

COOKIE_PASSWORD = os.getenv("COOKIE_PASSWORD", "dev-cookie-password-change-me")

cookies = EncryptedCookieManager(prefix="blog/", password=COOKIE_PASSWORD)
if not cookies.ready():
    st.stop()


def logout():
    token = st.session_state.get("access_token")
    if token:
        logout_user(token)
    cookies.clear()
    cookies.save()


def login_page():
    st.title("🔐 Sign in")

    if "access_token" not in st.session_state:
        if cookies.get("access_token"):
            st.session_state["access_token"] = cookies["access_token"]
            st.session_state["username"] = cookies.get("username", "")
            st.rerun()

    if "show_register" not in st.session_state:
        st.session_state["show_register"] = False

    if st.session_state["show_register"]:
        show_register_form()
    else:
        show_login_form()


def show_login_form():
    with st.form("login_form"):
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Sign in")

    if submitted:
        with st.spinner("Signing in..."):
            try:
                token, user = login_user(email, password)
            except ApiError as e:
                st.error(f"❌ {e.message}")
            else:
                st.session_state["access_token"] = token
                st.session_state["username"] = user["username"]
                cookies["access_token"] = token
                cookies["username"] = user["username"]
                cookies.save()

                st.success("✅ Signed in")
                st.rerun()

    if st.button("Create an account"):
        st.session_state["show_register"] = True
        st.rerun()


def show_register_form():
    st.subheader("📝 Register")

    with st.form("register_form"):
        username = st.text_input("Username")
        email = st.text_input("Email")
        full_name = st.text_input("Full name")
        password = st.text_input("Password (at least 8 characters)", type="password")
        submitted = st.form_submit_button("Register")

    if submitted:
        with st.spinner("Creating account..."):
            try:
                register_user(username, email, password, full_name)
            except ApiError as e:
                st.error(f"❌ {e.message}")
            else:
                st.success("🎉 Account created. You can sign in now.")
                st.session_state["show_register"] = False
                st.rerun()

    if st.button("← Back to sign in"):
        st.session_state["show_register"] = False
        st.rerun()
