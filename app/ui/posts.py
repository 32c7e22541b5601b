# app/ui/posts.py

import streamlit as st
from services.api import ApiError, SessionExpired, create_post, list_posts

PAGE_SIZE = 10


def _expire_session():
    st.session_state.pop("access_token", None)
    st.warning("Your session has expired. Please sign in again.")
    st.rerun()


def posts_page():
    st.title("📰 Blog Posts")
    st.caption("Discover and read amazing content")

    token = st.session_state["access_token"]
    st.session_state.setdefault("posts_page", 1)

    if st.button("➕ Create Post"):
        st.session_state["show_create"] = not st.session_state.get("show_create", False)

    if st.session_state.get("show_create"):
        handle_create(token)

    query = st.text_input("🔍 Search posts", key="posts_query")
    if query != st.session_state.get("last_query", ""):
        st.session_state["last_query"] = query
        st.session_state["posts_page"] = 1

    try:
        result = list_posts(token, page=st.session_state["posts_page"], page_size=PAGE_SIZE, query=query.strip())
    except SessionExpired:
        _expire_session()
        return
    except ApiError as e:
        st.error(e.message)
        return

    render_posts(result["items"])
    render_pager(result["total"], result["page"], result["page_size"])


def render_posts(items):
    if not items:
        st.info("No posts found.")
        return

    for post in items:
        with st.container(border=True):
            st.subheader(post["title"])
            st.caption(f"by {post['author']} · {post['created_at'][:10]}")
            st.write(post["content"])


def render_pager(total, page, page_size):
    pages = max(1, -(-total // page_size))
    col_prev, col_info, col_next = st.columns([1, 2, 1])

    with col_prev:
        if st.button("← Previous", disabled=page <= 1):
            st.session_state["posts_page"] = page - 1
            st.rerun()
    with col_info:
        st.write(f"Page {page} of {pages} · {total} posts")
    with col_next:
        if st.button("Next →", disabled=page >= pages):
            st.session_state["posts_page"] = page + 1
            st.rerun()


def handle_create(token):
    with st.form("create_post_form"):
        title = st.text_input("Title")
        author = st.text_input("Author", value=st.session_state.get("username", ""))
        content = st.text_area("Content")
        submitted = st.form_submit_button("Publish")

    if not submitted:
        return

    if not title.strip() or not content.strip() or not author.strip():
        st.error("Please fill in all fields")
        return

    with st.spinner("Checking your post..."):
        try:
            create_post(token, title, content, author)
        except SessionExpired:
            _expire_session()
            return
        except ApiError as e:
            st.error(f"❌ {e.message}")
            return

    st.success("🎉 Post created successfully!")
    st.session_state["show_create"] = False
    st.session_state["posts_page"] = 1
    st.rerun()
