# app/services/api.py

import os
import requests

# Base URL of the FastAPI backend
FASTAPI_URL = os.getenv("BLOG_API_URL", "http://localhost:8000")

# The server answers within its own moderation bound; leave some headroom.
TIMEOUT = 40


class ApiError(Exception):
    """
    Raised when the backend answers with an error. Carries the server's message.
    """
    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class SessionExpired(ApiError):
    pass


def _error_message(response, fallback):
    try:
        return response.json().get("error") or fallback
    except ValueError:
        return fallback


def _check(response, fallback):
    if response.status_code == 401:
        raise SessionExpired(_error_message(response, "Authentication required"), 401)
    if not response.ok:
        raise ApiError(_error_message(response, fallback), response.status_code)
    return response.json()


def _auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


# -------------------------------
# Authentication-related functions
# -------------------------------

def register_user(username, email, password, full_name=""):
    response = requests.post(
        f"{FASTAPI_URL}/api/auth/register",
        json={"username": username, "email": email, "password": password, "full_name": full_name},
        timeout=TIMEOUT,
    )
    if not response.ok:
        raise ApiError(_error_message(response, "Registration failed"), response.status_code)
    return response.json()


def login_user(email, password):
    """
    Logs in and returns (session_token, user). The token comes from the
    auth_token cookie and is sent back later as a bearer header.
    """
    response = requests.post(
        f"{FASTAPI_URL}/api/auth/login",
        json={"email": email, "password": password},
        timeout=TIMEOUT,
    )
    if not response.ok:
        raise ApiError(_error_message(response, "Login failed"), response.status_code)

    token = response.cookies.get("auth_token")
    if not token:
        raise ApiError("Login response did not include a session", response.status_code)
    return token, response.json()["user"]


def logout_user(token):
    response = requests.post(
        f"{FASTAPI_URL}/api/auth/logout",
        headers=_auth_headers(token),
        timeout=TIMEOUT,
    )
    return response.ok


# -------------------------
# Posts
# -------------------------

def list_posts(token, page=1, page_size=10, query=""):
    params = {"page": page, "page_size": page_size}
    if query:
        params["q"] = query
    response = requests.get(
        f"{FASTAPI_URL}/api/posts",
        params=params,
        headers=_auth_headers(token),
        timeout=TIMEOUT,
    )
    return _check(response, "Failed to load posts")


def create_post(token, title, content, author):
    response = requests.post(
        f"{FASTAPI_URL}/api/posts/create",
        json={"title": title, "content": content, "author": author},
        headers=_auth_headers(token),
        timeout=TIMEOUT,
    )
    return _check(response, "Failed to create post")
