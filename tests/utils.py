"""
Small helpers shared by integration and e2e tests.
"""

from http.cookies import SimpleCookie

from teamtasks.core.config import settings


def session_cookie(response) -> str:
    """Value of the session cookie set by a response ("" when cleared)"""
    for header in response.headers.get_list("set-cookie"):
        cookie = SimpleCookie()
        cookie.load(header)
        if settings.SESSION_COOKIE_NAME in cookie:
            return cookie[settings.SESSION_COOKIE_NAME].value
    raise AssertionError("response did not set the session cookie")


def cookie_headers(response) -> dict:
    """Cookie header replaying the session a response just opened"""
    return {"Cookie": f"{settings.SESSION_COOKIE_NAME}={session_cookie(response)}"}
