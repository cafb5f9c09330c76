"""Pytest fixtures for Student Center tests."""

import threading
import time
from pathlib import Path
from urllib.parse import parse_qs

import httpx
import pytest
from bs4 import BeautifulSoup

from student_center.client import Client
from student_center.engines import GenericFormEngine

FIXTURES_DIR = Path(__file__).parent / "fixtures"

PORTAL = "https://portal.test"
ROOT_URL = f"{PORTAL}/psc/csprd"
LOGIN_URL = f"{PORTAL}/login"
SCHEDULE_PATH = "/EMPLOYEE/HRMS/c/SA_LEARNER_SERVICES.SSR_SSENRL_LIST.GBL?Page=SSR_SSENRL_LIST"

USERNAME = "student"
PASSWORD = "s3cret"


def read_fixture(name: str) -> str:
    return (FIXTURES_DIR / name).read_text()


def wait_until(predicate, timeout: float = 2.0) -> None:
    """Poll until predicate() is true or fail the test."""
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            pytest.fail("Timed out waiting for condition")
        time.sleep(0.005)


class StubPortal:
    """In-memory PeopleSoft-like portal served through httpx.MockTransport.

    Pages under /psc/ need a valid PS_TOKEN cookie; without one the portal
    redirects to the login page, as the real portal does when a session
    expires.
    """

    def __init__(self):
        self.login_posts = 0
        self.requests: list[tuple[str, str]] = []
        self.valid_token: str | None = None
        self.always_redirect: set[str] = set()
        self.detail_requests = 0
        self.expire_on_detail = False
        self._lock = threading.Lock()

    def expire(self) -> None:
        self.valid_token = None

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def _authorized(self, request: httpx.Request) -> bool:
        cookie = request.headers.get("cookie", "")
        return self.valid_token is not None and f"PS_TOKEN={self.valid_token}" in cookie

    def handle(self, request: httpx.Request) -> httpx.Response:
        path = request.url.raw_path.decode()
        form = {k: v[0] for k, v in parse_qs(request.content.decode()).items()}
        with self._lock:
            self.requests.append((request.method, path))

        if request.url.path == "/login":
            if request.method == "GET":
                return httpx.Response(200, html=read_fixture("login.html"))
            return self._login(form)

        if path in self.always_redirect or not self._authorized(request):
            return httpx.Response(302, headers={"Location": f"{LOGIN_URL}?cmd=expire"})

        if path.startswith("/psc/csprd/EMPLOYEE/HRMS/c/SA_LEARNER_SERVICES.SSR_SSENRL_LIST.GBL"):
            action = form.get("ICAction", "")
            if action.startswith("MTG_SECTION$"):
                if self.expire_on_detail:
                    return httpx.Response(302, headers={"Location": f"{LOGIN_URL}?cmd=expire"})
                with self._lock:
                    self.detail_requests += 1
                return httpx.Response(200, html=read_fixture("class_detail.html"))
            return httpx.Response(200, html=read_fixture("schedule.html"))

        return httpx.Response(200, html=f"<html><body>{request.method} {path}</body></html>")

    def _login(self, form: dict[str, str]) -> httpx.Response:
        with self._lock:
            self.login_posts += 1
            count = self.login_posts
        # Hidden fields must come back untouched
        if form.get("timezoneOffset") != "0" or form.get("languageCd") != "ENG":
            return httpx.Response(400, text="Bad request")
        if form.get("userid") != USERNAME or form.get("pwd") != PASSWORD:
            return httpx.Response(200, html=read_fixture("login.html"))

        self.valid_token = f"tok{count}"
        return httpx.Response(
            302,
            headers=[
                ("Location", f"{ROOT_URL}/EMPLOYEE/HRMS/c/HOMEPAGE"),
                ("Set-Cookie", f"PS_TOKEN={self.valid_token}; Path=/"),
            ],
        )


@pytest.fixture
def load_fixture():
    """Factory fixture to load HTML fixtures as BeautifulSoup."""

    def _load(name: str) -> BeautifulSoup:
        return BeautifulSoup(read_fixture(name), "lxml")

    return _load


@pytest.fixture
def schedule_html(load_fixture):
    """Load class schedule list HTML."""
    return load_fixture("schedule.html")


@pytest.fixture
def portal() -> StubPortal:
    return StubPortal()


@pytest.fixture
def engine() -> GenericFormEngine:
    return GenericFormEngine(root_url=ROOT_URL, login_url=LOGIN_URL)


@pytest.fixture
def client(portal, engine):
    """Client wired to the stub portal, not yet authenticated."""
    with Client(USERNAME, PASSWORD, engine, transport=portal.transport()) as c:
        yield c
