"""University engines: per-portal login handshakes.

An engine knows where a portal lives and how to log in to it. Engines do not
hold session state; they drive the handshake through the client they are given,
which already holds the session exclusively while they run.
"""

import logging
from typing import TYPE_CHECKING, Any, Callable, Protocol

import httpx
from bs4 import BeautifulSoup

from .exceptions import AuthenticationError, ConfigurationError, RedirectError

if TYPE_CHECKING:
    from .client import Client

logger = logging.getLogger(__name__)


class UniversityEngine(Protocol):
    """Portal-specific authentication strategy."""

    root_url: str

    def authenticate(self, client: "Client") -> None:
        """Run one full login handshake on the client's session."""
        ...


def submit_login_form(
    client: "Client",
    login_url: str,
    is_rejection: Callable[[str], bool] | None = None,
) -> None:
    """Log in through the login form found at login_url.

    A redirect after submission is how most portals report a successful
    login, so it is not an error unless is_rejection says the redirect
    target means the credentials were refused.

    Args:
        client: Client whose session is being authenticated
        login_url: Page holding the login form
        is_rejection: Called with the redirect location after submission

    Raises:
        AuthenticationError: If the portal rejected the credentials
        LoginFormError: If the login page has no usable form
        TransportError: On network failure
    """
    try:
        response = client.post_generic_login_form(login_url)
    except RedirectError as e:
        e.response.close()
        if is_rejection is not None and is_rejection(e.location):
            raise AuthenticationError("Login failed - check credentials") from e
        logger.debug("Login redirected to %s", e.location)
        return
    _check_login_response(response)


def _check_login_response(response: httpx.Response) -> None:
    if response.status_code >= 400:
        raise AuthenticationError(f"Login failed: HTTP {response.status_code}")
    # The login form coming back means the credentials were refused
    soup = BeautifulSoup(response.text, "lxml")
    if soup.select_one("input[type='password' i]"):
        raise AuthenticationError("Login failed - check credentials")


class GenericFormEngine:
    """Engine for portals with a plain username/password login form."""

    def __init__(self, root_url: str, login_url: str):
        """Initialize engine.

        Args:
            root_url: URL that page paths are appended to
            login_url: Page holding the login form
        """
        self.root_url = root_url.rstrip("/")
        self.login_url = login_url

    def authenticate(self, client: "Client") -> None:
        submit_login_form(client, self.login_url)

    def __repr__(self) -> str:
        return f"GenericFormEngine(root_url={self.root_url!r}, login_url={self.login_url!r})"


class PeopleSoftEngine:
    """Engine for PeopleSoft Campus Solutions portals.

    Pages live under ``/psc/<site>``; the sign-in page is served by the portal
    servlet at ``/psp/<site>/?cmd=login``. A refused login redirects back to
    the sign-in page with an ``errorCode`` parameter.
    """

    def __init__(self, base_url: str, site: str = "csprd"):
        base = base_url.rstrip("/")
        self.site = site
        self.root_url = f"{base}/psc/{site}"
        self.login_url = f"{base}/psp/{site}/?cmd=login"

    def authenticate(self, client: "Client") -> None:
        submit_login_form(client, self.login_url, is_rejection=lambda location: "errorCode=" in location)

    def __repr__(self) -> str:
        return f"PeopleSoftEngine(root_url={self.root_url!r}, site={self.site!r})"


ENGINES: dict[str, Callable[..., UniversityEngine]] = {
    "generic": GenericFormEngine,
    "peoplesoft": PeopleSoftEngine,
}


def get_engine(name: str, **options: Any) -> UniversityEngine:
    """Build a registered engine.

    Args:
        name: Engine name (see ENGINES)
        **options: Constructor arguments for the engine

    Returns:
        Engine instance

    Raises:
        ConfigurationError: If the engine name is unknown
    """
    try:
        engine_cls = ENGINES[name]
    except KeyError:
        raise ConfigurationError(f"Unknown university engine {name!r} (choose from: {', '.join(sorted(ENGINES))})")
    return engine_cls(**options)
