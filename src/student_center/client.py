"""Student Center client with session management and transparent re-authentication."""

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Mapping

import httpx
from bs4 import BeautifulSoup

from .config import StudentCenterConfig
from .engines import UniversityEngine, get_engine
from .exceptions import AuthenticationError, ConfigurationError, RedirectError
from .forms import extract_login_form
from .locking import ReadWriteLock
from .schedule import Course, fetch_extra_schedule_info, parse_schedule
from .selectors import FORM_FIELDS, URL_PATTERNS
from .transport import SessionTransport

logger = logging.getLogger(__name__)


class Client:
    """HTTP client for a university Student Center.

    Holds one portal session. The portal expires sessions silently and
    answers the next request with a redirect to its login page; when that
    happens the client logs in again once and replays the request.

    Safe to share between threads. Page requests share the session lock and
    run concurrently; a handshake takes it exclusively, so it waits for
    in-flight requests to finish and no request runs while it is logging in.
    """

    def __init__(
        self,
        username: str,
        password: str,
        engine: UniversityEngine,
        *,
        timeout: float = 30.0,
        verify: bool = True,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize client.

        Call authenticate() after creating a client. If you do not, the first
        request that gets redirected will authenticate.

        Args:
            username: Portal username
            password: Portal password
            engine: University engine that performs the login handshake
            timeout: Default request timeout in seconds
            verify: Verify TLS certificates
            transport: Optional httpx transport (e.g. httpx.MockTransport)
        """
        self.username = username
        self._password = password
        self.engine = engine
        self._transport = SessionTransport(timeout=timeout, verify=verify, transport=transport)
        self._lock = ReadWriteLock()
        # Handshakes run so far and how the last one ended. Only changed
        # under the write lock.
        self._auth_generation = 0
        self._auth_error: Exception | None = None

    @classmethod
    def from_config(cls, config: StudentCenterConfig | None = None, **kwargs: Any) -> "Client":
        """Create a client from configuration.

        Args:
            config: StudentCenterConfig instance. If None, loads from environment.
            **kwargs: Extra keyword arguments for the constructor

        Raises:
            ConfigurationError: If required settings are missing
        """
        config = config or StudentCenterConfig.from_env()
        missing = config.validate()
        if missing:
            raise ConfigurationError(f"Missing configuration: {', '.join(missing)}")
        engine = get_engine(config.engine, **config.engine_options())
        return cls(
            config.username,
            config.password,
            engine,
            timeout=config.timeout,
            verify=config.verify_ssl,
            **kwargs,
        )

    def authenticate(self) -> None:
        """Log in to the portal.

        If another thread's handshake finishes while this call waits for the
        session, its outcome is shared instead of logging in twice.

        Raises:
            AuthenticationError: If the handshake failed. A caller that waited
                on another caller's failed handshake gets its own error
                chained to that failure.
            TransportError: On network failure
        """
        self._authenticate(self._auth_generation)

    def _authenticate(self, seen_generation: int) -> None:
        with self._lock.write_locked():
            if self._auth_generation != seen_generation:
                logger.debug("Handshake already completed by another caller")
                if self._auth_error is not None:
                    # Fresh error per waiter; the stored one is only the cause
                    raise AuthenticationError(f"Authentication failed: {self._auth_error}") from self._auth_error
                return

            logger.info("Authenticating with %r", self.engine)
            try:
                self.engine.authenticate(self)
            except Exception as e:
                self._auth_error = e
                raise
            else:
                self._auth_error = None
                logger.info("Authenticated")
            finally:
                self._auth_generation += 1

    def request_page(self, path: str, *, timeout: float | None = None) -> httpx.Response:
        """GET a page relative to the engine root URL.

        Re-authenticates and retries once if the session has expired.

        Args:
            path: Page path, starting with "/"
            timeout: Request timeout overriding the client default

        Returns:
            The page response

        Raises:
            RedirectError: If the page still redirects after re-authenticating
            AuthenticationError: If re-authentication failed
            TransportError: On network failure
        """
        return self._request("GET", path, timeout=timeout)

    def request_page_post(
        self, path: str, data: Mapping[str, Any], *, timeout: float | None = None
    ) -> httpx.Response:
        """POST form data to a page relative to the engine root URL.

        Same retry policy as request_page(); the retry repeats the POST.
        """
        return self._request("POST", path, data=data, timeout=timeout)

    def _request(
        self,
        method: str,
        path: str,
        *,
        data: Mapping[str, Any] | None = None,
        timeout: float | None = None,
    ) -> httpx.Response:
        url = self.engine.root_url + path

        with self._lock.read_locked():
            generation = self._auth_generation
            try:
                return self._send(method, url, data, timeout)
            except RedirectError as e:
                e.response.close()
                logger.info("Session expired (%s %s redirected to %s)", method, path, e.location or "?")

        self._authenticate(generation)

        logger.debug("Retrying %s %s", method, path)
        with self._lock.read_locked():
            try:
                return self._send(method, url, data, timeout)
            except RedirectError as e:
                e.response.close()
                raise

    def _send(
        self, method: str, url: str, data: Mapping[str, Any] | None, timeout: float | None
    ) -> httpx.Response:
        if method == "POST":
            return self._transport.post_form(url, data or {}, timeout=timeout)
        return self._transport.get(url, timeout=timeout)

    @contextmanager
    def shared_session(self) -> Iterator[SessionTransport]:
        """Hold the session for a run of requests.

        Yields the raw transport with the session lock held in shared mode,
        so no handshake can replace the session until the block exits. Inside
        the block use only the yielded transport: authenticate() and the
        request_page methods would deadlock.
        """
        with self._lock.read_locked():
            yield self._transport

    def post_generic_login_form(self, login_url: str) -> httpx.Response:
        """Fetch the login page, fill in the credentials and submit the form.

        Only for use by engines during a handshake, while the session lock is
        held exclusively.

        Returns:
            Response to the form submission

        Raises:
            RedirectError: If the submission redirected. Many portals do this on
                success; the engine decides. The error carries the response.
            AuthenticationError: If the login page redirected
            LoginFormError: If the login page has no usable form
            TransportError: On network failure
        """
        try:
            page = self._transport.get(login_url)
        except RedirectError as e:
            e.response.close()
            raise AuthenticationError(f"Login page redirected to {e.location or '?'}") from e

        form = extract_login_form(page)
        logger.debug("Submitting login form to %s", form.action)
        return self._transport.post_form(form.action, form.fill(self.username, self._password))

    def fetch_schedule(self, fetch_more_info: bool = False) -> list[Course]:
        """Download the user's current class schedule.

        Args:
            fetch_more_info: Also open each class section for its description
                and enrollment numbers. The session is held for the whole pass.

        Returns:
            List of courses

        Raises:
            ScheduleParseError: If the page is not a class schedule
            RedirectError: If the session expired during the detail pass
        """
        field_name, value = FORM_FIELDS["schedule_select_all"]
        path = URL_PATTERNS["schedule_list_view"]
        response = self.request_page_post(path, {field_name: value})
        soup = BeautifulSoup(response.text, "lxml")
        courses = parse_schedule(soup)

        if fetch_more_info:
            with self.shared_session() as transport:
                fetch_extra_schedule_info(transport, self.engine.root_url + path, courses, soup)
        return courses

    def close(self) -> None:
        """Close the HTTP client."""
        self._transport.close()

    def __enter__(self) -> "Client":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"Client(engine={self.engine!r})"
