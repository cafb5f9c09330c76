"""HTTP transport for a Student Center session.

The transport never follows redirects. The portal signals an expired session
by redirecting to its login page rather than answering 401/403, so every
redirect is surfaced as a RedirectError and the caller decides what it means.
"""

import logging
import ssl
from typing import Any, Mapping

import certifi
import httpx

from .exceptions import RedirectError, TransportError, TransportTimeoutError

logger = logging.getLogger(__name__)

# OpenSSL names. TLS 1.3 suites are not affected by set_ciphers().
HARDENED_CIPHERS = (
    "ECDHE-ECDSA-AES256-GCM-SHA384",
    "ECDHE-RSA-AES256-GCM-SHA384",
    "ECDHE-ECDSA-AES128-GCM-SHA256",
    "ECDHE-RSA-AES128-GCM-SHA256",
    "ECDHE-ECDSA-AES256-SHA",
    "ECDHE-RSA-AES256-SHA",
    "ECDHE-ECDSA-AES128-SHA",
    "ECDHE-RSA-AES128-SHA",
    "AES256-SHA",
    "AES128-SHA",
)

USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) Gecko/20100101 Firefox/145.0"


def build_ssl_context(verify: bool = True) -> ssl.SSLContext:
    """Create the TLS context used for portal connections.

    Args:
        verify: Verify the server certificate and hostname.

    Returns:
        SSLContext restricted to HARDENED_CIPHERS, TLS 1.2 or newer.
    """
    context = ssl.create_default_context(cafile=certifi.where())
    context.minimum_version = ssl.TLSVersion.TLSv1_2
    context.set_ciphers(":".join(HARDENED_CIPHERS))
    if not verify:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    return context


class SessionTransport:
    """Cookie-keeping HTTP client that turns redirects into errors.

    The cookie jar is the session: everything the portal sets during a
    handshake is replayed on later requests.
    """

    def __init__(
        self,
        *,
        timeout: float = 30.0,
        verify: bool = True,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize transport.

        Args:
            timeout: Default request timeout in seconds
            verify: Verify TLS certificates
            transport: Optional httpx transport (e.g. httpx.MockTransport)
        """
        self._client = httpx.Client(
            follow_redirects=False,
            timeout=timeout,
            verify=build_ssl_context(verify),
            transport=transport,
            headers={"User-Agent": USER_AGENT},
        )

    @property
    def cookies(self) -> httpx.Cookies:
        return self._client.cookies

    def get(self, url: str, *, timeout: float | None = None) -> httpx.Response:
        """GET a URL.

        Raises:
            RedirectError: If the server answered with a redirect
            TransportError: On network or TLS failure
        """
        return self._send("GET", url, timeout=timeout)

    def post_form(
        self, url: str, data: Mapping[str, Any], *, timeout: float | None = None
    ) -> httpx.Response:
        """POST form-encoded data to a URL.

        Raises:
            RedirectError: If the server answered with a redirect
            TransportError: On network or TLS failure
        """
        return self._send("POST", url, data=dict(data), timeout=timeout)

    def _send(
        self,
        method: str,
        url: str,
        *,
        data: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> httpx.Response:
        request_timeout = httpx.USE_CLIENT_DEFAULT if timeout is None else timeout
        try:
            response = self._client.request(method, url, data=data, timeout=request_timeout)
        except httpx.TimeoutException as e:
            raise TransportTimeoutError(f"{method} {url} timed out: {e}") from e
        except httpx.TransportError as e:
            raise TransportError(f"{method} {url} failed: {e}") from e

        if response.has_redirect_location:
            logger.debug("%s %s redirected (%s)", method, url, response.status_code)
            raise RedirectError(response)
        return response

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()
