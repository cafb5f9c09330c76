"""Custom exceptions for the Student Center client."""

import httpx


class StudentCenterError(Exception):
    """Base exception for Student Center errors."""

    pass


class ConfigurationError(StudentCenterError):
    """Client configuration is incomplete or invalid."""

    pass


class TransportError(StudentCenterError):
    """Network or TLS failure while talking to the portal."""

    pass


class TransportTimeoutError(TransportError):
    """The request did not complete before its deadline."""

    pass


class RedirectError(StudentCenterError):
    """The portal answered with a redirect.

    Redirects are never followed. The portal redirects to its login page when a
    session expires, so this error is the session-expiry signal. The redirect
    response is kept so the handshake can inspect it; whoever does not hand it
    on must close it.
    """

    def __init__(self, response: httpx.Response):
        self.response = response
        super().__init__(f"Redirect occurred: {response.status_code} -> {self.location or '?'}")

    @property
    def location(self) -> str:
        return self.response.headers.get("location", "")


class AuthenticationError(StudentCenterError):
    """Failed to authenticate with the portal."""

    pass


class LoginFormError(AuthenticationError):
    """The login page does not hold a usable login form."""

    pass


class NoFormFoundError(LoginFormError):
    """The login page contains no <form>."""

    pass


class MissingUsernameFieldError(LoginFormError):
    """The login form has no recognisable username input."""

    pass


class MissingPasswordFieldError(LoginFormError):
    """The login form has no password input."""

    pass


class MalformedFormError(LoginFormError):
    """The login page markup could not be parsed."""

    pass


class ParseError(StudentCenterError):
    """Response validation failed (unexpected content)."""

    pass


class ScheduleParseError(ParseError):
    """The page is not a class schedule we know how to read."""

    pass
