"""University Student Center client.

Keeps an authenticated PeopleSoft Student Center session, re-authenticating
transparently when the portal expires it, and reads the class schedule.
"""

from .client import Client
from .config import StudentCenterConfig
from .engines import ENGINES, GenericFormEngine, PeopleSoftEngine, UniversityEngine, get_engine
from .exceptions import (
    AuthenticationError,
    ConfigurationError,
    LoginFormError,
    MalformedFormError,
    MissingPasswordFieldError,
    MissingUsernameFieldError,
    NoFormFoundError,
    ParseError,
    RedirectError,
    ScheduleParseError,
    StudentCenterError,
    TransportError,
    TransportTimeoutError,
)
from .forms import LoginForm, extract_login_form, parse_login_form
from .schedule import Component, Course, Meeting

__all__ = [
    "Client",
    "StudentCenterConfig",
    "UniversityEngine",
    "GenericFormEngine",
    "PeopleSoftEngine",
    "ENGINES",
    "get_engine",
    "LoginForm",
    "parse_login_form",
    "extract_login_form",
    "Course",
    "Component",
    "Meeting",
    "StudentCenterError",
    "ConfigurationError",
    "TransportError",
    "TransportTimeoutError",
    "RedirectError",
    "AuthenticationError",
    "LoginFormError",
    "NoFormFoundError",
    "MissingUsernameFieldError",
    "MissingPasswordFieldError",
    "MalformedFormError",
    "ParseError",
    "ScheduleParseError",
]
