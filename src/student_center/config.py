"""Configuration handling for the Student Center client."""

import os
from dataclasses import dataclass, field
from typing import Any

from .exceptions import ConfigurationError


@dataclass
class StudentCenterConfig:
    """Configuration for a Student Center client.

    Configuration can be loaded from:
    1. Environment variables (STUDENT_CENTER_USER, STUDENT_CENTER_PASSWORD, ...)
    2. Explicit parameters

    The ``peoplesoft`` engine only needs ``base_url`` (scheme and host of the
    portal); ``site`` defaults to ``csprd``. The ``generic`` engine needs an
    explicit ``root_url`` and ``login_url``.
    """

    username: str = ""
    password: str = field(default="", repr=False)
    engine: str = "peoplesoft"
    base_url: str = ""
    root_url: str = ""
    login_url: str = ""
    site: str = "csprd"
    timeout: float = 30.0
    verify_ssl: bool = True

    @classmethod
    def from_env(cls) -> "StudentCenterConfig":
        """Load configuration from environment variables.

        Environment variables:
            STUDENT_CENTER_USER: Username
            STUDENT_CENTER_PASSWORD: Password
            STUDENT_CENTER_ENGINE: University engine name (peoplesoft, generic)
            STUDENT_CENTER_URL: Portal base URL (e.g., https://sis.example.edu)
            STUDENT_CENTER_ROOT_URL: Page root for the generic engine
            STUDENT_CENTER_LOGIN_URL: Login page for the generic engine
            STUDENT_CENTER_SITE: PeopleSoft site name
            STUDENT_CENTER_TIMEOUT: Request timeout in seconds
            STUDENT_CENTER_VERIFY_SSL: Set to "false" to disable SSL verification

        Returns:
            StudentCenterConfig instance

        Raises:
            ConfigurationError: If STUDENT_CENTER_TIMEOUT is not a number
        """
        raw_timeout = os.environ.get("STUDENT_CENTER_TIMEOUT", "30")
        try:
            timeout = float(raw_timeout)
        except ValueError:
            raise ConfigurationError(f"STUDENT_CENTER_TIMEOUT must be a number, got {raw_timeout!r}")

        return cls(
            username=os.environ.get("STUDENT_CENTER_USER", ""),
            password=os.environ.get("STUDENT_CENTER_PASSWORD", ""),
            engine=os.environ.get("STUDENT_CENTER_ENGINE", "peoplesoft"),
            base_url=os.environ.get("STUDENT_CENTER_URL", ""),
            root_url=os.environ.get("STUDENT_CENTER_ROOT_URL", ""),
            login_url=os.environ.get("STUDENT_CENTER_LOGIN_URL", ""),
            site=os.environ.get("STUDENT_CENTER_SITE", "csprd"),
            timeout=timeout,
            verify_ssl=os.environ.get("STUDENT_CENTER_VERIFY_SSL", "").lower() != "false",
        )

    def validate(self) -> list[str]:
        """Validate configuration, returning list of missing fields.

        Returns:
            List of missing required field names.
        """
        missing = []
        if not self.username:
            missing.append("username (STUDENT_CENTER_USER)")
        if not self.password:
            missing.append("password (STUDENT_CENTER_PASSWORD)")
        if self.engine == "generic":
            if not self.root_url:
                missing.append("root_url (STUDENT_CENTER_ROOT_URL)")
            if not self.login_url:
                missing.append("login_url (STUDENT_CENTER_LOGIN_URL)")
        elif not self.base_url:
            missing.append("base_url (STUDENT_CENTER_URL)")
        return missing

    def engine_options(self) -> dict[str, Any]:
        """Keyword arguments for building the configured engine."""
        if self.engine == "generic":
            return {"root_url": self.root_url, "login_url": self.login_url}
        return {"base_url": self.base_url, "site": self.site}
