"""Generic login form discovery.

Finds the login form on a page and returns everything needed to submit it:
where to post, which inputs take the username and password, and the hidden
state (tokens, view state) that has to travel back unchanged.
"""

from dataclasses import dataclass, field
from typing import Collection
from urllib.parse import urljoin

import httpx
from bs4 import BeautifulSoup, Tag
from bs4.exceptions import ParserRejectedMarkup

from .exceptions import (
    MalformedFormError,
    MissingPasswordFieldError,
    MissingUsernameFieldError,
    NoFormFoundError,
)

# Input types a browser would render as a username box
USERNAME_INPUT_TYPES = ("text", "email", "tel", "")
BUTTON_INPUT_TYPES = ("button", "reset", "image", "file")

# Field name to value, or to all its values when the name repeats
FormFields = dict[str, str | list[str]]


@dataclass
class LoginForm:
    """Submission-ready description of a login form."""

    action: str
    username_field: str
    password_field: str
    other_fields: FormFields = field(default_factory=dict)

    def fill(self, username: str, password: str) -> FormFields:
        """Build the POST payload with credentials filled in.

        All other fields are kept verbatim.
        """
        data: FormFields = {
            name: list(value) if isinstance(value, list) else value for name, value in self.other_fields.items()
        }
        data[self.username_field] = username
        data[self.password_field] = password
        return data


def _input_type(inp: Tag) -> str:
    return (inp.get("type") or "").strip().lower()


def _find_login_form(soup: BeautifulSoup) -> Tag:
    forms = soup.find_all("form")
    if not forms:
        raise NoFormFoundError("No <form> found on login page")
    for form in forms:
        if form.select_one("input[type='password' i]"):
            return form
    return forms[0]


def _add_field(fields: FormFields, name: str, value: str) -> None:
    # Repeated names keep every value, in document order
    if name not in fields:
        fields[name] = value
    elif isinstance(fields[name], list):
        fields[name].append(value)
    else:
        fields[name] = [fields[name], value]


def collect_form_fields(form: Tag, skip: Collection[str] = ()) -> FormFields:
    """Collect the values a browser would submit for a form, minus skipped names.

    A name that occurs once maps to its value; a name submitted more than once
    (repeated inputs, a multiple select) maps to the list of its values, which
    httpx encodes as repeated keys.
    """
    fields: FormFields = {}
    submit_seen = False

    for inp in form.find_all("input"):
        name = inp.get("name")
        if not name or name in skip:
            continue
        kind = _input_type(inp)
        if kind in BUTTON_INPUT_TYPES:
            continue
        if kind in ("checkbox", "radio"):
            if inp.has_attr("checked"):
                _add_field(fields, name, inp.get("value", "on"))
            continue
        if kind == "submit":
            # Only the button a browser would click
            if not submit_seen:
                _add_field(fields, name, inp.get("value", ""))
                submit_seen = True
            continue
        _add_field(fields, name, inp.get("value", ""))

    for select in form.find_all("select"):
        name = select.get("name")
        if not name or name in skip:
            continue
        options = select.find_all("option")
        chosen = [opt for opt in options if opt.has_attr("selected")]
        if not select.has_attr("multiple"):
            chosen = chosen[:1] or options[:1]
        for opt in chosen:
            _add_field(fields, name, opt.get("value", opt.get_text(strip=True)))

    for textarea in form.find_all("textarea"):
        name = textarea.get("name")
        if name and name not in skip:
            _add_field(fields, name, textarea.get_text())

    return fields


def parse_login_form(html: str, base_url: str = "") -> LoginForm:
    """Extract the login form from an HTML document.

    Args:
        html: Page markup
        base_url: URL the page was fetched from. When given, the form action
            is resolved against it; an empty action posts back to it.

    Returns:
        LoginForm ready to be filled and submitted

    Raises:
        MalformedFormError: If the document is empty or cannot be parsed
        NoFormFoundError: If the page has no form
        MissingPasswordFieldError: If the form has no password input
        MissingUsernameFieldError: If the form has no username input
    """
    if not html or not html.strip():
        raise MalformedFormError("Login page is empty")
    try:
        soup = BeautifulSoup(html, "lxml")
    except ParserRejectedMarkup as e:
        raise MalformedFormError(f"Login page markup could not be parsed: {e}") from e

    form = _find_login_form(soup)

    password_input = None
    for inp in form.find_all("input"):
        if _input_type(inp) == "password" and inp.get("name"):
            password_input = inp
            break
    if password_input is None:
        raise MissingPasswordFieldError("Login form has no password field")
    password_field = password_input["name"]

    username_field = None
    for inp in form.find_all("input"):
        name = inp.get("name")
        if name and name != password_field and _input_type(inp) in USERNAME_INPUT_TYPES:
            username_field = name
            break
    if username_field is None:
        raise MissingUsernameFieldError("Login form has no username field")

    action = (form.get("action") or "").strip()
    if base_url:
        action = urljoin(base_url, action)

    return LoginForm(
        action=action,
        username_field=username_field,
        password_field=password_field,
        other_fields=collect_form_fields(form, {username_field, password_field}),
    )


def extract_login_form(response: httpx.Response) -> LoginForm:
    """Extract the login form from a fetched page, resolving the action against its URL."""
    return parse_login_form(response.text, str(response.url))
