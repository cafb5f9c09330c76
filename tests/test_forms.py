"""Tests for login form discovery."""

import httpx
import pytest

from conftest import read_fixture
from student_center.exceptions import (
    LoginFormError,
    MalformedFormError,
    MissingPasswordFieldError,
    MissingUsernameFieldError,
    NoFormFoundError,
)
from student_center.forms import LoginForm, extract_login_form, parse_login_form

MINIMAL_FORM = (
    '<form action="/login">'
    '<input name="user">'
    '<input name="pass" type="password">'
    '<input type="hidden" name="csrf" value="abc">'
    "</form>"
)


class TestParseLoginForm:
    """Tests for parse_login_form function."""

    def test_minimal_form(self):
        """Action, field names and hidden fields are extracted."""
        form = parse_login_form(MINIMAL_FORM)
        assert form.action == "/login"
        assert form.username_field == "user"
        assert form.password_field == "pass"
        assert form.other_fields == {"csrf": "abc"}

    def test_action_resolved_against_base_url(self):
        form = parse_login_form(MINIMAL_FORM, "https://portal.test/psp/csprd/?cmd=login")
        assert form.action == "https://portal.test/login"

    def test_empty_action_posts_back(self):
        html = '<form><input type="text" name="u"><input type="password" name="p"></form>'
        form = parse_login_form(html, "https://portal.test/signin")
        assert form.action == "https://portal.test/signin"

    def test_peoplesoft_login_page(self):
        """Real-world page: select kept, unchecked checkbox dropped, submit kept."""
        form = parse_login_form(read_fixture("login.html"))
        assert form.username_field == "userid"
        assert form.password_field == "pwd"
        assert form.other_fields == {
            "timezoneOffset": "0",
            "ptmode": "f",
            "ptlangcd": "ENG",
            "languageCd": "ENG",
            "Submit": "Sign In",
        }

    def test_prefers_form_with_password(self):
        """A search form ahead of the login form is skipped."""
        html = (
            '<form action="/search"><input type="text" name="q"></form>'
            '<form action="/login"><input type="email" name="email">'
            '<input type="password" name="secret"></form>'
        )
        form = parse_login_form(html)
        assert form.action == "/login"
        assert form.username_field == "email"
        assert form.password_field == "secret"

    def test_checked_checkbox_and_only_first_submit(self):
        html = (
            '<form action="/login"><input name="u"><input type="password" name="p">'
            '<input type="checkbox" name="remember" checked>'
            '<input type="submit" name="go" value="Sign in">'
            '<input type="submit" name="reset_pw" value="Forgot password">'
            '<input type="button" name="help" value="Help">'
            '<textarea name="note">hi</textarea></form>'
        )
        form = parse_login_form(html)
        assert form.other_fields == {"remember": "on", "go": "Sign in", "note": "hi"}

    def test_repeated_names_keep_every_value(self):
        """Repeated inputs and a multiple select submit all their values."""
        html = (
            '<form action="/login"><input name="u"><input type="password" name="p">'
            '<input type="hidden" name="tok" value="1">'
            '<input type="hidden" name="tok" value="2">'
            '<select name="opts" multiple>'
            '<option value="a" selected>A</option><option value="b" selected>B</option>'
            '<option value="c">C</option></select>'
            '<select name="term"><option value="2241">Fall</option><option value="2242">Spring</option></select>'
            "</form>"
        )
        form = parse_login_form(html)
        assert form.other_fields == {"tok": ["1", "2"], "opts": ["a", "b"], "term": "2241"}

    def test_multiple_select_without_selection_is_omitted(self):
        html = (
            '<form action="/login"><input name="u"><input type="password" name="p">'
            '<select name="opts" multiple><option value="a">A</option></select></form>'
        )
        assert parse_login_form(html).other_fields == {}

    def test_password_type_case_insensitive(self):
        html = '<form action="/l"><input name="u"><input type="PASSWORD" name="p"></form>'
        assert parse_login_form(html).password_field == "p"

    def test_no_form(self):
        """Page without a form is reported distinctly."""
        with pytest.raises(NoFormFoundError):
            parse_login_form("<html><body><p>Maintenance</p></body></html>")

    def test_missing_password_field(self):
        html = '<form action="/login"><input name="user"><input type="hidden" name="csrf" value="abc"></form>'
        with pytest.raises(MissingPasswordFieldError):
            parse_login_form(html)

    def test_missing_username_field(self):
        html = '<form action="/login"><input type="hidden" name="csrf" value="abc"><input type="password" name="p"></form>'
        with pytest.raises(MissingUsernameFieldError):
            parse_login_form(html)

    def test_empty_document(self):
        with pytest.raises(MalformedFormError):
            parse_login_form("   ")

    def test_errors_share_base_class(self):
        """Callers can catch all markup problems at once."""
        with pytest.raises(LoginFormError):
            parse_login_form("<p>no form</p>")


class TestLoginForm:
    def test_fill_keeps_other_fields(self):
        form = LoginForm("/login", "user", "pass", {"csrf": "abc", "state": "x=1"})
        data = form.fill("alice", "pw")
        assert data == {"csrf": "abc", "state": "x=1", "user": "alice", "pass": "pw"}
        # Descriptor itself is not modified
        assert form.other_fields == {"csrf": "abc", "state": "x=1"}

    def test_fill_with_repeated_fields(self):
        form = LoginForm("/login", "user", "pass", {"tok": ["1", "2"]})
        data = form.fill("alice", "pw")
        assert data == {"tok": ["1", "2"], "user": "alice", "pass": "pw"}
        data["tok"].append("3")
        assert form.other_fields == {"tok": ["1", "2"]}


class TestExtractLoginForm:
    def test_uses_response_url(self):
        request = httpx.Request("GET", "https://portal.test/psp/csprd/?cmd=login")
        response = httpx.Response(200, html=MINIMAL_FORM, request=request)
        form = extract_login_form(response)
        assert form.action == "https://portal.test/login"
