"""Email Templates — tests for welcome and custom email HTML.

Tests cover:
    - first_name picks the first word
    - Welcome email greets by name and links the membership application
    - User text is HTML-escaped; custom bodies keep line breaks
"""

from diaspora_connect.core.email_templates import (
    build_custom_email_html,
    build_welcome_email_html,
    first_name,
)

APP = "Diaspora Connect"
URL = "https://dc.test"


def test_first_name():
    assert first_name("Tendai Moyo") == "Tendai"
    assert first_name("Tendai") == "Tendai"
    assert first_name("") == ""


def test_welcome_email_contains_name_and_cta():
    html = build_welcome_email_html(name="Tendai", app_name=APP, app_url=URL, year=2026)
    assert "Tendai" in html
    assert f"{URL}/membership-application" in html
    assert "&copy; 2026 Diaspora Connect" in html
    assert "dc.test" in html


def test_welcome_email_escapes_name():
    html = build_welcome_email_html(
        name="<script>alert(1)</script>", app_name=APP, app_url=URL, year=2026,
    )
    assert "<script>" not in html
    assert "&lt;script&gt;" in html


def test_custom_email_keeps_line_breaks_and_escapes():
    html = build_custom_email_html(
        name="Rudo", subject="Update & news", body="Line one\nLine <two>",
        app_name=APP, app_url=URL, year=2026,
    )
    assert "Line one<br />Line &lt;two&gt;" in html
    assert "<title>Update &amp; news</title>" in html
    assert "Rudo" in html
