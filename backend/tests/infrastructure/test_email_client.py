"""Resend Email Client — tests for delivery and failure mapping."""

from unittest.mock import patch

import pytest
import resend

from diaspora_connect.core.errors import EmailDeliveryError, ServiceNotConfiguredError
from diaspora_connect.infrastructure.email_client import ResendEmailClient


def test_send_returns_message_id():
    client = ResendEmailClient("re_test", "DC <noreply@dc.test>")
    with patch.object(resend.Emails, "send", return_value={"id": "msg_1"}) as send:
        assert client.send(to="a@b.test", subject="Hi", html="<p>Hi</p>") == "msg_1"

    params = send.call_args.args[0]
    assert params["from"] == "DC <noreply@dc.test>"
    assert params["to"] == ["a@b.test"]


def test_unconfigured_client_refuses_to_send():
    client = ResendEmailClient("", "noreply@dc.test")
    assert client.configured is False
    with pytest.raises(ServiceNotConfiguredError):
        client.send(to="a@b.test", subject="Hi", html="x")


def test_vendor_failure_maps_to_delivery_error():
    client = ResendEmailClient("re_test", "noreply@dc.test")
    with patch.object(resend.Emails, "send", side_effect=RuntimeError("boom")):
        with pytest.raises(EmailDeliveryError, match="boom"):
            client.send(to="a@b.test", subject="Hi", html="x")


def test_missing_id_is_a_failure():
    client = ResendEmailClient("re_test", "noreply@dc.test")
    with patch.object(resend.Emails, "send", return_value={}):
        with pytest.raises(EmailDeliveryError):
            client.send(to="a@b.test", subject="Hi", html="x")
