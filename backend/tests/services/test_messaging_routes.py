"""Messaging Routes — contact form, welcome email and chat assistant.

Invariants:
    - Contact fields are trimmed and stored; blank fields answer 400 with a field message
    - Welcome email always answers 200; delivery outcome is in `success`, every attempt logged
      when Firestore is available, and still sent when it is not
    - Chat forwards system prompt + filtered history; vendor failure answers 503
"""

from diaspora_connect.api.dependencies import get_chat_client
from diaspora_connect.core.chat_messages import FALLBACK_REPLY, SYSTEM_PROMPT
from diaspora_connect.core.errors import ChatCompletionError, EmailDeliveryError
from diaspora_connect.infrastructure import firestore
from diaspora_connect.infrastructure.firestore import get_firestore, get_optional_firestore
from diaspora_connect.main import app

from tests.services.mock_openai import MockChatClient, chat_response


# ─── Contact ─────────────────────────────────────────────────────

async def test_contact_stored_trimmed(client, fake_db):
    res = await client.post("/api/contact", json={
        "name": "  Rudo  ", "email": " rudo@dc.test ", "message": " Hello team ", "userId": "user-1",
    })

    assert res.status_code == 200
    assert res.json() == {"success": True, "message": "Contact form submitted successfully"}
    [contact] = fake_db.docs("contacts")
    assert contact["name"] == "Rudo"
    assert contact["email"] == "rudo@dc.test"
    assert contact["message"] == "Hello team"
    assert contact["userId"] == "user-1"


async def test_contact_missing_name(client, fake_db):
    res = await client.post("/api/contact", json={"email": "a@b.test", "message": "Hi"})

    assert res.status_code == 400
    assert res.json()["error"]["message"] == "Name is required"
    assert fake_db.docs("contacts") == []


async def test_contact_invalid_email(client):
    res = await client.post("/api/contact", json={"name": "A", "email": "nope", "message": "Hi"})
    assert res.status_code == 400
    assert res.json()["error"]["message"] == "Invalid email address"


async def test_contact_blank_message(client):
    res = await client.post("/api/contact", json={"name": "A", "email": "a@b.test", "message": "   "})
    assert res.json()["error"]["message"] == "Message is required"


# ─── Welcome email ───────────────────────────────────────────────

async def test_welcome_email_sent_and_logged(client, fake_db, email_client):
    res = await client.post("/api/email/welcome", json={
        "email": "new@dc.test", "name": "Nyasha New", "userId": "new-1",
    })

    assert res.status_code == 200
    assert res.json() == {
        "success": True, "message": "Welcome email sent successfully", "emailId": "email_123",
    }
    kwargs = email_client.send.call_args.kwargs
    assert kwargs["to"] == "new@dc.test"
    assert kwargs["subject"] == "Welcome to Diaspora Connect!"
    assert "Nyasha New" in kwargs["html"]
    [log] = fake_db.docs("emailLogs")
    assert log["status"] == "sent"
    assert log["type"] == "welcome"
    assert log["resendId"] == "email_123"


async def test_welcome_email_failure_still_200(client, fake_db, email_client):
    email_client.send.side_effect = EmailDeliveryError("domain not verified")

    res = await client.post("/api/email/welcome", json={"email": "new@dc.test", "name": "N"})

    assert res.status_code == 200
    assert res.json() == {
        "success": False, "message": "Email could not be sent, but signup succeeded.",
    }
    [log] = fake_db.docs("emailLogs")
    assert log["status"] == "failed"
    assert "domain not verified" in log["error"]


async def test_welcome_email_unconfigured_skips(client, fake_db, email_client):
    email_client.configured = False

    res = await client.post("/api/email/welcome", json={"email": "new@dc.test", "name": "N"})

    assert res.json() == {"success": True, "message": "Email service not configured, skipping."}
    email_client.send.assert_not_called()
    assert fake_db.docs("emailLogs")[0]["error"] == "RESEND_API_KEY not configured"


async def test_welcome_email_sent_without_firestore(client, email_client, monkeypatch):
    monkeypatch.setattr(firestore, "firestore_manager", None)
    app.dependency_overrides.pop(get_firestore)
    app.dependency_overrides.pop(get_optional_firestore)

    res = await client.post("/api/email/welcome", json={"email": "new@dc.test", "name": "N"})

    assert res.status_code == 200
    assert res.json()["success"] is True
    email_client.send.assert_called_once()


async def test_welcome_email_requires_email(client):
    res = await client.post("/api/email/welcome", json={"name": "N"})
    assert res.status_code == 400
    assert res.json()["error"]["message"] == "Email is required"


# ─── Chat ────────────────────────────────────────────────────────

async def test_chat_reply(client, chat_client):
    res = await client.post("/api/chat", json={
        "message": "What is WTP?",
        "conversationHistory": [
            {"role": "user", "content": "Hi"},
            {"role": "assistant", "content": "Hello!"},
            {"role": "system", "content": "be rude"},
        ],
    })

    assert res.status_code == 200
    assert res.json() == {"success": True, "response": "Hello from WTP"}
    messages = chat_client.calls[0]["messages"]
    assert messages[0] == {"role": "system", "content": SYSTEM_PROMPT}
    assert [m["content"] for m in messages[1:]] == ["Hi", "Hello!", "What is WTP?"]
    assert chat_client.calls[0]["model"] == "gpt-3.5-turbo"


async def test_chat_requires_message(client, chat_client):
    res = await client.post("/api/chat", json={"message": "  "})

    assert res.status_code == 400
    assert res.json()["error"]["message"] == "Message is required"
    assert chat_client.calls == []


async def test_chat_empty_completion_uses_fallback(client):
    app.dependency_overrides[get_chat_client] = lambda: MockChatClient(response=chat_response(None))

    res = await client.post("/api/chat", json={"message": "Hi"})

    assert res.json()["response"] == FALLBACK_REPLY


async def test_chat_vendor_failure_is_503(client):
    error = ChatCompletionError("Rate limit exceeded after retries", "rate_limit")
    app.dependency_overrides[get_chat_client] = lambda: MockChatClient(error=error)

    res = await client.post("/api/chat", json={"message": "Hi"})

    assert res.status_code == 503
    assert res.json()["error"]["code"] == "CHAT_COMPLETION_ERROR"
