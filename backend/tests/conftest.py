"""Root conftest: shared test configuration."""

import os

# Ensure tests never reach real vendor accounts
os.environ.setdefault("STRIPE_SECRET_KEY", "sk_test_fake_key")
os.environ.setdefault("STRIPE_WEBHOOK_SECRET", "whsec_test_fake")
os.environ.setdefault("RESEND_API_KEY", "re_test_fake_key")
os.environ.setdefault("OPENAI_API_KEY", "sk-test-fake-key")
os.environ.setdefault("BASE_URL", "https://dc.test")
os.environ.setdefault("LOG_FORMAT", "text")
