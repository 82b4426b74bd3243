"""Infrastructure Layer: vendor clients (Firebase, Stripe, Resend, OpenAI) and logging.

Invariants:
    - Infrastructure never imports from services/ or api/
    - All vendor calls wrapped with error mapping into core/errors.py types
"""
