"""Diaspora Connect API: FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map DiasporaConnectError -> structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Firebase (Firestore, Auth, Storage) initialized on startup via lifespan

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern
    - Without Firebase settings the API still boots; datastore-backed
      endpoints answer 503 SERVICE_NOT_CONFIGURED
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from diaspora_connect.api.error_handlers import register_error_handlers
from diaspora_connect.api.routes import (
    admin,
    applications,
    chat,
    contact,
    email,
    health,
    news,
    petitions,
    products,
    resources,
    site_content,
    stripe_payments,
    users,
)
from diaspora_connect.config import get_settings
from diaspora_connect.infrastructure.firebase_app import initialize_firebase
from diaspora_connect.infrastructure.firebase_auth import init_token_verifier
from diaspora_connect.infrastructure.firestore import init_firestore
from diaspora_connect.infrastructure.observability import setup_logging
from diaspora_connect.infrastructure.storage import init_storage

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    if settings.firebase_project_id or settings.firebase_credentials_path:
        firebase_app = initialize_firebase(
            settings.firebase_project_id,
            settings.firebase_credentials_path,
            settings.firebase_storage_bucket,
        )
        init_firestore(firebase_app)
        init_token_verifier(firebase_app)
        init_storage(firebase_app, settings.firebase_storage_bucket)
    else:
        logger.warning("Firebase not configured; datastore endpoints will return 503")
    logger.info("Diaspora Connect API started")
    yield
    logger.info("Diaspora Connect API shutting down")


app = FastAPI(
    title="Diaspora Connect API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(contact.router)
app.include_router(email.router)
app.include_router(stripe_payments.router)
app.include_router(chat.router)
app.include_router(users.router)
app.include_router(applications.membership_router)
app.include_router(applications.volunteer_router)
app.include_router(petitions.router)
app.include_router(news.router)
app.include_router(products.router)
app.include_router(resources.router)
app.include_router(site_content.banner_router)
app.include_router(site_content.leader_router)
app.include_router(site_content.twitter_router)
app.include_router(site_content.newsletter_router)
app.include_router(admin.router)

register_error_handlers(app)
