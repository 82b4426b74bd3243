"""Firestore Repositories — tests against the in-memory FakeFirestore.

Tests cover:
    - Base CRUD: id/createdAt stamping, require() 404, update on missing doc 404
    - Ordered query falls back to in-memory sort when the composite index is missing
    - Users: defaults, uid-keyed profile, referral code lookup
    - Payment lookups by Stripe ids; newest-first user history
    - Petition signatures: uid dedup, guest email dedup, Increment counter,
      signature and counter committed together
    - Article views and resource downloads use Increment
    - Referral status updates stamp `<status>At`
    - Banners/leaders: new items go last, moves renumber in one batch
    - Twitter live embed is the newest active one; newsletter dedups by email
"""

from datetime import datetime, timedelta, timezone

import pytest

from diaspora_connect.core.domain_types import (
    ApplicationStatus, MembershipTier, PaymentStatus, ReferralStatus, UserRole,
)
from diaspora_connect.core.errors import ConflictError, ResourceNotFoundError
from diaspora_connect.repositories.applications import MembershipApplicationRepository
from diaspora_connect.repositories.content import (
    ArticleViewRepository, NewsRepository, ProductRepository, ResourceRepository,
)
from diaspora_connect.repositories.engagement import (
    NotificationRepository, ReferralRepository,
)
from diaspora_connect.repositories.payments import DonationRepository, MembershipRepository
from diaspora_connect.repositories.petitions import PetitionRepository
from diaspora_connect.repositories.site_content import (
    BannerRepository, LeaderRepository, NewsletterRepository, TwitterEmbedRepository,
)
from diaspora_connect.repositories.users import UserRepository

from tests.services.mock_firestore import FakeFirestore

T0 = datetime(2026, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def db():
    return FakeFirestore()


# ─── Base repository ─────────────────────────────────────────────

def test_create_stamps_id_and_created_at(db):
    product = ProductRepository(db).create({"name": "Cap", "isActive": True})
    stored = db.doc("products", product["id"])
    assert stored["name"] == "Cap"
    assert stored["id"] == product["id"]
    assert stored["createdAt"] is not None


def test_require_missing_raises_not_found(db):
    with pytest.raises(ResourceNotFoundError) as exc:
        ProductRepository(db).require("nope")
    assert exc.value.http_status == 404


def test_update_missing_document_is_not_found(db):
    with pytest.raises(ResourceNotFoundError):
        ProductRepository(db).update("nope", {"price": 1})


def test_ordered_query_falls_back_without_index():
    db = FakeFirestore(fail_filtered_order=True)
    for i, day in enumerate([3, 1, 2]):
        db.seed("donations", f"d{i}", {
            "userId": "user-1", "amount": day, "createdAt": T0 + timedelta(days=day),
        })
    db.seed("donations", "other", {"userId": "user-2", "createdAt": T0})

    donations = DonationRepository(db).list_by_user("user-1", limit=2)

    assert [d["amount"] for d in donations] == [3, 2]


# ─── Users ───────────────────────────────────────────────────────

def test_user_create_defaults(db):
    users = UserRepository(db)
    profile = users.create("u1", "a@b.test", "Rudo", email_verified=True)

    stored = users.get("u1")
    assert stored["uid"] == "u1"
    assert "id" not in stored
    assert stored["membershipTier"] == "free"
    assert stored["role"] == "supporter"
    assert stored["referralCode"] == profile["referralCode"]


def test_user_find_by_referral_code(db):
    users = UserRepository(db)
    profile = users.create("u1", "a@b.test")
    assert users.find_by_referral_code(profile["referralCode"])["uid"] == "u1"
    assert users.find_by_referral_code("NOPE2345") is None


def test_set_tier_and_role(db):
    users = UserRepository(db)
    users.create("u1", "a@b.test")
    users.set_tier("u1", MembershipTier.PREMIUM)
    users.set_role("u1", UserRole.MEMBER)
    stored = users.get("u1")
    assert stored["membershipTier"] == "premium"
    assert stored["role"] == "member"


def test_set_role_on_missing_user_is_not_found(db):
    with pytest.raises(ResourceNotFoundError):
        UserRepository(db).set_role("unknown-user", UserRole.ADMIN)


# ─── Payments ────────────────────────────────────────────────────

def test_donation_lookup_by_payment_intent(db):
    donations = DonationRepository(db)
    created = donations.create(
        user_id="u1", amount=25.0, status=PaymentStatus.PENDING,
        currency="USD", payment_intent_id="pi_1",
    )
    found = donations.find_by_payment_intent("pi_1")
    assert found["id"] == created["id"]
    assert found["currency"] == "usd"
    assert found["status"] == "pending"

    donations.update_status(created["id"], PaymentStatus.SUCCEEDED)
    assert db.doc("donations", created["id"])["status"] == "succeeded"


def test_guest_donation_stores_null_user(db):
    created = DonationRepository(db).create(
        user_id="", amount=5.0, status=PaymentStatus.SUCCEEDED,
    )
    assert db.doc("donations", created["id"])["userId"] is None


def test_membership_latest_for_user(db):
    memberships = MembershipRepository(db)
    memberships.create(
        user_id="u1", tier="basic", status="canceled", amount=5.0,
        start_date=T0, subscription_id="sub_old",
    )
    memberships.create(
        user_id="u1", tier="premium", status="active", amount=15.0,
        start_date=T0 + timedelta(days=30), subscription_id="sub_new",
    )
    assert memberships.latest_for_user("u1")["tier"] == "premium"
    assert memberships.find_by_subscription("sub_old")["tier"] == "basic"


# ─── Petitions ───────────────────────────────────────────────────

def _petition(db):
    return PetitionRepository(db).create(
        {"title": "Vote abroad", "published": True, "active": True}, created_by="admin-1",
    )


def test_signed_in_user_signs_once(db):
    petitions = PetitionRepository(db)
    petition = _petition(db)

    petitions.add_signature(petition["id"], user_id="u1", name="Rudo", email="r@b.test")
    with pytest.raises(ConflictError):
        petitions.add_signature(petition["id"], user_id="u1", name="Rudo", email="r@b.test")

    assert petitions.get(petition["id"])["currentSignatures"] == 1
    assert petitions.has_signed(petition["id"], "u1")
    assert db.doc(f"petitions/{petition['id']}/signatures", "u1")["name"] == "Rudo"


def test_guest_signature_deduplicated_by_email(db):
    petitions = PetitionRepository(db)
    petition = _petition(db)

    petitions.add_signature(petition["id"], user_id=None, name="Guest", email="g@b.test")
    with pytest.raises(ConflictError, match="already signed"):
        petitions.add_signature(petition["id"], user_id=None, name="Guest", email="g@b.test")

    petitions.add_signature(petition["id"], user_id=None, name="Other", email="o@b.test")
    assert petitions.get(petition["id"])["currentSignatures"] == 2
    assert len(petitions.list_signatures(petition["id"])) == 2



def test_signature_on_missing_petition_writes_nothing(db):
    petitions = PetitionRepository(db)

    with pytest.raises(ResourceNotFoundError):
        petitions.add_signature("missing", user_id="u1", name="Rudo", email="r@b.test")

    assert db.docs("petitions/missing/signatures") == []
    assert db.doc("petitions", "missing") is None


def test_duplicate_signature_leaves_counter_unchanged(db):
    petitions = PetitionRepository(db)
    petition = _petition(db)
    db.seed(f"petitions/{petition['id']}/signatures", "u1", {"name": "Rudo"})

    with pytest.raises(ConflictError):
        petitions.add_signature(petition["id"], user_id="u1", name="Rudo", email="r@b.test")

    assert petitions.get(petition["id"])["currentSignatures"] == 0


def test_list_petitions_filters_published(db):
    petitions = PetitionRepository(db)
    _petition(db)
    petitions.create({"title": "Draft", "published": False, "active": True}, created_by="a")

    assert [p["title"] for p in petitions.list_petitions()] == ["Vote abroad"]
    assert len(petitions.list_petitions(published_only=False)) == 2


# ─── Content counters ────────────────────────────────────────────

def test_article_views_increment(db):
    views = ArticleViewRepository(db)
    views.record_view("n1", "Budget update")
    views.record_view("n1", "Budget update")
    views.record_view("n2", "Elections")

    top = views.top(limit=5)
    assert top[0]["articleId"] == "n1"
    assert top[0]["views"] == 2


def test_resource_download_counter(db):
    resources = ResourceRepository(db)
    resource = resources.create({"title": "Guide", "requiredTier": "free"}, uploaded_by="a")
    resources.increment_downloads(resource["id"])
    resources.increment_downloads(resource["id"])
    assert resources.get(resource["id"])["downloadCount"] == 2


def test_news_publish_sets_published_at_once(db):
    news = NewsRepository(db)
    draft = news.create({"title": "Soon", "published": False}, author_id="a")
    assert draft["publishedAt"] is None

    news.update(draft["id"], {"published": True}, current=draft)
    published = news.get(draft["id"])
    assert published["publishedAt"] is not None
    assert [n["id"] for n in news.list_published()] == [draft["id"]]


# ─── Engagement / applications ───────────────────────────────────

def test_referral_status_update_stamps_time(db):
    referrals = ReferralRepository(db)
    referral = referrals.create(
        referrer_id="u1", referred_user_id="u2", referred_email="b@b.test",
        referral_code="ABCD2345",
    )
    referrals.update_status(referral["id"], ReferralStatus.APPLIED)

    stored = referrals.get_by_referred_user("u2")
    assert stored["status"] == "applied"
    assert stored["appliedAt"] is not None


def test_notifications_unread_and_mark_read(db):
    notifications = NotificationRepository(db)
    first = notifications.create(type="t", title="One", message="m")
    notifications.create(type="t", title="Two", message="m")

    notifications.mark_read(first["id"])

    assert [n["title"] for n in notifications.list_unread()] == ["Two"]


def test_application_review_records_reviewer(db):
    applications = MembershipApplicationRepository(db)
    app = applications.create("u1", {"applicationType": "individual"})
    assert app["status"] == "pending"

    applications.review(app["id"], ApplicationStatus.APPROVED, "admin-1", "Welcome")

    stored = applications.get(app["id"])
    assert stored["status"] == "approved"
    assert stored["reviewedBy"] == "admin-1"
    assert stored["notes"] == "Welcome"
    assert applications.list_by_status("pending") == []


# ─── Site content ────────────────────────────────────────────────

def test_new_banner_goes_last(db):
    banners = BannerRepository(db)
    first = banners.create({"imageUrl": "https://img.test/1.png", "isActive": True, "order": None})
    second = banners.create({"imageUrl": "https://img.test/2.png", "isActive": False, "order": None})

    assert (first["order"], second["order"]) == (0, 1)
    assert [b["id"] for b in banners.list_ordered(active_only=True)] == [first["id"]]


def test_move_swaps_and_renumbers(db):
    for doc_id in ("l1", "l2", "l3"):
        db.seed("leaders", doc_id, {"name": doc_id, "order": 0, "createdAt": T0})
    leaders = LeaderRepository(db)

    moved = leaders.move("l3", "up")

    assert [item["id"] for item in moved] == ["l1", "l3", "l2"]
    assert [db.doc("leaders", i)["order"] for i in ("l1", "l3", "l2")] == [0, 1, 2]


def test_move_past_the_end_is_a_no_op(db):
    db.seed("banners", "b1", {"order": 0, "createdAt": T0})
    db.seed("banners", "b2", {"order": 1, "createdAt": T0})

    moved = BannerRepository(db).move("b1", "up")

    assert [b["id"] for b in moved] == ["b1", "b2"]
    assert "updatedAt" not in db.doc("banners", "b1")


def test_move_unknown_item(db):
    with pytest.raises(ResourceNotFoundError):
        BannerRepository(db).move("nope", "down")


def test_live_twitter_embed_is_newest_active(db):
    db.seed("twitterEmbeds", "t1", {"tweetUrl": "https://x.com/a/1", "isActive": True, "createdAt": T0})
    db.seed("twitterEmbeds", "t2", {
        "tweetUrl": "https://x.com/a/2", "isActive": True, "createdAt": T0 + timedelta(days=1),
    })
    db.seed("twitterEmbeds", "t3", {
        "tweetUrl": "https://x.com/a/3", "isActive": False, "createdAt": T0 + timedelta(days=2),
    })
    embeds = TwitterEmbedRepository(db)

    assert embeds.live()["id"] == "t2"
    assert [e["id"] for e in embeds.list_active()] == ["t2", "t1"]


def test_newsletter_subscription_deduplicated(db):
    newsletter = NewsletterRepository(db)

    record, created = newsletter.subscribe(" Tendai@DC.test ", "u1")
    again, created_again = newsletter.subscribe("tendai@dc.test")

    assert created and not created_again
    assert record["email"] == "tendai@dc.test"
    assert again["id"] == record["id"]
    assert len(db.docs("newsletterSubscriptions")) == 1
