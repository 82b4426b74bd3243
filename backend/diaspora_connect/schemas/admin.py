"""Admin Schemas: dashboard aggregates and bulk catalog upload results."""

from diaspora_connect.schemas.base import CamelModel


class DonationSummary(CamelModel):
    count: int
    total_amount: float
    by_status: dict[str, int]


class DonationsOverview(CamelModel):
    summary: DonationSummary
    donations: list[dict]


class ProductUploadResult(CamelModel):
    name: str
    success: bool
    id: str | None = None
    error: str | None = None


class ProductUploadResponse(CamelModel):
    message: str
    results: list[ProductUploadResult]
