"""Pydantic view models returned by the Engagement Service.

These are separate from the Protean aggregate (anti-corruption pattern): they
are the external contract. Write-only signals such as ``viewed_by`` and
``favorited_by`` membership, and the details of moderation reports, never
appear on the public property view.
"""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, Field


class ImageView(BaseModel):
    id: str
    url: str
    storage_id: str


class ResponseView(BaseModel):
    owner_id: str
    response_text: str
    created_at: datetime


class ReviewView(BaseModel):
    id: str
    user_id: str
    rating: int = Field(ge=1, le=5)
    comment: str
    created_at: datetime
    responses: list[ResponseView] = Field(default_factory=list, max_length=1)


class ReportView(BaseModel):
    id: str
    property_id: str
    target: str
    review_id: str | None = None
    reported_by: str
    reason: str
    created_at: datetime


class ViewCounters(BaseModel):
    property_id: str
    views: int
    views_today: int
    views_today_date: date | None = None
    counted: bool


class FavoriteState(BaseModel):
    property_id: str
    favorites: int
    is_favorited: bool


class PropertyView(BaseModel):
    id: str
    owner_id: str
    title: str
    description: str | None = None
    property_type: str
    price: float | None = None
    currency: str | None = None
    city: str | None = None
    status: str
    boosted_until: datetime | None = None
    is_boosted: bool = False
    images: list[ImageView] = Field(default_factory=list)
    views: int = 0
    views_today: int = 0
    favorites: int = 0
    is_favorited: bool = False
    reviews: list[ReviewView] = Field(default_factory=list)
    report_count: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------
def response_view(response) -> ResponseView:
    return ResponseView(
        owner_id=str(response.owner_id),
        response_text=response.response_text,
        created_at=response.created_at,
    )


def review_view(review) -> ReviewView:
    return ReviewView(
        id=str(review.id),
        user_id=str(review.user_id),
        rating=review.rating,
        comment=review.comment,
        created_at=review.created_at,
        responses=[response_view(review.response)] if review.response is not None else [],
    )


def report_view(property_id, report) -> ReportView:
    return ReportView(
        id=str(report.id),
        property_id=str(property_id),
        target=report.target,
        review_id=str(report.review_id) if report.review_id else None,
        reported_by=str(report.reported_by),
        reason=report.reason,
        created_at=report.created_at,
    )


def queued_report_view(record) -> ReportView:
    """Build a report view from a ModerationQueue row."""
    return ReportView(
        id=str(record.report_id),
        property_id=str(record.property_id),
        target=record.target,
        review_id=str(record.review_id) if record.review_id else None,
        reported_by=str(record.reported_by),
        reason=record.reason,
        created_at=record.reported_at,
    )


def image_view(image) -> ImageView:
    return ImageView(id=str(image.id), url=image.url, storage_id=image.storage_id)


def counters_view(listing, counted: bool) -> ViewCounters:
    return ViewCounters(
        property_id=str(listing.id),
        views=listing.views,
        views_today=listing.views_today,
        views_today_date=listing.views_today_date,
        counted=counted,
    )


def favorite_state(listing, user_id) -> FavoriteState:
    return FavoriteState(
        property_id=str(listing.id),
        favorites=listing.favorites,
        is_favorited=listing.is_favorited_by(user_id),
    )


def property_view(listing, viewer_id=None) -> PropertyView:
    """Project the aggregate for ``viewer_id`` (``None`` for anonymous readers)."""
    return PropertyView(
        id=str(listing.id),
        owner_id=str(listing.owner_id),
        title=listing.title,
        description=listing.description,
        property_type=listing.property_type,
        price=listing.price,
        currency=listing.currency,
        city=listing.city,
        status=listing.status,
        boosted_until=listing.boosted_until,
        is_boosted=listing.is_boosted(),
        images=[image_view(i) for i in listing.images],
        views=listing.views,
        views_today=listing.views_today,
        favorites=listing.favorites,
        is_favorited=listing.is_favorited_by(viewer_id),
        reviews=[review_view(r) for r in sorted(listing.reviews, key=lambda r: r.created_at)],
        report_count=len(listing.reports),
        created_at=listing.created_at,
        updated_at=listing.updated_at,
    )
