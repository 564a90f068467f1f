"""Quote aggregate: header, feature lines, page lines and the cached total.

Every operation that touches a line item recomputes ``Quote.total_price`` in
the same unit of work as the line write, so a failed commit leaves neither
behind. Line prices are frozen when written: catalog mode derives them from
the current catalog price and the line quantity, manual mode stores the
caller's figure untouched and leaves the quantity alone.
"""
import logging
from typing import Callable, List, Optional
from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from designquote.core.audit_log import log_audit
from designquote.core.auth_utils import check_not_found, check_ownership, filter_by_user
from designquote.core.enums import AuditAction, PricingMode
from designquote.core.metrics import line_item_writes, quote_recalculations, quote_value, track_operation
from designquote.db.session import commit_or_fail
from designquote.models.base import utcnow
from designquote.models.catalog import ProjectType, Feature, Page
from designquote.models.quote import Quote, QuoteFeature, QuotePage
from designquote.schemas.quote import (
    QuoteCreate, QuoteUpdate, FeatureLineCreate, PageLineCreate, LineItemUpdate,
    SelectedFeature, SelectedPage,
)
from designquote.services.pricing import feature_line_price, page_line_price, price_breakdown, quote_total

logger = logging.getLogger(__name__)

# Header columns that may not be cleared through a partial update.
REQUIRED_HEADER_FIELDS = {"client_name", "email", "lead_status", "total_price", "closed", "created_by"}


async def get_quote_for_user(db: AsyncSession, quote_id: int, current_user) -> Quote:
    res = await db.execute(select(Quote).where(Quote.id == quote_id))
    quote = res.scalars().first()
    check_not_found(quote, "Quote", quote_id)
    check_ownership(quote, current_user)
    return quote


async def list_quotes_for_user(
    db: AsyncSession,
    current_user,
    lead_status: Optional[str] = None,
    limit: int = 20,
    offset: int = 0,
) -> List[Quote]:
    q = filter_by_user(select(Quote), Quote, current_user)
    if lead_status:
        q = q.where(Quote.lead_status == lead_status)
    q = q.order_by(Quote.created_at.desc(), Quote.id.desc()).limit(limit).offset(offset)
    res = await db.execute(q)
    return res.scalars().all()


async def _get_feature(db: AsyncSession, feature_id: int) -> Feature:
    feature = await db.get(Feature, feature_id)
    check_not_found(feature, "Feature", feature_id)
    return feature


async def _get_page(db: AsyncSession, page_id: int) -> Page:
    page = await db.get(Page, page_id)
    check_not_found(page, "Page", page_id)
    return page


async def _get_project_type(db: AsyncSession, project_type_id: Optional[int]) -> Optional[ProjectType]:
    if project_type_id is None:
        return None
    project_type = await db.get(ProjectType, project_type_id)
    check_not_found(project_type, "Project type", project_type_id)
    return project_type


async def _base_price(db: AsyncSession, project_type_id: Optional[int]) -> float:
    if project_type_id is None:
        return 0.0
    project_type = await db.get(ProjectType, project_type_id)
    return project_type.base_price if project_type else 0.0


def _line_price(mode: PricingMode, manual_price: Optional[float], derive: Callable[[], float]) -> float:
    if mode == PricingMode.MANUAL:
        if manual_price is None:
            raise HTTPException(status_code=400, detail="Manual pricing needs a price")
        return manual_price
    return derive()


def _page_quantity(page: Page, quantity: Optional[int]) -> int:
    return quantity or page.default_quantity or 1


def _reject_duplicates(ids: List[int], resource_name: str) -> None:
    if len(ids) != len(set(ids)):
        raise HTTPException(status_code=400, detail=f"Each {resource_name} can only be selected once")


def _ensure_selectable(page: Page) -> None:
    if not page.is_active:
        raise HTTPException(status_code=400, detail=f"Page {page.id} is not active")


async def recalculate_total(db: AsyncSession, quote: Quote, username: str, trigger: str) -> float:
    base = await _base_price(db, quote.project_type_id)
    quote.total_price = quote_total(base, quote.feature_lines, quote.page_lines)
    quote.updated_by = username
    quote.updated_at = utcnow()
    quote_recalculations.labels(trigger=trigger).inc()
    return quote.total_price


async def estimate(
    db: AsyncSession,
    project_type_id: Optional[int],
    selected_features: List[SelectedFeature],
    selected_pages: List[SelectedPage],
) -> dict:
    """Price a selection without persisting anything."""
    project_type = await _get_project_type(db, project_type_id)

    feature_lines = []
    for selection in selected_features:
        feature = await _get_feature(db, selection.feature_id)
        feature_lines.append(QuoteFeature(
            feature_id=feature.id,
            quantity=selection.quantity,
            price=feature_line_price(feature, selection.quantity),
        ))
    page_lines = []
    for selection in selected_pages:
        page = await _get_page(db, selection.page_id)
        quantity = _page_quantity(page, selection.quantity)
        page_lines.append(QuotePage(page_id=page.id, quantity=quantity, price=page_line_price(page, quantity)))

    breakdown = price_breakdown(project_type.base_price if project_type else 0.0, feature_lines, page_lines)
    return {"total_price": sum(breakdown.values()), "price_breakdown": breakdown}


@track_operation("create", "quotes")
async def create_quote(db: AsyncSession, payload: QuoteCreate, current_user) -> Quote:
    header = payload.quote
    project_type = await _get_project_type(db, header.project_type_id)
    _reject_duplicates([s.feature_id for s in payload.selected_features], "feature")
    _reject_duplicates([s.page_id for s in payload.selected_pages], "page")

    quote = Quote(
        **header.model_dump(mode="json"),
        total_price=0.0,
        created_by=current_user.username,
        updated_by=current_user.username,
    )
    quote.project_type = project_type

    for selection in payload.selected_features:
        feature = await _get_feature(db, selection.feature_id)
        quote.feature_lines.append(QuoteFeature(
            feature=feature,
            quantity=selection.quantity,
            price=feature_line_price(feature, selection.quantity),
        ))
    for selection in payload.selected_pages:
        page = await _get_page(db, selection.page_id)
        _ensure_selectable(page)
        quantity = _page_quantity(page, selection.quantity)
        quote.page_lines.append(QuotePage(page=page, quantity=quantity, price=page_line_price(page, quantity)))

    quote.total_price = quote_total(project_type.base_price if project_type else 0.0, quote.feature_lines, quote.page_lines)
    db.add(quote)
    await log_audit(db, current_user.id, AuditAction.CREATE_QUOTE, payload)
    await commit_or_fail(db, "Quote creation")
    await db.refresh(quote)
    quote_value.observe(quote.total_price)
    logger.info(f"Quote {quote.id} created by {current_user.username} at {quote.total_price}")
    return quote


@track_operation("update", "quotes")
async def update_quote(db: AsyncSession, quote_id: int, payload: QuoteUpdate, current_user) -> Quote:
    quote = await get_quote_for_user(db, quote_id, current_user)

    data = payload.model_dump(mode="json", exclude_unset=True)
    for field in REQUIRED_HEADER_FIELDS:
        if field in data and data[field] is None:
            data.pop(field)
    if "created_by" in data and not current_user.is_admin:
        # only admins reassign quotes
        data.pop("created_by")
    if data.get("project_type_id") is not None:
        project_type = await db.get(ProjectType, data["project_type_id"])
        check_not_found(project_type, "Project type", data["project_type_id"])

    for field, value in data.items():
        setattr(quote, field, value)
    quote.updated_by = current_user.username

    await log_audit(db, current_user.id, AuditAction.UPDATE_QUOTE, payload, entity_id=quote_id)
    await commit_or_fail(db, "Quote update")
    await db.refresh(quote)
    return quote


async def update_quote_status(db: AsyncSession, quote_id: int, lead_status: str, current_user) -> Quote:
    quote = await get_quote_for_user(db, quote_id, current_user)
    quote.lead_status = str(lead_status)
    await log_audit(db, current_user.id, AuditAction.UPDATE_QUOTE_STATUS, {"id": quote_id, "lead_status": str(lead_status)}, entity_id=quote_id)
    await commit_or_fail(db, "Quote status update")
    await db.refresh(quote)
    return quote


@track_operation("delete", "quotes")
async def delete_quote(db: AsyncSession, quote_id: int, current_user) -> None:
    quote = await get_quote_for_user(db, quote_id, current_user)
    await db.delete(quote)
    await log_audit(db, current_user.id, AuditAction.DELETE_QUOTE, {"id": quote_id}, entity_id=quote_id)
    await commit_or_fail(db, "Quote deletion")
    logger.info(f"Quote {quote_id} deleted by {current_user.username}")


async def recalculate_quote(db: AsyncSession, quote_id: int, current_user) -> Quote:
    quote = await get_quote_for_user(db, quote_id, current_user)
    await recalculate_total(db, quote, current_user.username, "manual")
    await log_audit(db, current_user.id, AuditAction.RECALCULATE_QUOTE, {"id": quote_id}, entity_id=quote_id)
    await commit_or_fail(db, "Quote recalculation")
    return quote


def _find_feature_line(quote: Quote, feature_id: int) -> QuoteFeature:
    line = next((l for l in quote.feature_lines if l.feature_id == feature_id), None)
    check_not_found(line, "Quote feature")
    return line


def _find_page_line(quote: Quote, page_id: int) -> QuotePage:
    line = next((l for l in quote.page_lines if l.page_id == page_id), None)
    check_not_found(line, "Quote page")
    return line


@track_operation("create", "quote_features")
async def add_feature_line(db: AsyncSession, quote_id: int, payload: FeatureLineCreate, current_user):
    quote = await get_quote_for_user(db, quote_id, current_user)
    if any(l.feature_id == payload.feature_id for l in quote.feature_lines):
        raise HTTPException(status_code=400, detail="Feature already added to quote; update it instead")
    feature = await _get_feature(db, payload.feature_id)

    price = _line_price(payload.pricing_mode, payload.price, lambda: feature_line_price(feature, payload.quantity))
    line = QuoteFeature(feature=feature, quantity=payload.quantity, price=price)
    quote.feature_lines.append(line)
    await recalculate_total(db, quote, current_user.username, "add_feature")
    line_item_writes.labels(kind="feature", pricing_mode=str(payload.pricing_mode)).inc()

    await log_audit(db, current_user.id, AuditAction.ADD_LINE_ITEM, payload, entity_id=quote_id)
    await commit_or_fail(db, "Adding feature to quote")
    return line, quote.total_price


@track_operation("update", "quote_features")
async def update_feature_line(db: AsyncSession, quote_id: int, feature_id: int, payload: LineItemUpdate, current_user):
    quote = await get_quote_for_user(db, quote_id, current_user)
    line = _find_feature_line(quote, feature_id)

    if payload.pricing_mode == PricingMode.MANUAL:
        if payload.price is None:
            raise HTTPException(status_code=400, detail="Manual pricing needs a price")
        if payload.quantity is not None:
            raise HTTPException(status_code=400, detail="Manual pricing takes a price, not a quantity")
        line.price = payload.price
    else:
        if payload.quantity is None:
            raise HTTPException(status_code=400, detail="Catalog pricing needs a quantity")
        feature = await _get_feature(db, feature_id)
        line.quantity = payload.quantity
        line.price = feature_line_price(feature, payload.quantity)
    await recalculate_total(db, quote, current_user.username, "update_feature")
    line_item_writes.labels(kind="feature", pricing_mode=str(payload.pricing_mode)).inc()

    await log_audit(db, current_user.id, AuditAction.UPDATE_LINE_ITEM, payload, entity_id=quote_id)
    await commit_or_fail(db, "Updating quote feature")
    return line, quote.total_price


@track_operation("delete", "quote_features")
async def remove_feature_line(db: AsyncSession, quote_id: int, feature_id: int, current_user) -> float:
    quote = await get_quote_for_user(db, quote_id, current_user)
    line = _find_feature_line(quote, feature_id)
    quote.feature_lines.remove(line)
    await recalculate_total(db, quote, current_user.username, "remove_feature")

    await log_audit(db, current_user.id, AuditAction.REMOVE_LINE_ITEM, {"quote_id": quote_id, "feature_id": feature_id}, entity_id=quote_id)
    await commit_or_fail(db, "Removing feature from quote")
    return quote.total_price


@track_operation("create", "quote_pages")
async def add_page_line(db: AsyncSession, quote_id: int, payload: PageLineCreate, current_user):
    quote = await get_quote_for_user(db, quote_id, current_user)
    if any(l.page_id == payload.page_id for l in quote.page_lines):
        raise HTTPException(status_code=400, detail="Page already added to quote; update it instead")
    page = await _get_page(db, payload.page_id)
    _ensure_selectable(page)

    quantity = _page_quantity(page, payload.quantity)
    price = _line_price(payload.pricing_mode, payload.price, lambda: page_line_price(page, quantity))
    line = QuotePage(page=page, quantity=quantity, price=price)
    quote.page_lines.append(line)
    await recalculate_total(db, quote, current_user.username, "add_page")
    line_item_writes.labels(kind="page", pricing_mode=str(payload.pricing_mode)).inc()

    await log_audit(db, current_user.id, AuditAction.ADD_LINE_ITEM, payload, entity_id=quote_id)
    await commit_or_fail(db, "Adding page to quote")
    return line, quote.total_price


@track_operation("update", "quote_pages")
async def update_page_line(db: AsyncSession, quote_id: int, page_id: int, payload: LineItemUpdate, current_user):
    quote = await get_quote_for_user(db, quote_id, current_user)
    line = _find_page_line(quote, page_id)

    if payload.pricing_mode == PricingMode.MANUAL:
        if payload.price is None:
            raise HTTPException(status_code=400, detail="Manual pricing needs a price")
        if payload.quantity is not None:
            raise HTTPException(status_code=400, detail="Manual pricing takes a price, not a quantity")
        line.price = payload.price
    else:
        if payload.quantity is None:
            raise HTTPException(status_code=400, detail="Catalog pricing needs a quantity")
        page = await _get_page(db, page_id)
        line.quantity = payload.quantity
        line.price = page_line_price(page, payload.quantity)
    await recalculate_total(db, quote, current_user.username, "update_page")
    line_item_writes.labels(kind="page", pricing_mode=str(payload.pricing_mode)).inc()

    await log_audit(db, current_user.id, AuditAction.UPDATE_LINE_ITEM, payload, entity_id=quote_id)
    await commit_or_fail(db, "Updating quote page")
    return line, quote.total_price


@track_operation("delete", "quote_pages")
async def remove_page_line(db: AsyncSession, quote_id: int, page_id: int, current_user) -> float:
    quote = await get_quote_for_user(db, quote_id, current_user)
    line = _find_page_line(quote, page_id)
    quote.page_lines.remove(line)
    await recalculate_total(db, quote, current_user.username, "remove_page")

    await log_audit(db, current_user.id, AuditAction.REMOVE_LINE_ITEM, {"quote_id": quote_id, "page_id": page_id}, entity_id=quote_id)
    await commit_or_fail(db, "Removing page from quote")
    return quote.total_price
