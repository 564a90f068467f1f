"""Quote header, status and line item endpoints"""
import logging
from fastapi import APIRouter, Depends, Header, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional, List

from designquote.db.session import get_db
from designquote.core.config import settings
from designquote.schemas.quote import (
    QuoteCreate, QuoteUpdate, QuoteStatusUpdate, QuoteOut, QuoteDetailOut,
    QuoteEstimateRequest, QuoteEstimateResponse,
    FeatureLineCreate, PageLineCreate, LineItemUpdate,
    QuoteFeatureOut, QuotePageOut, FeatureLineResult, PageLineResult,
)
from designquote.core.security import get_current_user
from designquote.core.enums import LeadStatus
from designquote.core.rate_limit import check_rate_limit
from designquote.core.response_builders import (
    build_quote_response, build_quote_detail_response, build_quote_response_list,
    build_quote_feature_response, build_quote_page_response,
)
from designquote.utils.idempotency import get_idempotent, set_idempotent
from designquote.services import quotes as quote_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/quotes", tags=["quotes"])


@router.get("/", response_model=List[QuoteOut])
async def list_quotes(
    lead_status: Optional[LeadStatus] = Query(None),
    limit: int = Query(settings.QUOTE_PAGE_SIZE, ge=1, le=settings.QUOTE_PAGE_SIZE_MAX),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user)
):
    quotes = await quote_service.list_quotes_for_user(
        db, current_user, lead_status.value if lead_status else None, limit, offset
    )
    return build_quote_response_list(quotes)


@router.post("/calc", response_model=QuoteEstimateResponse)
async def calc_quote(
    payload: QuoteEstimateRequest,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user)
):
    return await quote_service.estimate(
        db, payload.project_type_id, payload.selected_features, payload.selected_pages
    )


@router.post("/", response_model=QuoteDetailOut, status_code=201)
async def create_quote(
    payload: QuoteCreate,
    idempotency_key: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user)
):
    await check_rate_limit(int(current_user.id))
    
    prev = await get_idempotent(current_user.id, idempotency_key)
    if prev:
        logger.info(f"Replaying quote creation for idempotency key {idempotency_key}")
        return prev

    quote = await quote_service.create_quote(db, payload, current_user)

    out = build_quote_detail_response(quote)
    await set_idempotent(current_user.id, idempotency_key, out.model_dump(mode="json"))
    return out


@router.get("/{quote_id}", response_model=QuoteDetailOut)
async def get_quote(
    quote_id: int,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user)
):
    quote = await quote_service.get_quote_for_user(db, quote_id, current_user)
    return build_quote_detail_response(quote)


@router.put("/{quote_id}", response_model=QuoteOut)
async def update_quote(
    quote_id: int,
    payload: QuoteUpdate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user)
):
    await check_rate_limit(int(current_user.id))
    quote = await quote_service.update_quote(db, quote_id, payload, current_user)
    return build_quote_response(quote)


@router.patch("/{quote_id}", response_model=QuoteOut)
async def update_quote_status(
    quote_id: int,
    payload: QuoteStatusUpdate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user)
):
    await check_rate_limit(int(current_user.id))
    quote = await quote_service.update_quote_status(db, quote_id, payload.lead_status, current_user)
    return build_quote_response(quote)


@router.delete("/{quote_id}")
async def delete_quote(
    quote_id: int,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user)
):
    await check_rate_limit(int(current_user.id))
    await quote_service.delete_quote(db, quote_id, current_user)
    return {"deleted": True}


@router.post("/{quote_id}/recalculate", response_model=QuoteOut)
async def recalculate_quote(
    quote_id: int,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user)
):
    quote = await quote_service.recalculate_quote(db, quote_id, current_user)
    return build_quote_response(quote)


@router.get("/{quote_id}/features", response_model=List[QuoteFeatureOut])
async def list_quote_features(
    quote_id: int,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user)
):
    quote = await quote_service.get_quote_for_user(db, quote_id, current_user)
    return [build_quote_feature_response(line) for line in quote.feature_lines]


@router.post("/{quote_id}/features", response_model=FeatureLineResult, status_code=201)
async def add_quote_feature(
    quote_id: int,
    payload: FeatureLineCreate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user)
):
    await check_rate_limit(int(current_user.id))
    line, total_price = await quote_service.add_feature_line(db, quote_id, payload, current_user)
    return FeatureLineResult(line=build_quote_feature_response(line), total_price=total_price)


@router.put("/{quote_id}/features/{feature_id}", response_model=FeatureLineResult)
async def update_quote_feature(
    quote_id: int,
    feature_id: int,
    payload: LineItemUpdate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user)
):
    await check_rate_limit(int(current_user.id))
    line, total_price = await quote_service.update_feature_line(db, quote_id, feature_id, payload, current_user)
    return FeatureLineResult(line=build_quote_feature_response(line), total_price=total_price)


@router.delete("/{quote_id}/features/{feature_id}")
async def remove_quote_feature(
    quote_id: int,
    feature_id: int,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user)
):
    await check_rate_limit(int(current_user.id))
    total_price = await quote_service.remove_feature_line(db, quote_id, feature_id, current_user)
    return {"deleted": True, "total_price": total_price}


@router.get("/{quote_id}/pages", response_model=List[QuotePageOut])
async def list_quote_pages(
    quote_id: int,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user)
):
    quote = await quote_service.get_quote_for_user(db, quote_id, current_user)
    return [build_quote_page_response(line) for line in quote.page_lines]


@router.post("/{quote_id}/pages", response_model=PageLineResult, status_code=201)
async def add_quote_page(
    quote_id: int,
    payload: PageLineCreate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user)
):
    await check_rate_limit(int(current_user.id))
    line, total_price = await quote_service.add_page_line(db, quote_id, payload, current_user)
    return PageLineResult(line=build_quote_page_response(line), total_price=total_price)


@router.put("/{quote_id}/pages/{page_id}", response_model=PageLineResult)
async def update_quote_page(
    quote_id: int,
    page_id: int,
    payload: LineItemUpdate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user)
):
    await check_rate_limit(int(current_user.id))
    line, total_price = await quote_service.update_page_line(db, quote_id, page_id, payload, current_user)
    return PageLineResult(line=build_quote_page_response(line), total_price=total_price)


@router.delete("/{quote_id}/pages/{page_id}")
async def remove_quote_page(
    quote_id: int,
    page_id: int,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user)
):
    await check_rate_limit(int(current_user.id))
    total_price = await quote_service.remove_page_line(db, quote_id, page_id, current_user)
    return {"deleted": True, "total_price": total_price}
