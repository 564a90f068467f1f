from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from designquote.core.enums import LeadStatus, PricingMode


class SelectedFeature(BaseModel):
    feature_id: int
    quantity: int = Field(1, ge=1)


class SelectedPage(BaseModel):
    page_id: int
    # falls back to the page's default_quantity
    quantity: Optional[int] = Field(None, ge=1)


class QuoteHeaderCreate(BaseModel):
    project_type_id: Optional[int] = None
    client_name: str = Field(..., min_length=2)
    business_name: Optional[str] = None
    email: str = Field(..., min_length=3)
    phone: Optional[str] = None
    notes: Optional[str] = None
    internal_notes: Optional[str] = None
    lead_status: LeadStatus = LeadStatus.IN_PROGRESS
    closed: bool = False
    close_date: Optional[str] = None


class QuoteCreate(BaseModel):
    quote: QuoteHeaderCreate
    selected_features: List[SelectedFeature] = []
    selected_pages: List[SelectedPage] = []


class QuoteUpdate(BaseModel):
    project_type_id: Optional[int] = None
    client_name: Optional[str] = Field(None, min_length=2)
    business_name: Optional[str] = None
    email: Optional[str] = Field(None, min_length=3)
    phone: Optional[str] = None
    notes: Optional[str] = None
    internal_notes: Optional[str] = None
    lead_status: Optional[LeadStatus] = None
    total_price: Optional[float] = Field(None, ge=0)
    closed: Optional[bool] = None
    close_date: Optional[str] = None
    created_by: Optional[str] = None


class QuoteStatusUpdate(BaseModel):
    lead_status: LeadStatus


class FeatureLineCreate(BaseModel):
    feature_id: int
    quantity: int = Field(1, ge=1)
    pricing_mode: PricingMode = PricingMode.CATALOG
    price: Optional[float] = Field(None, ge=0)


class PageLineCreate(BaseModel):
    page_id: int
    quantity: Optional[int] = Field(None, ge=1)
    pricing_mode: PricingMode = PricingMode.CATALOG
    price: Optional[float] = Field(None, ge=0)


class LineItemUpdate(BaseModel):
    quantity: Optional[int] = Field(None, ge=1)
    pricing_mode: PricingMode = PricingMode.CATALOG
    price: Optional[float] = Field(None, ge=0)


class QuoteFeatureOut(BaseModel):
    id: int
    quote_id: int
    feature_id: int
    feature_name: str
    quantity: int
    price: float


class QuotePageOut(BaseModel):
    id: int
    quote_id: int
    page_id: int
    page_name: str
    quantity: int
    price: float


class FeatureLineResult(BaseModel):
    line: QuoteFeatureOut
    total_price: float


class PageLineResult(BaseModel):
    line: QuotePageOut
    total_price: float


class QuoteOut(BaseModel):
    id: int
    project_type_id: Optional[int] = None
    client_name: str
    business_name: Optional[str] = None
    email: str
    phone: Optional[str] = None
    notes: Optional[str] = None
    internal_notes: Optional[str] = None
    lead_status: str
    total_price: float
    closed: bool
    close_date: Optional[str] = None
    created_by: str
    updated_by: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class QuoteDetailOut(QuoteOut):
    features: List[QuoteFeatureOut] = []
    pages: List[QuotePageOut] = []


class QuoteEstimateRequest(BaseModel):
    project_type_id: Optional[int] = None
    selected_features: List[SelectedFeature] = []
    selected_pages: List[SelectedPage] = []


class QuoteEstimateResponse(BaseModel):
    total_price: float
    price_breakdown: dict
