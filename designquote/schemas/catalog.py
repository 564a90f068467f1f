from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from designquote.core.enums import PricingType


class ProjectTypeCreate(BaseModel):
    name: str = Field(..., min_length=2)
    base_price: float = Field(..., ge=0)
    description: Optional[str] = None


class ProjectTypeUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2)
    base_price: Optional[float] = Field(None, ge=0)
    description: Optional[str] = None


class ProjectTypeOut(BaseModel):
    id: int
    name: str
    base_price: float
    description: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class FeatureCreate(BaseModel):
    name: str = Field(..., min_length=2)
    description: Optional[str] = None
    category: Optional[str] = ""
    pricing_type: PricingType
    flat_price: Optional[float] = Field(None, ge=0)
    hourly_rate: Optional[float] = Field(None, ge=0)
    estimated_hours: Optional[float] = Field(None, ge=0)
    supports_quantity: bool = False
    for_all_project_types: bool = False
    project_type_id: Optional[int] = None
    selected_project_types: List[int] = []


class FeatureUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2)
    description: Optional[str] = None
    category: Optional[str] = None
    pricing_type: Optional[PricingType] = None
    flat_price: Optional[float] = Field(None, ge=0)
    hourly_rate: Optional[float] = Field(None, ge=0)
    estimated_hours: Optional[float] = Field(None, ge=0)
    supports_quantity: Optional[bool] = None
    for_all_project_types: Optional[bool] = None
    project_type_id: Optional[int] = None
    selected_project_types: Optional[List[int]] = None


class FeatureOut(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    category: Optional[str] = None
    pricing_type: PricingType
    flat_price: Optional[float] = None
    hourly_rate: Optional[float] = None
    estimated_hours: Optional[float] = None
    supports_quantity: bool
    for_all_project_types: bool
    project_type_id: Optional[int] = None
    project_type_ids: List[int] = []
    unit_price: float


class PageCreate(BaseModel):
    name: str = Field(..., min_length=2)
    description: Optional[str] = None
    price_per_page: float = Field(..., ge=0)
    default_quantity: int = Field(1, ge=1)
    supports_quantity: bool = False
    is_active: bool = True
    project_type_id: Optional[int] = None


class PageUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2)
    description: Optional[str] = None
    price_per_page: Optional[float] = Field(None, ge=0)
    default_quantity: Optional[int] = Field(None, ge=1)
    supports_quantity: Optional[bool] = None
    is_active: Optional[bool] = None
    project_type_id: Optional[int] = None


class PageOut(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    price_per_page: float
    default_quantity: int
    supports_quantity: bool
    is_active: bool
    project_type_id: Optional[int] = None
