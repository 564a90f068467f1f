from pydantic import BaseModel, Field
from typing import Optional


class SystemSettingsOut(BaseModel):
    business_name: Optional[str] = None
    light_mode_color: str
    dark_mode_color: str


class BusinessNameIn(BaseModel):
    business_name: str = Field(..., min_length=1)


class BrandColorsIn(BaseModel):
    light_mode_color: str = Field(..., min_length=1)
    dark_mode_color: str = Field(..., min_length=1)
