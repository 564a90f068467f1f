from sqlalchemy import Column, String
from designquote.models.base import BaseModel


class SystemSettings(BaseModel):
    __tablename__ = "system_settings"
    business_name = Column(String(120))
    light_mode_color = Column(String(20))
    dark_mode_color = Column(String(20))
