from sqlalchemy import Column, String, Text, Float, Integer, Boolean, ForeignKey, Enum, UniqueConstraint
from sqlalchemy.orm import relationship
from designquote.models.base import BaseModel
from designquote.core.enums import PricingType


class ProjectType(BaseModel):
    __tablename__ = "project_types"
    name = Column(String(120), nullable=False)
    base_price = Column(Float, nullable=False, default=0.0)
    description = Column(Text)


class Feature(BaseModel):
    __tablename__ = "features"
    name = Column(String(120), nullable=False)
    description = Column(Text)
    category = Column(String(80), default="")
    pricing_type = Column(Enum(PricingType), nullable=False, default=PricingType.FLAT)
    flat_price = Column(Float)
    hourly_rate = Column(Float)
    estimated_hours = Column(Float)
    supports_quantity = Column(Boolean, default=False, nullable=False)
    for_all_project_types = Column(Boolean, default=False, nullable=False)
    project_type_id = Column(ForeignKey("project_types.id", ondelete="SET NULL"), nullable=True)

    project_type_links = relationship(
        "FeatureProjectType",
        back_populates="feature",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def project_type_ids(self) -> list:
        return [link.project_type_id for link in self.project_type_links]


class FeatureProjectType(BaseModel):
    __tablename__ = "feature_project_types"
    __table_args__ = (
        UniqueConstraint("feature_id", "project_type_id", name="feature_project_type_idx"),
    )
    feature_id = Column(ForeignKey("features.id", ondelete="CASCADE"), nullable=False)
    project_type_id = Column(ForeignKey("project_types.id", ondelete="CASCADE"), nullable=False)

    feature = relationship("Feature", back_populates="project_type_links")


class Page(BaseModel):
    __tablename__ = "pages"
    name = Column(String(120), nullable=False)
    description = Column(Text)
    price_per_page = Column(Float, nullable=False, default=0.0)
    default_quantity = Column(Integer, nullable=False, default=1)
    supports_quantity = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    project_type_id = Column(ForeignKey("project_types.id", ondelete="SET NULL"), nullable=True)
