from sqlalchemy import Column, String, Text, Float, Integer, Boolean, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from designquote.models.base import BaseModel
from designquote.core.enums import LeadStatus


class Quote(BaseModel):
    __tablename__ = "quotes"

    project_type_id = Column(ForeignKey("project_types.id", ondelete="SET NULL"), nullable=True)
    client_name = Column(String(120), nullable=False)
    business_name = Column(String(120))
    email = Column(String(120), nullable=False)
    phone = Column(String(40))
    notes = Column(Text)
    internal_notes = Column(Text)
    lead_status = Column(String(40), nullable=False, default=LeadStatus.IN_PROGRESS.value)
    total_price = Column(Float, nullable=False, default=0.0)
    closed = Column(Boolean, nullable=False, default=False)
    close_date = Column(String(40))
    created_by = Column(String(64), nullable=False, index=True)
    updated_by = Column(String(64))

    project_type = relationship("ProjectType", lazy="selectin")
    feature_lines = relationship(
        "QuoteFeature",
        back_populates="quote",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="QuoteFeature.id",
    )
    page_lines = relationship(
        "QuotePage",
        back_populates="quote",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="QuotePage.id",
    )


class QuoteFeature(BaseModel):
    __tablename__ = "quote_features"
    __table_args__ = (
        UniqueConstraint("quote_id", "feature_id", name="quote_feature_idx"),
    )
    quote_id = Column(ForeignKey("quotes.id", ondelete="CASCADE"), nullable=False)
    feature_id = Column(ForeignKey("features.id", ondelete="CASCADE"), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    price = Column(Float, nullable=False)

    quote = relationship("Quote", back_populates="feature_lines")
    feature = relationship("Feature", lazy="selectin")


class QuotePage(BaseModel):
    __tablename__ = "quote_pages"
    __table_args__ = (
        UniqueConstraint("quote_id", "page_id", name="quote_page_idx"),
    )
    quote_id = Column(ForeignKey("quotes.id", ondelete="CASCADE"), nullable=False)
    page_id = Column(ForeignKey("pages.id", ondelete="CASCADE"), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    price = Column(Float, nullable=False)

    quote = relationship("Quote", back_populates="page_lines")
    page = relationship("Page", lazy="selectin")
