from sqlalchemy import Column, String, Integer, ForeignKey
from sqlalchemy.orm import relationship, backref
from designquote.models.base import BaseModel


class Audit(BaseModel):
    """One row per mutating call; the payload itself is kept only as a hash."""
    __tablename__ = "audits"
    
    user_id = Column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    user = relationship("User", backref=backref("audit_logs", passive_deletes=True))
    
    action = Column(String(64), nullable=False, index=True)
    # id of the quote, catalog item or user the action touched, when known
    entity_id = Column(Integer, nullable=True)
    payload_hash = Column(String(64), nullable=False)
