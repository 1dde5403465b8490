from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from campaign_ledger.db.session import Base

class Celebrity(Base):
    """Public figure referenced by campaigns; managed outside this service"""
    __tablename__ = "celebrities"

    id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False)
    slug = Column(String, nullable=False, unique=True, index=True)
    image_url = Column(String)
    category = Column(String)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    campaigns = relationship("Campaign", back_populates="celebrity")
