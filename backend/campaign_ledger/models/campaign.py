import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean, CheckConstraint, Column, DateTime, ForeignKey, Integer, JSON,
    String, Text, UniqueConstraint,
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from campaign_ledger.db.session import Base

DEFAULT_TEMPLATE_CATEGORY = "campaign"


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Campaign(Base):
    __tablename__ = "campaigns"
    __table_args__ = (
        CheckConstraint("tokens >= 0", name="ck_campaigns_tokens_non_negative"),
        CheckConstraint("total_generations >= 0", name="ck_campaigns_generations_non_negative"),
    )

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String, nullable=False)
    slug = Column(String, nullable=False, unique=True, index=True)
    description = Column(Text)
    candidate_name = Column(String)
    celebrity_id = Column(String, ForeignKey("celebrities.id"), nullable=False, index=True)
    tokens = Column(Integer, nullable=False, default=0)
    total_generations = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    # Microsecond precision keeps the listing in creation order
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    # Relationships
    celebrity = relationship("Celebrity", back_populates="campaigns")
    templates = relationship(
        "CampaignTemplate",
        back_populates="campaign",
        cascade="all, delete-orphan",
        order_by="CampaignTemplate.position",
    )


class CampaignTemplate(Base):
    """Prompt template owned exclusively by one campaign"""
    __tablename__ = "campaign_templates"
    __table_args__ = (
        UniqueConstraint("campaign_id", "slug", name="uq_campaign_templates_campaign_slug"),
    )

    id = Column(String(36), primary_key=True, default=_new_id)
    campaign_id = Column(
        String(36),
        ForeignKey("campaigns.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = Column(String, nullable=False)
    slug = Column(String, nullable=False)
    prompt = Column(Text, nullable=False)
    description = Column(Text)
    category = Column(String, nullable=False, default=DEFAULT_TEMPLATE_CATEGORY)
    tags = Column(JSON, nullable=False, default=list)  # ["rally", "election"]
    preview_image_url = Column(String)
    position = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    campaign = relationship("Campaign", back_populates="templates")
