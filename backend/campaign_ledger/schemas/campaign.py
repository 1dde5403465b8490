from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List

from campaign_ledger.services.ledger import EXCHANGE_RATE


class CampaignCreate(BaseModel):
    """Campaign metadata decoded from the provisioning form"""
    name: str = ""
    description: Optional[str] = None
    candidateName: Optional[str] = None
    celebrityId: str = ""
    tokens: int = 0


class Template(BaseModel):
    id: str
    campaignId: str
    name: str
    slug: str
    prompt: str
    description: Optional[str] = None
    category: str
    tags: List[str] = []
    previewImageUrl: Optional[str] = None

    @classmethod
    def from_model(cls, template) -> "Template":
        return cls(
            id=template.id,
            campaignId=template.campaign_id,
            name=template.name,
            slug=template.slug,
            prompt=template.prompt,
            description=template.description,
            category=template.category,
            tags=list(template.tags or []),
            previewImageUrl=template.preview_image_url,
        )


class Campaign(BaseModel):
    id: str
    name: str
    slug: str
    description: Optional[str] = None
    candidateName: Optional[str] = None
    celebrityId: str
    tokens: int
    totalGenerations: int
    isActive: bool
    # Derived at read time, never persisted
    freeGenerations: int
    isExhausted: bool
    createdAt: Optional[datetime] = None

    @classmethod
    def from_model(cls, campaign) -> "Campaign":
        return cls(
            id=campaign.id,
            name=campaign.name,
            slug=campaign.slug,
            description=campaign.description,
            candidateName=campaign.candidate_name,
            celebrityId=campaign.celebrity_id,
            tokens=campaign.tokens,
            totalGenerations=campaign.total_generations,
            isActive=campaign.is_active,
            freeGenerations=campaign.tokens // EXCHANGE_RATE,
            isExhausted=campaign.tokens == 0,
            createdAt=campaign.created_at,
        )


class CampaignDetail(Campaign):
    templates: List[Template] = []

    @classmethod
    def from_model(cls, campaign) -> "CampaignDetail":
        base = Campaign.from_model(campaign)
        return cls(
            **base.model_dump(),
            templates=[Template.from_model(t) for t in campaign.templates],
        )


class CampaignStatusUpdate(BaseModel):
    isActive: bool


class TokenDebitRequest(BaseModel):
    amount: int = Field(default=EXCHANGE_RATE)


class TokenSnapshot(BaseModel):
    campaignId: str
    tokens: int
    totalGenerations: int
    freeGenerations: int
