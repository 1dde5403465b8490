from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from campaign_ledger.core.exceptions import CampaignNotFound, CelebrityNotFound
from campaign_ledger.models.campaign import Campaign, CampaignTemplate
from campaign_ledger.models.celebrity import Celebrity


class CampaignDirectory:
    """Read-side lookups for campaigns, their templates and celebrities"""

    def __init__(self, db: Session):
        self.db = db

    def get_campaign_by_slug(self, slug: str) -> Campaign:
        """Resolve a public campaign URL; inactive campaigns still resolve"""
        campaign = self.db.execute(
            select(Campaign).where(Campaign.slug == slug)
        ).scalar_one_or_none()
        if campaign is None:
            raise CampaignNotFound(slug)
        return campaign

    def get_campaign(self, campaign_id: str) -> Campaign:
        campaign = self.db.get(Campaign, campaign_id)
        if campaign is None:
            raise CampaignNotFound(campaign_id)
        return campaign

    def list_templates_for_campaign(self, campaign_id: str) -> List[CampaignTemplate]:
        """Templates owned by ``campaign_id`` in bundle order"""
        return list(self.db.execute(
            select(CampaignTemplate)
            .where(CampaignTemplate.campaign_id == campaign_id)
            .order_by(CampaignTemplate.position, CampaignTemplate.id)
        ).scalars())

    def list_campaigns(self) -> List[Campaign]:
        """All campaigns, most recently created first"""
        return list(self.db.execute(
            select(Campaign).order_by(Campaign.created_at.desc(), Campaign.id)
        ).scalars())

    def get_celebrity(self, celebrity_id: str) -> Celebrity:
        celebrity = self.db.get(Celebrity, celebrity_id)
        if celebrity is None:
            raise CelebrityNotFound(celebrity_id)
        return celebrity
