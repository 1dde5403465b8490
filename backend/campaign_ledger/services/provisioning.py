"""
Administrative provisioning - the transactional boundary used by the API.

Composes the bundle validator, slug derivation and the ledger into the
create/delete/toggle/debit operations exposed to administrators.
"""

import logging
from typing import Optional, Sequence

from sqlalchemy.orm import Session

from campaign_ledger.core.config import settings
from campaign_ledger.core.exceptions import MissingRequiredField
from campaign_ledger.models.campaign import Campaign
from campaign_ledger.schemas.campaign import CampaignCreate
from campaign_ledger.services.ledger import CampaignLedger, EXCHANGE_RATE, TokenSnapshot
from campaign_ledger.services.storage import ImageStorage
from campaign_ledger.services.template_validator import TemplateInput, validate_bundle

logger = logging.getLogger(__name__)


class CampaignProvisioningService:

    def __init__(
        self,
        db: Session,
        storage: Optional[ImageStorage] = None,
        require_placeholder: Optional[bool] = None,
    ):
        self.storage = storage
        self.ledger = CampaignLedger(db, storage)
        if require_placeholder is None:
            require_placeholder = settings.REQUIRE_CELEBRITY_PLACEHOLDER
        self.require_placeholder = require_placeholder

    def create_campaign(self, meta: CampaignCreate, templates: Sequence[TemplateInput]) -> Campaign:
        """Validate the submission and create the campaign with its templates"""
        name = (meta.name or "").strip()
        if not name:
            raise MissingRequiredField("name")
        celebrity_id = (meta.celebrityId or "").strip()
        if not celebrity_id:
            raise MissingRequiredField("celebrityId")

        validated = validate_bundle(
            templates,
            storage=self.storage,
            require_placeholder=self.require_placeholder,
        )

        meta = meta.model_copy(update={"name": name, "celebrityId": celebrity_id})
        logger.info(f"Provisioning campaign '{name}' with {len(validated)} templates")
        return self.ledger.create_campaign(meta, validated, meta.tokens)

    def delete_campaign(self, campaign_id: str) -> None:
        self.ledger.delete_campaign(campaign_id)

    def set_active(self, campaign_id: str, active: bool) -> None:
        self.ledger.set_active(campaign_id, active)

    def debit_tokens(self, campaign_id: str, amount: int = EXCHANGE_RATE) -> TokenSnapshot:
        return self.ledger.debit_tokens(campaign_id, amount)
