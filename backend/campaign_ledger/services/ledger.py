"""
Campaign ledger - owns campaign records and their token balances.

Every mutating operation here is a single database transaction: campaign
creation persists the campaign and its whole template bundle or nothing,
deletion removes both together, and token debits are one conditional
UPDATE so concurrent redemptions can never overspend the pool.
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional, Sequence

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from campaign_ledger.core.exceptions import (
    CampaignNotFound, CelebrityNotFound, EmptyBundle, InsufficientTokens,
    SlugCollision, StorageRejected, ValidationError,
)
from campaign_ledger.models.campaign import Campaign, CampaignTemplate
from campaign_ledger.models.celebrity import Celebrity
from campaign_ledger.services.slugs import derive_slug
from campaign_ledger.services.storage import ImageStorage

if TYPE_CHECKING:
    from campaign_ledger.schemas.campaign import CampaignCreate
    from campaign_ledger.services.template_validator import ValidatedTemplate

logger = logging.getLogger(__name__)

# Tokens consumed by one free generation
EXCHANGE_RATE = 10

# Largest balance or debit the INTEGER columns can hold
MAX_TOKENS = 2 ** 63 - 1


@dataclass(frozen=True)
class TokenSnapshot:
    campaign_id: str
    tokens: int
    total_generations: int

    @property
    def free_generations(self) -> int:
        return self.tokens // EXCHANGE_RATE


class CampaignLedger:
    """Transactional operations on campaigns, their templates and tokens"""

    def __init__(self, db: Session, storage: Optional[ImageStorage] = None):
        self.db = db
        self.storage = storage

    def create_campaign(
        self,
        meta: "CampaignCreate",
        templates: Sequence["ValidatedTemplate"],
        initial_tokens: int = 0,
    ) -> Campaign:
        """
        Persist a campaign together with its template bundle.

        The celebrity reference, the campaign slug and every template slug
        are checked inside the same transaction that inserts the rows.
        Preview images are stored before commit; if anything fails the
        transaction is rolled back and the stored images are removed again.

        Raises:
            EmptyBundle: no templates given
            CelebrityNotFound: ``meta.celebrityId`` does not exist
            EmptyDerivedSlug: a name has no letter or digit
            SlugCollision: campaign slug taken, or two templates share a slug
            StorageRejected: the storage declined a preview image
        """
        if not templates:
            raise EmptyBundle()
        if initial_tokens > MAX_TOKENS:
            raise ValidationError(f"Tokens must not exceed {MAX_TOKENS}", field="tokens")

        stored_urls: List[str] = []
        slug = derive_slug(meta.name)
        try:
            if self.db.get(Celebrity, meta.celebrityId) is None:
                raise CelebrityNotFound(meta.celebrityId)
            if self._campaign_slug_taken(slug):
                raise SlugCollision(slug)

            campaign = Campaign(
                name=meta.name,
                slug=slug,
                description=meta.description or None,
                candidate_name=meta.candidateName or None,
                celebrity_id=meta.celebrityId,
                tokens=max(initial_tokens, 0),
                total_generations=0,
                is_active=True,
            )

            template_slugs = set()
            for index, template in enumerate(templates):
                template_slug = derive_slug(template.name, index=index)
                if template_slug in template_slugs:
                    raise SlugCollision(template_slug, index=index)
                template_slugs.add(template_slug)

                preview_url = None
                if template.preview_image is not None:
                    preview_url = self._store_preview(template, index)
                    stored_urls.append(preview_url)

                campaign.templates.append(CampaignTemplate(
                    name=template.name,
                    slug=template_slug,
                    prompt=template.prompt,
                    description=template.description,
                    category=template.category,
                    tags=list(template.tags),
                    preview_image_url=preview_url,
                    position=index,
                ))

            self.db.add(campaign)
            self.db.commit()
        except IntegrityError as e:
            self._abort(stored_urls)
            # A concurrent creation reserved the slug between check and commit
            if self._campaign_slug_taken(slug):
                raise SlugCollision(slug) from e
            raise
        except Exception:
            self._abort(stored_urls)
            raise

        self.db.refresh(campaign)
        logger.info(
            f"Created campaign {campaign.id} ({campaign.slug}) with "
            f"{len(templates)} templates and {campaign.tokens} tokens"
        )
        return campaign

    def delete_campaign(self, campaign_id: str) -> None:
        """Delete a campaign and every template it owns in one transaction"""
        preview_urls = self.db.execute(
            select(CampaignTemplate.preview_image_url).where(
                CampaignTemplate.campaign_id == campaign_id,
                CampaignTemplate.preview_image_url.isnot(None),
            )
        ).scalars().all()

        try:
            self.db.execute(
                delete(CampaignTemplate).where(CampaignTemplate.campaign_id == campaign_id)
            )
            result = self.db.execute(delete(Campaign).where(Campaign.id == campaign_id))
            if result.rowcount == 0:
                raise CampaignNotFound(campaign_id)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        # The session may still hold the deleted rows
        self.db.expire_all()
        if self.storage is not None:
            for url in preview_urls:
                self.storage.delete(url)
        logger.info(f"Deleted campaign {campaign_id} and its templates")

    def debit_tokens(self, campaign_id: str, amount: int = EXCHANGE_RATE) -> TokenSnapshot:
        """
        Debit ``amount`` tokens and count one generation.

        The balance check and the decrement are one conditional UPDATE, so of
        two concurrent debits that only one balance can cover exactly one
        succeeds and the other sees the reduced balance.

        Raises:
            ValidationError: ``amount`` is not positive or exceeds ``MAX_TOKENS``
            CampaignNotFound: no such campaign
            InsufficientTokens: balance below ``amount``; nothing changes
        """
        if amount <= 0:
            raise ValidationError("Debit amount must be a positive integer", field="amount")
        if amount > MAX_TOKENS:
            raise ValidationError(f"Debit amount must not exceed {MAX_TOKENS}", field="amount")

        stmt = (
            update(Campaign)
            .where(Campaign.id == campaign_id, Campaign.tokens >= amount)
            .values(
                tokens=Campaign.tokens - amount,
                total_generations=Campaign.total_generations + 1,
            )
            .execution_options(synchronize_session=False)
        )

        try:
            result = self.db.execute(stmt)
            if result.rowcount == 1:
                tokens, total_generations = self.db.execute(
                    select(Campaign.tokens, Campaign.total_generations).where(
                        Campaign.id == campaign_id
                    )
                ).one()
                self.db.commit()
                logger.info(
                    f"Debited {amount} tokens from campaign {campaign_id}, {tokens} remaining"
                )
                return TokenSnapshot(campaign_id, tokens, total_generations)
            self.db.rollback()
        except Exception:
            self.db.rollback()
            raise

        available = self.db.execute(
            select(Campaign.tokens).where(Campaign.id == campaign_id)
        ).scalar_one_or_none()
        if available is None:
            raise CampaignNotFound(campaign_id)
        logger.warning(
            f"Rejected debit of {amount} tokens from campaign {campaign_id}: {available} available"
        )
        raise InsufficientTokens(campaign_id, amount, available)

    def set_active(self, campaign_id: str, active: bool) -> None:
        try:
            result = self.db.execute(
                update(Campaign)
                .where(Campaign.id == campaign_id)
                .values(is_active=active)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise CampaignNotFound(campaign_id)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        logger.info(f"Campaign {campaign_id} marked {'active' if active else 'inactive'}")

    def _campaign_slug_taken(self, slug: str) -> bool:
        return self.db.execute(
            select(Campaign.id).where(Campaign.slug == slug)
        ).first() is not None

    def _store_preview(self, template: "ValidatedTemplate", index: int) -> str:
        if self.storage is None:
            raise StorageRejected("No image storage is configured", index=index)
        try:
            return self.storage.save(template.preview_image)
        except StorageRejected as e:
            e.index = index
            raise

    def _abort(self, stored_urls: List[str]) -> None:
        self.db.rollback()
        if self.storage is not None:
            for url in stored_urls:
                self.storage.delete(url)
