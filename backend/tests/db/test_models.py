import pytest
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError

from campaign_ledger.models.campaign import Campaign, CampaignTemplate
from tests.factories import CampaignFactory, CampaignTemplateFactory, CelebrityFactory


@pytest.fixture
def saved_celebrity(db_session: Session):
    celebrity = CelebrityFactory.build()
    db_session.add(celebrity)
    db_session.commit()
    return celebrity


@pytest.mark.db
class TestCampaignModel:
    """Test Campaign model constraints."""

    def test_defaults(self, db_session: Session, saved_celebrity):
        campaign = Campaign(name="Defaults", slug="defaults", celebrity_id=saved_celebrity.id)
        db_session.add(campaign)
        db_session.commit()
        db_session.refresh(campaign)

        assert len(campaign.id) == 36
        assert campaign.tokens == 0
        assert campaign.total_generations == 0
        assert campaign.is_active is True
        assert campaign.created_at is not None

    def test_slug_unique_constraint(self, db_session: Session, saved_celebrity):
        db_session.add(CampaignFactory.build(slug="taken", celebrity_id=saved_celebrity.id))
        db_session.commit()

        db_session.add(CampaignFactory.build(slug="taken", celebrity_id=saved_celebrity.id))
        with pytest.raises(IntegrityError):
            db_session.commit()

    def test_tokens_cannot_go_negative(self, db_session: Session, saved_celebrity):
        db_session.add(CampaignFactory.build(tokens=-1, celebrity_id=saved_celebrity.id))

        with pytest.raises(IntegrityError):
            db_session.commit()

    def test_celebrity_must_exist(self, db_session: Session):
        db_session.add(CampaignFactory.build(celebrity_id="nobody"))

        with pytest.raises(IntegrityError):
            db_session.commit()


@pytest.mark.db
class TestCampaignTemplateModel:
    """Test CampaignTemplate model constraints."""

    def test_slug_unique_within_campaign(self, db_session: Session, saved_celebrity):
        campaign = CampaignFactory.build(celebrity_id=saved_celebrity.id)
        campaign.templates.append(CampaignTemplateFactory.build(slug="rally", position=0))
        campaign.templates.append(CampaignTemplateFactory.build(slug="rally", position=1))
        db_session.add(campaign)

        with pytest.raises(IntegrityError):
            db_session.commit()

    def test_slug_reusable_across_campaigns(self, db_session: Session, saved_celebrity):
        for _ in range(2):
            campaign = CampaignFactory.build(celebrity_id=saved_celebrity.id)
            campaign.templates.append(CampaignTemplateFactory.build(slug="rally"))
            db_session.add(campaign)
        db_session.commit()

        assert db_session.query(CampaignTemplate).filter_by(slug="rally").count() == 2

    def test_orm_delete_cascades(self, db_session: Session, saved_celebrity):
        campaign = CampaignFactory.build(celebrity_id=saved_celebrity.id)
        campaign.templates.append(CampaignTemplateFactory.build())
        db_session.add(campaign)
        db_session.commit()

        db_session.delete(campaign)
        db_session.commit()

        assert db_session.query(CampaignTemplate).count() == 0
