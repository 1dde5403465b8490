import pytest

from campaign_ledger.core.exceptions import CampaignNotFound, CelebrityNotFound
from campaign_ledger.schemas.campaign import Campaign as CampaignSchema
from campaign_ledger.services.directory import CampaignDirectory
from tests.factories import TemplateInputFactory


@pytest.fixture
def directory(db_session):
    return CampaignDirectory(db_session)


@pytest.mark.db
class TestCampaignDirectory:
    """Test public lookups of campaigns and templates."""

    def test_get_campaign_by_slug(self, directory, make_campaign):
        campaign = make_campaign(name="Modi 2024 Campaign")

        found = directory.get_campaign_by_slug("modi-2024-campaign")

        assert found.id == campaign.id

    def test_unknown_slug(self, directory, make_campaign):
        make_campaign()

        with pytest.raises(CampaignNotFound):
            directory.get_campaign_by_slug("no-such-campaign")

    def test_inactive_campaign_still_resolves(self, directory, make_campaign, ledger):
        campaign = make_campaign()
        ledger.set_active(campaign.id, False)

        found = directory.get_campaign_by_slug(campaign.slug)

        assert found.is_active is False

    def test_repeated_lookup_is_identical(self, directory, make_campaign):
        campaign = make_campaign()

        first = CampaignSchema.from_model(directory.get_campaign_by_slug(campaign.slug))
        second = CampaignSchema.from_model(directory.get_campaign_by_slug(campaign.slug))

        assert first.model_dump_json() == second.model_dump_json()

    def test_templates_only_for_owning_campaign(self, directory, make_campaign):
        shared = "Diwali Celebration"
        first = make_campaign(name="First", templates=[
            TemplateInputFactory.build(name=shared),
            TemplateInputFactory.build(name="Victory Rally"),
        ])
        second = make_campaign(name="Second", templates=[TemplateInputFactory.build(name=shared)])

        first_templates = directory.list_templates_for_campaign(first.id)
        second_templates = directory.list_templates_for_campaign(second.id)

        assert [t.name for t in first_templates] == [shared, "Victory Rally"]
        assert {t.campaign_id for t in first_templates} == {first.id}
        assert [t.campaign_id for t in second_templates] == [second.id]

    def test_templates_for_deleted_campaign_are_gone(self, directory, make_campaign, ledger):
        campaign_id = make_campaign().id
        ledger.delete_campaign(campaign_id)

        assert directory.list_templates_for_campaign(campaign_id) == []
        with pytest.raises(CampaignNotFound):
            directory.get_campaign(campaign_id)

    def test_list_campaigns(self, directory, make_campaign):
        created = {make_campaign(name=n).id for n in ["Alpha", "Beta", "Gamma"]}

        listed = directory.list_campaigns()

        assert {c.id for c in listed} == created

    def test_list_campaigns_most_recent_first(self, directory, make_campaign):
        created = [make_campaign(name=n).id for n in ["Zeta", "Alpha", "Mid"]]

        listed = directory.list_campaigns()

        assert [c.id for c in listed] == list(reversed(created))

    def test_list_campaigns_empty(self, directory, db_session):
        assert directory.list_campaigns() == []

    def test_get_celebrity(self, directory, celebrity):
        assert directory.get_celebrity("celeb-1").name == "Narendra Modi"

    def test_unknown_celebrity(self, directory, db_session):
        with pytest.raises(CelebrityNotFound):
            directory.get_celebrity("celeb-missing")
