import threading

import pytest
from sqlalchemy.orm import sessionmaker

from campaign_ledger.core.exceptions import InsufficientTokens
from campaign_ledger.db.session import Base, build_engine
from campaign_ledger.models.campaign import Campaign
from campaign_ledger.services.ledger import CampaignLedger
from tests.factories import CampaignFactory, CampaignTemplateFactory, CelebrityFactory


@pytest.fixture
def file_session_factory(tmp_path):
    """Sessions on a file-backed SQLite database, one connection per session."""
    engine = build_engine(f"sqlite:///{tmp_path / 'ledger.db'}")
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield factory
    engine.dispose()


def seed_campaign(session_factory, tokens):
    with session_factory() as session:
        celebrity = CelebrityFactory.build()
        campaign = CampaignFactory.build(celebrity_id=celebrity.id, tokens=tokens)
        campaign.templates.append(CampaignTemplateFactory.build())
        session.add_all([celebrity, campaign])
        session.commit()
        return campaign.id


def run_concurrent_debits(session_factory, campaign_id, amounts):
    barrier = threading.Barrier(len(amounts))
    results = [None] * len(amounts)

    def worker(slot, amount):
        with session_factory() as session:
            ledger = CampaignLedger(session)
            barrier.wait()
            try:
                results[slot] = ledger.debit_tokens(campaign_id, amount)
            except InsufficientTokens as e:
                results[slot] = e

    threads = [
        threading.Thread(target=worker, args=(slot, amount))
        for slot, amount in enumerate(amounts)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)
    return results


@pytest.mark.integration
class TestConcurrentDebits:
    """Test that simultaneous debits never overspend the pool."""

    def test_two_debits_against_balance_for_one(self, file_session_factory):
        campaign_id = seed_campaign(file_session_factory, tokens=15)

        results = run_concurrent_debits(file_session_factory, campaign_id, [10, 10])

        successes = [r for r in results if not isinstance(r, InsufficientTokens)]
        failures = [r for r in results if isinstance(r, InsufficientTokens)]
        assert len(successes) == 1
        assert len(failures) == 1
        assert successes[0].tokens == 5
        assert failures[0].available == 5

        with file_session_factory() as session:
            campaign = session.get(Campaign, campaign_id)
            assert campaign.tokens == 5
            assert campaign.total_generations == 1

    def test_many_debits_spend_exactly_the_pool(self, file_session_factory):
        campaign_id = seed_campaign(file_session_factory, tokens=50)

        results = run_concurrent_debits(file_session_factory, campaign_id, [10] * 8)

        successes = [r for r in results if not isinstance(r, InsufficientTokens)]
        assert len(successes) == 5
        assert sorted(s.tokens for s in successes) == [0, 10, 20, 30, 40]

        with file_session_factory() as session:
            campaign = session.get(Campaign, campaign_id)
            assert campaign.tokens == 0
            assert campaign.total_generations == 5
