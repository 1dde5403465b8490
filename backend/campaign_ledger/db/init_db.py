import logging

from campaign_ledger.db.session import engine, Base

logger = logging.getLogger(__name__)


def init_db(bind=None):
    """Initialize database tables"""
    # Import all models to ensure they are registered with SQLAlchemy
    from campaign_ledger.models.celebrity import Celebrity  # noqa: F401
    from campaign_ledger.models.campaign import Campaign, CampaignTemplate  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
    logger.info("Database tables created successfully")

if __name__ == "__main__":
    init_db()
