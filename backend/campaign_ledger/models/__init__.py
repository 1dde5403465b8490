from campaign_ledger.db.session import Base
from .celebrity import Celebrity
from .campaign import Campaign, CampaignTemplate, DEFAULT_TEMPLATE_CATEGORY
