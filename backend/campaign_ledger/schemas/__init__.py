from .campaign import (
    Campaign, CampaignCreate, CampaignDetail, CampaignStatusUpdate,
    Template, TokenDebitRequest, TokenSnapshot,
)
from .celebrity import Celebrity
