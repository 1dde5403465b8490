from fastapi import APIRouter, Depends, Request

from campaign_ledger.api.deps import get_directory
from campaign_ledger.core.config import settings
from campaign_ledger.core.rate_limiting import limiter
from campaign_ledger.schemas.celebrity import Celebrity as CelebritySchema
from campaign_ledger.services.directory import CampaignDirectory

router = APIRouter()

@router.get("/{celebrity_id}", response_model=CelebritySchema)
@limiter.limit(settings.PUBLIC_RATE_LIMIT)
def get_celebrity(
    request: Request,
    celebrity_id: str,
    directory: CampaignDirectory = Depends(get_directory),
):
    """
    Celebrity bound to a campaign page
    """
    return CelebritySchema.from_model(directory.get_celebrity(celebrity_id))
