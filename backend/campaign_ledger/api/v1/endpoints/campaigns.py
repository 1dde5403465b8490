from fastapi import APIRouter, Depends, Request, Response, status
from starlette.concurrency import run_in_threadpool
from typing import List, Optional

from campaign_ledger.api.deps import get_directory, get_provisioning_service, require_admin
from campaign_ledger.api.v1.forms import parse_campaign_form
from campaign_ledger.core.config import settings
from campaign_ledger.core.rate_limiting import limiter
from campaign_ledger.schemas.campaign import (
    Campaign as CampaignSchema, CampaignDetail, CampaignStatusUpdate,
    Template as TemplateSchema, TokenDebitRequest, TokenSnapshot,
)
from campaign_ledger.services.directory import CampaignDirectory
from campaign_ledger.services.provisioning import CampaignProvisioningService

router = APIRouter()

@router.post(
    "",
    status_code=201,
    response_model=CampaignDetail,
    dependencies=[Depends(require_admin)],
)
async def create_campaign(
    request: Request,
    service: CampaignProvisioningService = Depends(get_provisioning_service),
):
    """
    Create a campaign and its exclusive templates from a multipart form
    """
    form = await request.form()
    meta, templates = await parse_campaign_form(form)
    campaign = await run_in_threadpool(service.create_campaign, meta, templates)
    return CampaignDetail.from_model(campaign)

@router.get("", response_model=List[CampaignSchema], dependencies=[Depends(require_admin)])
def list_campaigns(directory: CampaignDirectory = Depends(get_directory)):
    """
    Administrative listing of every campaign
    """
    return [CampaignSchema.from_model(c) for c in directory.list_campaigns()]

@router.get("/{slug}", response_model=CampaignSchema)
@limiter.limit(settings.PUBLIC_RATE_LIMIT)
def get_campaign_by_slug(
    request: Request,
    slug: str,
    directory: CampaignDirectory = Depends(get_directory),
):
    """
    Public lookup by slug; inactive campaigns resolve too
    """
    return CampaignSchema.from_model(directory.get_campaign_by_slug(slug))

@router.get("/{slug}/templates", response_model=List[TemplateSchema])
@limiter.limit(settings.PUBLIC_RATE_LIMIT)
def list_campaign_templates(
    request: Request,
    slug: str,
    directory: CampaignDirectory = Depends(get_directory),
):
    """
    Templates exclusive to the campaign, in the order they were submitted
    """
    campaign = directory.get_campaign_by_slug(slug)
    return [
        TemplateSchema.from_model(t)
        for t in directory.list_templates_for_campaign(campaign.id)
    ]

@router.delete(
    "/{campaign_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
)
def delete_campaign(
    campaign_id: str,
    service: CampaignProvisioningService = Depends(get_provisioning_service),
):
    service.delete_campaign(campaign_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.patch(
    "/{campaign_id}/status",
    response_model=CampaignSchema,
    dependencies=[Depends(require_admin)],
)
def update_campaign_status(
    campaign_id: str,
    update: CampaignStatusUpdate,
    service: CampaignProvisioningService = Depends(get_provisioning_service),
    directory: CampaignDirectory = Depends(get_directory),
):
    """
    Activate or deactivate a campaign
    """
    service.set_active(campaign_id, update.isActive)
    return CampaignSchema.from_model(directory.get_campaign(campaign_id))

@router.post(
    "/{campaign_id}/debit",
    response_model=TokenSnapshot,
    dependencies=[Depends(require_admin)],
)
def debit_campaign_tokens(
    campaign_id: str,
    debit: Optional[TokenDebitRequest] = None,
    service: CampaignProvisioningService = Depends(get_provisioning_service),
):
    """
    Redeem campaign tokens for one generation.

    Called by the generation pipeline before it runs a free generation;
    409 means the pool cannot cover it and the caller charges the visitor.
    """
    debit = debit or TokenDebitRequest()
    snapshot = service.debit_tokens(campaign_id, debit.amount)
    return TokenSnapshot(
        campaignId=snapshot.campaign_id,
        tokens=snapshot.tokens,
        totalGenerations=snapshot.total_generations,
        freeGenerations=snapshot.free_generations,
    )
