from fastapi import APIRouter

from campaign_ledger.api.v1.endpoints import campaigns, celebrities

api_router = APIRouter()

api_router.include_router(campaigns.router, prefix="/campaigns", tags=["campaigns"])
api_router.include_router(celebrities.router, prefix="/celebrities", tags=["celebrities"])
