import secrets
from typing import Optional

from fastapi import Depends
from fastapi.security import APIKeyHeader
from sqlalchemy.orm import Session

from campaign_ledger.core.config import settings
from campaign_ledger.core.exceptions import AdminAuthError
from campaign_ledger.db.session import get_db
from campaign_ledger.services.directory import CampaignDirectory
from campaign_ledger.services.provisioning import CampaignProvisioningService
from campaign_ledger.services.storage import ImageStorage, get_image_storage

admin_key_header = APIKeyHeader(name="X-Admin-Key", auto_error=False)


def require_admin(api_key: Optional[str] = Depends(admin_key_header)) -> None:
    """Reject callers that do not present the configured administrator key"""
    if not settings.ADMIN_API_KEY or not api_key:
        raise AdminAuthError()
    if not secrets.compare_digest(api_key, settings.ADMIN_API_KEY):
        raise AdminAuthError("Invalid administrator key")


def get_directory(db: Session = Depends(get_db)) -> CampaignDirectory:
    return CampaignDirectory(db)


def get_provisioning_service(
    db: Session = Depends(get_db),
    storage: ImageStorage = Depends(get_image_storage),
) -> CampaignProvisioningService:
    return CampaignProvisioningService(db, storage)
