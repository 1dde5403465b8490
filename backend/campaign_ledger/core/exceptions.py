from typing import Any, Dict, Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
import logging

logger = logging.getLogger(__name__)

class CampaignLedgerException(Exception):
    """Base exception for the campaign ledger"""
    error_code = "campaign_ledger_error"

    def __init__(self, message: str, status_code: int = 500):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.error_code,
            "message": self.message,
            "detail": self.message,
        }

class ValidationError(CampaignLedgerException):
    """Raised when submitted input is missing or malformed"""
    error_code = "validation_error"

    def __init__(
        self,
        message: str = "Validation error",
        field: Optional[str] = None,
        index: Optional[int] = None,
    ):
        self.field = field
        self.index = index
        super().__init__(message, status.HTTP_400_BAD_REQUEST)

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        if self.field is not None:
            payload["field"] = self.field
        if self.index is not None:
            payload["index"] = self.index
        return payload

class EmptyBundle(ValidationError):
    """Raised when a campaign is submitted without templates"""
    error_code = "empty_bundle"

    def __init__(self, message: str = "At least one template is required"):
        super().__init__(message, field="templates")

class MissingRequiredField(ValidationError):
    error_code = "missing_required_field"

    def __init__(self, field: str, index: Optional[int] = None):
        if index is None:
            message = f"Field '{field}' is required"
        else:
            message = f"Template {index}: field '{field}' is required"
        super().__init__(message, field=field, index=index)

class MissingPlaceholder(ValidationError):
    error_code = "missing_placeholder"

    def __init__(self, placeholder: str, index: int):
        super().__init__(
            f"Template {index}: prompt must contain the {placeholder} placeholder",
            field="prompt",
            index=index,
        )

class EmptyDerivedSlug(ValidationError):
    """Raised when a display name yields a slug without any letter or digit"""
    error_code = "empty_derived_slug"

    def __init__(self, name: str, field: str = "name", index: Optional[int] = None):
        super().__init__(
            f"Name '{name}' must contain at least one letter or digit to form a URL slug",
            field=field,
            index=index,
        )

class SlugCollision(CampaignLedgerException):
    """Raised when a derived slug is already taken in its namespace"""
    error_code = "slug_collision"

    def __init__(self, slug: str, field: str = "name", index: Optional[int] = None):
        self.slug = slug
        self.field = field
        self.index = index
        if index is None:
            message = f"A campaign with slug '{slug}' already exists"
        else:
            message = f"Template {index}: slug '{slug}' is already used in this campaign"
        super().__init__(message, status.HTTP_409_CONFLICT)

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        payload["slug"] = self.slug
        payload["field"] = self.field
        if self.index is not None:
            payload["index"] = self.index
        return payload

class NotFound(CampaignLedgerException):
    error_code = "not_found"

    def __init__(self, message: str = "Not found"):
        super().__init__(message, status.HTTP_404_NOT_FOUND)

class CelebrityNotFound(NotFound):
    error_code = "celebrity_not_found"

    def __init__(self, celebrity_id: str):
        super().__init__(f"Celebrity '{celebrity_id}' not found")

class CampaignNotFound(NotFound):
    error_code = "campaign_not_found"

    def __init__(self, key: str):
        super().__init__(f"Campaign '{key}' not found")

class InsufficientTokens(CampaignLedgerException):
    """Raised when a debit exceeds the remaining campaign balance"""
    error_code = "insufficient_tokens"

    def __init__(self, campaign_id: str, requested: int, available: int):
        self.campaign_id = campaign_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Campaign has {available} tokens, {requested} requested",
            status.HTTP_409_CONFLICT,
        )

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        payload["requested"] = self.requested
        payload["available"] = self.available
        return payload

class StorageRejected(CampaignLedgerException):
    """Raised when the image storage declines an uploaded asset"""
    error_code = "storage_rejected"

    def __init__(self, message: str, index: Optional[int] = None):
        self.index = index
        super().__init__(message, status.HTTP_422_UNPROCESSABLE_ENTITY)

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        payload["field"] = "previewImage"
        if self.index is not None:
            payload["index"] = self.index
        return payload

class AdminAuthError(CampaignLedgerException):
    error_code = "not_authenticated"

    def __init__(self, message: str = "Administrator credentials required"):
        super().__init__(message, status.HTTP_401_UNAUTHORIZED)

async def campaign_ledger_exception_handler(request: Request, exc: CampaignLedgerException):
    """Handle custom ledger exceptions"""
    if exc.status_code >= 500:
        logger.error(f"Campaign ledger exception: {exc.message}")
    else:
        logger.warning(f"{exc.error_code}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )

async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError):
    """Handle SQLAlchemy database exceptions"""
    logger.error(f"Database error: {str(exc)}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "database_error", "message": "Database error occurred", "detail": "Database error occurred"}
    )

async def general_exception_handler(request: Request, exc: Exception):
    """Handle general exceptions"""
    logger.error(f"Unexpected error: {str(exc)}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "internal_error", "message": "Internal server error", "detail": "Internal server error"}
    )
