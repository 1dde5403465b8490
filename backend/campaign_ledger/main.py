from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError
from slowapi.errors import RateLimitExceeded
from contextlib import asynccontextmanager
from campaign_ledger.core.config import settings
from campaign_ledger.core.logging import setup_logging
from campaign_ledger.core.exceptions import (
    CampaignLedgerException, campaign_ledger_exception_handler,
    sqlalchemy_exception_handler, general_exception_handler
)
from campaign_ledger.core.rate_limiting import limiter, custom_rate_limit_exceeded_handler
from campaign_ledger.db.init_db import init_db
from campaign_ledger.api.v1.api import api_router

# Set up logging
setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management"""
    # Startup
    init_db()

    yield


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Campaign provisioning and token ledger",
    version="1.0.0",
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    lifespan=lifespan
)

# Add rate limiter to app
app.state.limiter = limiter

# Exception handlers
app.add_exception_handler(RateLimitExceeded, custom_rate_limit_exceeded_handler)
app.add_exception_handler(CampaignLedgerException, campaign_ledger_exception_handler)
app.add_exception_handler(SQLAlchemyError, sqlalchemy_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API router
app.include_router(api_router, prefix=settings.API_V1_STR)

# Preview images written by LocalImageStorage
app.mount(settings.MEDIA_URL, StaticFiles(directory=settings.MEDIA_ROOT, check_dir=False), name="media")

@app.get("/")
async def root():
    return {"message": "Campaign Ledger API is running"}

@app.get("/health")
async def health_check():
    return {"status": "healthy"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("campaign_ledger.main:app", host="0.0.0.0", port=8000, reload=True)
