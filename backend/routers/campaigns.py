from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool

from services.campaign_feed import fetch_campaigns
from services.rate_limiter import enforce_rate_limit
from settings import Settings, get_settings

router = APIRouter(
    prefix="/api",
    tags=["campaigns"],
    dependencies=[Depends(enforce_rate_limit)],
)


@router.get("/campaigns")
async def get_campaigns(settings: Settings = Depends(get_settings)):
    return await run_in_threadpool(
        fetch_campaigns,
        settings.campaign_webhook_url,
        settings.campaign_webhook_timeout_seconds,
    )
