import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.request import Request as UrlRequest, urlopen

from errors import ConfigurationError, UpstreamFault

logger = logging.getLogger(__name__)


class CampaignPayloadKind(str, Enum):
    ARRAY = "array"
    OBJECT_WITH_ARRAY = "object_with_array"
    SINGLE_OBJECT = "single_object"
    EMPTY = "empty"
    UNPARSEABLE = "unparseable"


@dataclass
class CampaignPayload:
    kind: CampaignPayloadKind
    campaigns: list[Any] = field(default_factory=list)


def parse_campaign_payload(text: str | None) -> CampaignPayload:
    """Classify a webhook body and normalize it to a list of campaigns."""
    if not text or not text.strip():
        return CampaignPayload(CampaignPayloadKind.EMPTY)

    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return CampaignPayload(CampaignPayloadKind.UNPARSEABLE)

    if isinstance(data, list):
        return CampaignPayload(CampaignPayloadKind.ARRAY, data)

    if isinstance(data, dict):
        campaigns = data.get("campaigns")
        if isinstance(campaigns, list):
            return CampaignPayload(CampaignPayloadKind.OBJECT_WITH_ARRAY, campaigns)
        if data.get("id") and data.get("name"):
            return CampaignPayload(CampaignPayloadKind.SINGLE_OBJECT, [data])

    return CampaignPayload(CampaignPayloadKind.EMPTY)


def _fetch_text(url: str, timeout_seconds: int) -> str:
    req = UrlRequest(url, headers={"Accept": "application/json"}, method="GET")
    try:
        with urlopen(req, timeout=timeout_seconds) as resp:
            return resp.read().decode("utf-8")
    except HTTPError as exc:
        logger.error("CAMPAIGNS: webhook returned status %s", exc.code)
        raise UpstreamFault(
            "Failed to fetch campaigns",
            detail=f"Webhook returned status: {exc.code}",
        ) from exc
    except (URLError, TimeoutError, OSError) as exc:
        logger.error("CAMPAIGNS: webhook request failed: %s", exc)
        raise UpstreamFault("Failed to fetch campaigns", detail=str(exc)) from exc


def fetch_campaigns(url: str, timeout_seconds: int = 15) -> list[Any]:
    if not url:
        raise ConfigurationError("Campaign webhook URL not configured")

    payload = parse_campaign_payload(_fetch_text(url, timeout_seconds))

    if payload.kind is CampaignPayloadKind.UNPARSEABLE:
        logger.error("CAMPAIGNS: webhook response is not valid JSON")
        raise UpstreamFault("Invalid response from campaign webhook")
    if payload.kind is CampaignPayloadKind.EMPTY:
        logger.warning("CAMPAIGNS: webhook returned no campaigns")

    logger.info("CAMPAIGNS: kind=%s count=%s", payload.kind.value, len(payload.campaigns))
    return payload.campaigns
