import logging
import re
from typing import Any, Dict, Optional

from pydantic import ValidationError

from catalogcache.models import App, Collection, SearchResponse

logger = logging.getLogger(__name__)


TIMESTAMP_FIELDS = ("added_at", "updated_at", "verification_timestamp")

# Upstream spelling -> canonical name. The canonical name wins when both exist.
FIELD_ALIASES = {
    "hits_per_page": "hitsPerPage",
    "processing_time_ms": "processingTimeMs",
    "total_hits": "totalHits",
    "total_pages": "totalPages",
    "facet_distribution": "facetDistribution",
    "facet_stats": "facetStats",
    "is_mobile_friendly": "isMobileFriendly",
}

_LEADING_INTEGER = re.compile(r"^\s*([+-]?\d+)")


def normalize_timestamp(value: Any) -> Optional[int]:
    """Coerce an upstream timestamp to an integer epoch.

    Numbers pass through (floats are truncated), numeric strings are parsed
    as base-10 integers and everything else yields ``None``.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            return None
        return int(value)
    if isinstance(value, str):
        match = _LEADING_INTEGER.match(value)
        if not match:
            return None
        return int(match.group(1))
    return None


def _canonical_fields(payload: Dict[str, Any]) -> Dict[str, Any]:
    data = dict(payload)
    for alias, canonical in FIELD_ALIASES.items():
        if alias not in data:
            continue
        value = data.pop(alias)
        if data.get(canonical) is None:
            data[canonical] = value
    return data


def normalize_app(payload: Dict[str, Any]) -> App:
    data = _canonical_fields(payload)
    for field in TIMESTAMP_FIELDS:
        if field in data:
            data[field] = normalize_timestamp(data[field])

    if not data.get("app_id") and data.get("id"):
        data["app_id"] = data["id"]
    return App.model_validate(data)


def _normalize_app_list(items: Any):
    """Normalize a list of app payloads, dropping the ones that fail validation."""
    if items is None:
        return None
    apps = []
    for item in items:
        if not isinstance(item, dict):
            continue
        try:
            apps.append(normalize_app(item))
        except ValidationError as e:
            app_id = item.get("app_id") or item.get("id")
            logger.warning(f"Skipping invalid app entry {app_id}: {e}")
    return apps


def normalize_collection(payload: Dict[str, Any]) -> Collection:
    data = _canonical_fields(payload)
    data["hits"] = _normalize_app_list(data.get("hits"))
    data["apps"] = _normalize_app_list(data.get("apps"))

    subcollections = data.get("subcollections")
    if subcollections is not None:
        normalized = []
        for item in subcollections:
            if not isinstance(item, dict):
                continue
            try:
                normalized.append(normalize_collection(item))
            except ValidationError as e:
                logger.warning(f"Skipping invalid subcollection {item.get('id')}: {e}")
        data["subcollections"] = normalized
    return Collection.model_validate(data)


def normalize_search_response(payload: Dict[str, Any]) -> SearchResponse:
    data = _canonical_fields(payload)
    data["hits"] = _normalize_app_list(data.get("hits"))
    return SearchResponse.model_validate(data)
