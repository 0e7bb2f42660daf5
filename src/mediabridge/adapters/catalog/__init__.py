"""Public interface for the provider catalog adapter."""

from __future__ import annotations

from .client import CatalogAPIError, CatalogClient, segment_for, segments_from_ranking
from .schema import MediaInfoResponse, SearchResponse, SearchResultPayload
from .translator import parse_year, translate_media_info, translate_search_page

__all__ = [
    "CatalogAPIError",
    "CatalogClient",
    "MediaInfoResponse",
    "SearchResponse",
    "SearchResultPayload",
    "parse_year",
    "segment_for",
    "segments_from_ranking",
    "translate_media_info",
    "translate_search_page",
]
