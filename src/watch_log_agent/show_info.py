"""Show metadata lookup against the TVDB search API."""

import logging

import requests
from pydantic import ValidationError

from watch_log_agent.models import ShowInfo, TvdbSearchResponse

DEFAULT_TVDB_BASE_URL = "https://api4.thetvdb.com/v4"

logger = logging.getLogger(__name__)


def get_show_info(query: str, *, token: str, base_url: str = DEFAULT_TVDB_BASE_URL) -> ShowInfo:
    """
    Search for a show and return the first USA record's title and network.
    Never raises: any request or parse failure returns a blank ShowInfo, which callers treat as not found.
    """
    logger.info("Getting show info for %r", query)
    try:
        resp = requests.get(
            f"{base_url.rstrip('/')}/search",
            params={"query": query},
            headers={"Authorization": f"Bearer {token}"},
        )
    except requests.RequestException as e:
        logger.error("Show search request failed: %s: %s", type(e).__name__, e)
        return ShowInfo()

    logger.debug("Show search response (%s): %s", resp.status_code, resp.text)
    if not resp.ok:
        logger.error("Show search returned HTTP %s", resp.status_code)
        return ShowInfo()

    try:
        body = TvdbSearchResponse.model_validate(resp.json())
    except (ValueError, ValidationError) as e:
        logger.error("Could not parse show search response: %s", e)
        return ShowInfo()

    logger.info("Show search returned %d result(s)", len(body.data or []))
    record = body.first_usa_record()
    info = ShowInfo(title=record.name, service=record.network) if record else ShowInfo()
    if not info.found:
        logger.warning("No USA record found for %r", query)
        return info
    logger.info("Got show info: title=%r service=%r", info.title, info.service)
    return info
