"""Video source URL resolution."""

import structlog


logger = structlog.get_logger(__name__)

_ALLOWED_SCHEMES = ("http://", "https://")


def is_playable_url(url: str | None) -> bool:
    """Check that ``url`` is an absolute http(s) URL."""
    if not url:
        return False
    return url.strip().lower().startswith(_ALLOWED_SCHEMES)


def resolve_video_url(url: str | None, default_url: str) -> str:
    """Return ``url`` if playable, otherwise the fallback video."""
    if not url:
        return default_url
    if is_playable_url(url):
        return url.strip()
    logger.warning("invalid_video_url", url=url)
    return default_url
