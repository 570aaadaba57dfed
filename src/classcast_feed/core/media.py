"""Media reference classification.

Feed entries carry a ``media_ref`` that is either an explicit tier hint
("embedded", "hosted") or a raw video URL. Embedded platform links render a
thumbnail until played, so they are the cheapest to show; hosted files need
the browser to fetch metadata from our bucket or CDN.
"""

import re
from enum import Enum
from typing import Optional
from urllib.parse import urlparse


class MediaTier(str, Enum):
    EMBEDDED = "embedded"
    HOSTED = "hosted"
    DEFAULT = "default"


# Additive ordering bonus per tier (cheapest tier gets the largest bonus)
TIER_BONUS = {
    MediaTier.EMBEDDED: 30.0,
    MediaTier.HOSTED: 15.0,
    MediaTier.DEFAULT: 0.0,
}

_EMBED_HOSTS = ("youtube.com", "youtu.be", "youtube-nocookie.com", "vimeo.com", "loom.com")
_HOSTED_HOST_PATTERN = re.compile(r"(\.s3[.-]|\.s3\.amazonaws\.com$|\.cloudfront\.net$|\.amplifyapp\.com$)")
_VIDEO_EXTENSIONS = (".mp4", ".webm", ".mov", ".m4v", ".m3u8", ".ogg")


def _host_matches(host: str, domain: str) -> bool:
    return host == domain or host.endswith("." + domain)


def classify_media_ref(media_ref: Optional[str]) -> MediaTier:
    """Return the loading-cost tier for a media reference.

    Examples:
        >>> classify_media_ref("https://www.youtube.com/watch?v=abc123")
        <MediaTier.EMBEDDED: 'embedded'>
        >>> classify_media_ref("https://d111.cloudfront.net/videos/a.mp4")
        <MediaTier.HOSTED: 'hosted'>
        >>> classify_media_ref(None)
        <MediaTier.DEFAULT: 'default'>
    """
    if not media_ref:
        return MediaTier.DEFAULT

    text = str(media_ref).strip()
    lowered = text.lower()

    # Explicit hints win over URL sniffing
    for tier in MediaTier:
        if lowered == tier.value:
            return tier

    parsed = urlparse(text if "://" in text else f"//{text}")
    host = (parsed.hostname or "").lower()
    path = (parsed.path or "").lower()

    if host and any(_host_matches(host, domain) for domain in _EMBED_HOSTS):
        return MediaTier.EMBEDDED
    if host and _HOSTED_HOST_PATTERN.search(host):
        return MediaTier.HOSTED
    if path.endswith(_VIDEO_EXTENSIONS):
        return MediaTier.HOSTED
    return MediaTier.DEFAULT


def tier_bonus(media_ref: Optional[str]) -> float:
    """Return the ordering bonus for *media_ref*'s tier."""
    return TIER_BONUS[classify_media_ref(media_ref)]


__all__ = ["MediaTier", "TIER_BONUS", "classify_media_ref", "tier_bonus"]
