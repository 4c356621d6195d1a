"""
Repository icon inference.

Assets without an explicit icon URL get the `icon.png` at the root of their
repository when the host is GitHub, GitLab or Bitbucket and the file exists
on the `main` or `master` branch.
"""

import logging
from urllib.parse import urlsplit

import httpx

from assetlib.models.asset import CACHEKEY_REPO_ICON, Asset
from assetlib.services.cache import CacheBackend

logger = logging.getLogger(__name__)

# Raw file URL templates per repository host, in probing order
ICON_URL_TEMPLATES = {
    "github.com": (
        "https://raw.githubusercontent.com/{slug}/main/icon.png",
        "https://raw.githubusercontent.com/{slug}/master/icon.png",
    ),
    "gitlab.com": (
        "https://gitlab.com/{slug}/raw/main/icon.png",
        "https://gitlab.com/{slug}/raw/master/icon.png",
    ),
    "bitbucket.org": (
        "https://bitbucket.org/{slug}/raw/main/icon.png",
        "https://bitbucket.org/{slug}/raw/master/icon.png",
    ),
}


def repository_icon_candidates(browse_url: str) -> list[str]:
    """
    Build the icon URLs to probe for a repository URL of the form
    `https://host/owner/repository`.

    URLs on other hosts, or without both an owner and a repository
    segment, give no candidates.
    """
    parts = urlsplit(browse_url)
    if parts.scheme not in ("http", "https"):
        return []
    templates = ICON_URL_TEMPLATES.get(parts.netloc.lower())
    if templates is None:
        return []

    segments = [segment for segment in parts.path.split("/") if segment]
    if len(segments) < 2:
        return []

    slug = f"{segments[0]}/{segments[1]}"
    return [template.format(slug=slug) for template in templates]


class IconResolver:
    """
    Resolves the icon URL shown for an asset.

    Args:
        cache: Store for inferred URLs
        client: HTTP client used for the HEAD probes; its timeout bounds
            each probe
        ttl: Seconds an inferred URL stays cached
    """

    def __init__(self, cache: CacheBackend, client: httpx.AsyncClient, ttl: int = 900):
        self.cache = cache
        self.client = client
        self.ttl = ttl

    async def resolve(self, asset: Asset) -> str:
        """Return the asset's icon URL, or an empty string if none is known."""
        if asset.icon_url:
            return asset.icon_url
        return await self.find_repository_icon(asset.asset_id, asset.browse_url) or ""

    async def find_repository_icon(self, asset_id: int, browse_url: str) -> str | None:
        """Look for an `icon.png` at the root of the asset's repository."""
        cache_key = f"{CACHEKEY_REPO_ICON}-{asset_id}"
        cached = self.cache.get(cache_key)
        if cached:
            logger.debug("Icon for asset #%s served from cache", asset_id)
            return cached

        icon_url = await self._first_existing_url(repository_icon_candidates(browse_url))
        if icon_url:
            self.cache.put(cache_key, icon_url, self.ttl)
        return icon_url

    async def _first_existing_url(self, urls: list[str]) -> str | None:
        for url in urls:
            try:
                response = await self.client.head(url)
            except (httpx.HTTPError, httpx.InvalidURL) as exc:
                # Give up on the first failed probe instead of trying the next branch
                logger.debug("Icon probe failed for %s: %s", url, exc)
                return None
            if response.status_code == 200:
                return url
        return None
