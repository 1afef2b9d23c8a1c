"""Registry of named viewport profiles."""

import logging
from typing import Dict, Iterable, List

from ..errors import UnknownViewportError
from ..models.crawl import ViewportProfile

logger = logging.getLogger(__name__)


VIEWPORT_PROFILES: Dict[str, ViewportProfile] = {
    "desktop": ViewportProfile(name="desktop", viewport={"width": 1920, "height": 1080}),
    "mobile": ViewportProfile(name="mobile", device="iPhone 13 Pro"),
    "tablet": ViewportProfile(name="tablet", device="iPad Pro 11"),
}


def parse_viewport_list(value: str) -> List[str]:
    """Split a comma-separated viewport list, dropping blanks."""
    return [name.strip().lower() for name in value.split(",") if name.strip()]


def get_viewport(name: str) -> ViewportProfile:
    """Look up a viewport profile by name.

    Raises:
        UnknownViewportError: If no profile is registered under ``name``
    """
    try:
        return VIEWPORT_PROFILES[name.strip().lower()]
    except KeyError:
        raise UnknownViewportError(name) from None


def resolve_viewports(names: Iterable[str]) -> List[ViewportProfile]:
    """Resolve requested viewport names, skipping unknown ones with a warning.

    Order of the request is preserved and a name requested twice is only
    resolved once.
    """
    profiles: List[ViewportProfile] = []
    seen = set()

    for name in names:
        try:
            profile = get_viewport(name)
        except UnknownViewportError as e:
            logger.warning(f"{e}. Available: {', '.join(VIEWPORT_PROFILES)}. Skipping.")
            continue
        if profile.name in seen:
            continue
        seen.add(profile.name)
        profiles.append(profile)

    return profiles
