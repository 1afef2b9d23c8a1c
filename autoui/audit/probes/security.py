"""Security probe: HTTPS usage, mixed content and security response headers."""

import logging
from typing import Callable, Dict, List, Optional, Tuple

from playwright.async_api import Page, Response

from ..models.result import HeaderAudit, MixedContent, SecurityAudit

logger = logging.getLogger(__name__)


ACTIVE_CONTENT_TYPES = frozenset({"script", "stylesheet", "iframe", "fetch", "xhr"})

# Header name -> (description, compliance check on the raw value)
HEADER_RULES: Dict[str, Tuple[str, Callable[[str], bool]]] = {
    "Content-Security-Policy": (
        "Helps prevent XSS attacks by defining allowed content sources.",
        lambda value: True,
    ),
    "Strict-Transport-Security": (
        "Enforces secure (HTTPS) connections to the server.",
        lambda value: True,
    ),
    "X-Frame-Options": (
        "Protects against Clickjacking attacks.",
        lambda value: value in ("DENY", "SAMEORIGIN"),
    ),
    "X-Content-Type-Options": (
        "Prevents browsers from MIME-sniffing a response away from the declared content-type.",
        lambda value: value == "nosniff",
    ),
    "Referrer-Policy": (
        "Controls how much referrer information is sent with requests.",
        lambda value: value in ("no-referrer", "strict-origin", "strict-origin-when-cross-origin"),
    ),
}

# Subresource URLs the page referenced, tagged with a resource type compatible
# with Playwright's request.resource_type values.
SUBRESOURCE_SCRIPT = """
() => {
    const found = [];
    const add = (url, type) => { if (url) found.push({ url, type }); };
    document.querySelectorAll('script[src]').forEach(el => add(el.src, 'script'));
    document.querySelectorAll('link[rel~="stylesheet"][href]').forEach(el => add(el.href, 'stylesheet'));
    document.querySelectorAll('iframe[src]').forEach(el => add(el.src, 'iframe'));
    document.querySelectorAll('img[src]').forEach(el => add(el.currentSrc || el.src, 'image'));
    document.querySelectorAll('audio[src], video[src], source[src]').forEach(el => add(el.src, 'media'));
    performance.getEntriesByType('resource').forEach(entry => {
        const type = ['fetch', 'xmlhttprequest'].includes(entry.initiatorType)
            ? (entry.initiatorType === 'fetch' ? 'fetch' : 'xhr')
            : entry.initiatorType === 'link' ? 'stylesheet'
            : entry.initiatorType === 'img' ? 'image'
            : entry.initiatorType;
        add(entry.name, type);
    });
    return found;
}
"""


def audit_headers(headers: Dict[str, str]) -> List[HeaderAudit]:
    """Check presence and basic compliance of the audited security headers."""
    lowered = {name.lower(): value for name, value in headers.items()}
    results = []
    for name, (description, is_compliant) in HEADER_RULES.items():
        value: Optional[str] = lowered.get(name.lower())
        present = value is not None
        results.append(HeaderAudit(
            name=name,
            value=value,
            present=present,
            description=description,
            compliant=present and is_compliant(value),
        ))
    return results


def classify_mixed_content(resources: List[Dict[str, str]]) -> List[MixedContent]:
    """Keep insecure ``http://`` resources, one entry per URL in first-seen order."""
    seen = set()
    mixed = []
    for resource in resources:
        url = resource.get("url") or ""
        if not url.startswith("http://") or url in seen:
            continue
        seen.add(url)
        kind = "active" if resource.get("type") in ACTIVE_CONTENT_TYPES else "passive"
        mixed.append(MixedContent(url=url, type=kind))
    return mixed


async def audit_security(page: Page, response: Response) -> SecurityAudit:
    """Audit the main navigation response and the resources it pulled in."""
    is_https = response.url.startswith("https://")
    headers = audit_headers(response.headers)

    mixed_content: List[MixedContent] = []
    if is_https:
        resources = await page.evaluate(SUBRESOURCE_SCRIPT)
        mixed_content = classify_mixed_content(resources or [])
        if mixed_content:
            logger.debug(f"Mixed content: {len(mixed_content)} insecure resource(s)")

    return SecurityAudit(is_https=is_https, mixed_content=mixed_content, headers=headers)
