import re
from urllib.parse import quote, urlparse

SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)

FAVICON_ENDPOINT = "https://www.google.com/s2/favicons"


def normalize_url(url: str) -> str | None:
    """
    Normalize a user supplied tool URL:
    - Strip surrounding whitespace
    - Prepend https:// when no http(s) scheme is given
    - Return the URL or None if it does not parse with a host.
    """
    candidate = (url or "").strip()
    if not candidate:
        return None

    if not SCHEME_RE.match(candidate):
        candidate = "https://" + candidate

    if any(ch.isspace() for ch in candidate):
        return None

    try:
        parsed = urlparse(candidate)
        host = parsed.hostname
        # raises ValueError on a malformed port
        parsed.port
    except ValueError:
        return None

    if not host:
        return None
    return candidate


def favicon_url(url: str) -> str:
    return f"{FAVICON_ENDPOINT}?domain={quote(url, safe=':/')}&sz=128"
