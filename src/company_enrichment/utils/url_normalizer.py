"""Company URL normalization.

Turns whatever was typed or exported into a spreadsheet cell into the
canonical domain used as the join key across every provider.
"""

import logging
import re
from urllib.parse import urlsplit

logger = logging.getLogger(__name__)

__all__ = ["normalize", "trim_url"]

# A scheme followed by one or more slashes, so "http:/acme.com" is handled too.
_SCHEME_RE = re.compile(r"^(?:[a-z][a-z0-9+-]*:/+)+")
_EXPORT_NOISE_RE = re.compile(r"[\[\]'\"]")
_TRAILING_RE = re.compile(r"[\s/]+$")
_HOSTNAME_RE = re.compile(r"^[\w.-]+$")


def _strip_www(value: str) -> str:
    while value.startswith("www."):
        value = value[4:]
    return value


def _clean(raw: str) -> str:
    cleaned = _EXPORT_NOISE_RE.sub("", raw).lower()
    # Repeat until stable so normalize() stays idempotent on odd input.
    previous = None
    while cleaned != previous:
        previous = cleaned
        cleaned = _SCHEME_RE.sub("", cleaned.strip())
        cleaned = _TRAILING_RE.sub("", _strip_www(cleaned))
    return cleaned


def normalize(raw: str | None) -> str:
    """Convert a raw company URL into its canonical domain.

    Strips the scheme, a leading ``www.``, bracket/quote characters left by
    spreadsheet exports and the trailing slash, lower-cases, then keeps only
    the hostname. Input that does not parse as a hostname comes back as the
    cleaned string instead of raising, so one bad cell never aborts a run.

    Args:
        raw: URL or domain as found in the spreadsheet

    Returns:
        Canonical domain, or the cleaned input when no hostname can be parsed

    Example:
        >>> normalize("https://www.Acme.com/about/")
        'acme.com'
        >>> normalize("bad url")
        'bad url'
    """
    if not raw:
        return ""

    cleaned = _clean(str(raw))
    if not cleaned:
        return ""

    try:
        hostname = urlsplit(f"//{cleaned}").hostname
    except ValueError:
        hostname = None

    if hostname:
        hostname = _strip_www(hostname)
        if hostname and _HOSTNAME_RE.match(hostname):
            return hostname

    logger.debug(f"Could not parse a hostname from {raw!r}, keeping {cleaned!r}")
    return cleaned


def trim_url(raw: str | None) -> str:
    """Return the original URL with whitespace and one trailing slash removed."""
    if not raw:
        return ""
    trimmed = str(raw).strip()
    if trimmed.endswith("/"):
        trimmed = trimmed[:-1]
    return trimmed
