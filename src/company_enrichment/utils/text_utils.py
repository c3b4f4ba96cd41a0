"""Helpers for reading loosely-typed provider values."""

import math
import re
from typing import Any

__all__ = ["extract_linkedin_url", "parse_number"]

_LINKEDIN_PROFILE_RE = re.compile(r"https://(?:www\.)?linkedin\.com/in/[a-zA-Z0-9-]+")


def extract_linkedin_url(text: Any) -> str | None:
    """Return the first LinkedIn profile URL found in free text, if any.

    Example:
        >>> extract_linkedin_url("CEO: https://linkedin.com/in/jane-doe (2019)")
        'https://linkedin.com/in/jane-doe'
    """
    if not text:
        return None
    match = _LINKEDIN_PROFILE_RE.search(str(text))
    return match.group(0) if match else None


def parse_number(value: Any) -> float | None:
    """Parse a provider value such as ``"1,250"`` or ``42`` into a float.

    Returns None for anything that is not a finite number.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        try:
            number = float(str(value).replace(",", "").strip())
        except ValueError:
            return None
    return number if math.isfinite(number) else None
