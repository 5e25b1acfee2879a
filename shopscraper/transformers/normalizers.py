"""
Field normalizers: pure functions turning raw extracted text or JSON
fragments into typed values.

None of these raise on malformed input; "not found" is ``None`` (numbers)
or an empty string / list (text, URLs).
"""

import re
from typing import Any, Callable, Iterable, Optional

CURRENCY_RE = re.compile(r"(₹|Rs\.?|INR|\$|€|£)", re.IGNORECASE)
PRICE_RE = re.compile(r"[\d,]+(\.\d{1,2})?")
PERCENT_RE = re.compile(r"(\d+)\s*%")
RATING_RE = re.compile(r"\d+(?:\.\d+)?")
COUNT_RE = re.compile(r"\d[\d,]*")
WHITESPACE_RE = re.compile(r"\s+")
SRCSET_SPLIT_RE = re.compile(r",\s+")
BRAND_RE = re.compile(r"^([A-Za-z][A-Za-z&'.-]*)")

EMPTY_MARKERS = {"", "na", "n/a", "null", "none", "-"}


def clean_text(value: Any) -> str:
    """Collapse whitespace and strip. Non-strings are stringified."""
    if value is None or isinstance(value, (list, dict)):
        return ""
    return WHITESPACE_RE.sub(" ", str(value)).strip()


def parse_price(value: Any) -> Optional[float]:
    """Parse a price such as '₹1,234.50' into 1234.5."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if not isinstance(value, str):
        return None

    text = CURRENCY_RE.sub("", value)
    for match in PRICE_RE.finditer(text):
        digits = match.group(0).replace(",", "")
        if not digits or digits == ".":
            continue
        try:
            return float(digits)
        except ValueError:
            continue
    return None


def parse_percent(value: Any) -> Optional[int]:
    """Parse '40% off' into 40."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value)
    match = PERCENT_RE.search(str(value))
    return int(match.group(1)) if match else None


def parse_rating(value: Any) -> Optional[float]:
    """Parse '4.3 out of 5 stars' into 4.3. Values above 5 are rejected."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        rating = float(value)
    else:
        match = RATING_RE.search(str(value))
        if not match:
            return None
        rating = float(match.group(0))
    return rating if 0 <= rating <= 5 else None


def parse_count(value: Any) -> Optional[int]:
    """Parse '12,345 Ratings' into 12345."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value)
    match = COUNT_RE.search(str(value))
    return int(match.group(0).replace(",", "")) if match else None


def compute_discount_amount(mrp: float, selling_price: float) -> float:
    """Absolute discount; 0 when there is no markdown."""
    if mrp > selling_price:
        return round(mrp - selling_price, 2)
    return 0


def compute_discount_percent(mrp: float, selling_price: float) -> int:
    """Discount as a rounded percentage of MRP; 0 when MRP is 0."""
    if not mrp or mrp <= 0 or mrp <= selling_price:
        return 0
    return round((mrp - selling_price) / mrp * 100)


def normalize_image_url(raw: Any, base_origin: str) -> str:
    """
    Resolve an image reference against the site origin.

    Protocol-relative and root-relative URLs are resolved; absolute URLs pass
    through; anything that does not look like a URL becomes "".
    """
    if not isinstance(raw, str):
        return ""
    url = raw.strip()
    if not url:
        return ""

    # srcset: "a.jpg 1x, b.jpg 2x" -> "a.jpg" (bare commas are legal in CDN paths)
    if WHITESPACE_RE.search(url):
        url = SRCSET_SPLIT_RE.split(url)[0].split()[0]

    if url.startswith(("http://", "https://")):
        return url
    if url.startswith("//"):
        return f"https:{url}"
    if url.startswith("/"):
        return f"{base_origin.rstrip('/')}{url}"
    return ""


def dedupe_preserve_order(items: Iterable) -> list:
    """Stable de-duplication by value equality."""
    result = []
    for item in items:
        if item not in result:
            result.append(item)
    return result


def text_list(value: Any) -> list[str]:
    """Cleaned, de-duplicated list of strings."""
    if value is None:
        return []
    items = value if isinstance(value, (list, tuple)) else [value]
    cleaned = [clean_text(item) for item in items]
    return dedupe_preserve_order(item for item in cleaned if item)


def attribute_map(value: Any) -> dict:
    """Mapping with cleaned keys/values; placeholder values are dropped."""
    if not isinstance(value, dict):
        return {}
    result = {}
    for key, item in value.items():
        name = clean_text(key).rstrip(":")
        text = clean_text(item)
        if name and text.lower() not in EMPTY_MARKERS:
            result[name] = text
    return result


def image_urls(base_origin: str) -> Callable[[Any], list[str]]:
    """Post-processor factory: one or many raw image refs -> absolute, unique URLs."""

    def _normalize(value: Any) -> list[str]:
        items = value if isinstance(value, (list, tuple)) else [value]
        urls = (normalize_image_url(item, base_origin) for item in items)
        return dedupe_preserve_order(url for url in urls if url)

    return _normalize


def first_image(base_origin: str) -> Callable[[Any], str]:
    """Post-processor factory: first usable image URL."""
    normalize = image_urls(base_origin)

    def _first(value: Any) -> str:
        urls = normalize(value)
        return urls[0] if urls else ""

    return _first


def absolute_url(base_origin: str) -> Callable[[Any], str]:
    """Post-processor factory for links (product URLs)."""

    def _absolute(value: Any) -> str:
        if not isinstance(value, str) or not value.strip():
            return ""
        link = value.strip()
        if link.startswith(("http://", "https://")):
            return link
        if link.startswith("//"):
            return f"https:{link}"
        return f"{base_origin.rstrip('/')}/{link.lstrip('/')}"

    return _absolute


def derive_brand_from_title(title: Any) -> str:
    """
    Guess a brand from the first word of a title.

    Low confidence: callers must flag the value as inferred.
    """
    text = clean_text(title)
    match = BRAND_RE.match(text)
    return match.group(1).strip() if match else ""
