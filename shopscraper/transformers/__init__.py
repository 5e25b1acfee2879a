"""Field normalizers for raw extracted values."""

from .normalizers import (
    absolute_url,
    attribute_map,
    clean_text,
    compute_discount_amount,
    compute_discount_percent,
    dedupe_preserve_order,
    derive_brand_from_title,
    first_image,
    image_urls,
    normalize_image_url,
    parse_count,
    parse_percent,
    parse_price,
    parse_rating,
    text_list,
)

__all__ = [
    "absolute_url",
    "attribute_map",
    "clean_text",
    "compute_discount_amount",
    "compute_discount_percent",
    "dedupe_preserve_order",
    "derive_brand_from_title",
    "first_image",
    "image_urls",
    "normalize_image_url",
    "parse_count",
    "parse_percent",
    "parse_price",
    "parse_rating",
    "text_list",
]
