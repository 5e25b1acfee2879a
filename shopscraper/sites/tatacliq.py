"""Tata CLiQ: DOM with itemprop microdata, JSON-LD fallback."""

from shopscraper.extractors.locators import DomSelector as Dom
from shopscraper.extractors.locators import TextPattern
from shopscraper.extractors.schema import ListingLayout, field_spec, schema
from shopscraper.sites.base import (
    LD_BRAND,
    LD_DESCRIPTION,
    LD_IMAGES,
    LD_LOW_PRICE,
    LD_NAME,
    LD_PRICE,
    LD_RATING,
    LD_REVIEW_COUNT,
    LD_SKU,
    SiteConfig,
    price_field,
)
from shopscraper.transformers.normalizers import (
    absolute_url,
    attribute_map,
    first_image,
    image_urls,
    parse_count,
    parse_rating,
)

ORIGIN = "https://www.tatacliq.com"

PRODUCT_SCHEMA = schema(
    "product",
    [
        field_spec(
            "title",
            Dom("h1.ProductDetailsMainCard__productName"),
            Dom('h1[itemprop="name"]'),
            Dom(".ProductDescription__headerText1"),
            LD_NAME,
            Dom("h1"),
            required=True,
        ),
        field_spec(
            "brand",
            Dom('.ProductDetailsMainCard__brandName span[itemprop="name"]'),
            Dom(".ProductDetailsMainCard__brandName"),
            LD_BRAND,
        ),
        price_field(
            "selling_price",
            Dom('.ProductDetailsMainCard__price meta[itemprop="lowPrice"]', attr="content"),
            Dom(".ProductDetailsMainCard__price h3"),
            Dom(".ProductDescription__boldText"),
            LD_PRICE,
            LD_LOW_PRICE,
        ),
        price_field(
            "mrp",
            Dom(".ProductDetailsMainCard__cancelPrice"),
            Dom(".ProductDescription__priceCancelled span"),
            TextPattern(r"MRP:?\s*₹\s*([\d,.]+)"),
        ),
        field_spec(
            "images",
            Dom(".ProductGalleryDesktop__image img.Image__actual", attr="src", many=True),
            Dom(".ProductGalleryDesktop__navImage img.Image__actual", attr="src", many=True),
            Dom(".ProductGalleryDesktop__content img.Image__actual", attr="src", many=True),
            LD_IMAGES,
            post_process=image_urls(ORIGIN),
        ),
        field_spec(
            "description",
            Dom('.ProductDescriptionPage__accordionContent[itemprop="description"]'),
            LD_DESCRIPTION,
        ),
        field_spec(
            "attributes",
            Dom(".ProductDescriptionPage__contentDetailsPDP", pairs=True),
            Dom(".ProductDescriptionPage__featureHolder", pairs=True),
            post_process=attribute_map,
        ),
        field_spec("rating", Dom(".ProductDetailsMainCard__ratingLabel"), LD_RATING, post_process=parse_rating),
        field_spec("review_count", Dom(".ProductDetailsMainCard__reviewElectronics"), LD_REVIEW_COUNT, post_process=parse_count),
        field_spec("product_id", LD_SKU, TextPattern(r"/p-(mp\d+)", source="html")),
    ],
)

LISTING_SCHEMA = schema(
    "listing_item",
    [
        field_spec("title", Dom(".ProductDescription__name"), Dom("h2"), required=True),
        field_spec("brand", Dom(".ProductDescription__boldText")),
        price_field("selling_price", Dom(".ProductDescription__price-value"), Dom(".ProductDescription__discount h3")),
        price_field("mrp", Dom(".ProductDescription__mrp"), Dom(".ProductDescription__priceCancelled")),
        field_spec("image", Dom("img.Image__actual", attr="src"), Dom("img", attr="src"), post_process=first_image(ORIGIN)),
        field_spec("product_url", Dom("a", attr="href"), post_process=absolute_url(ORIGIN)),
        field_spec("rating", Dom(".ProductModule__rating-stars", attr="aria-label"), post_process=parse_rating),
        field_spec("product_id", TextPattern(r"/p-(mp\d+)", source="html")),
    ],
)

SITE = SiteConfig(
    name="tatacliq",
    label="Tata CLiQ",
    domains=("tatacliq.com",),
    origin=ORIGIN,
    product_url_pattern=r"/p-mp\d+",
    listing_url_pattern=r"/c-msh|/search/|/b-",
    product_schema=PRODUCT_SCHEMA,
    listing_schema=LISTING_SCHEMA,
    listing_layout=ListingLayout(
        item_selectors=(".PlpComponent-product-card-container", ".ProductModule__base"),
    ),
)
