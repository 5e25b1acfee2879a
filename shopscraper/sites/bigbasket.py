"""BigBasket: Next.js site, product data under ``props.pageProps``."""

from shopscraper.extractors.document import NEXT_DATA
from shopscraper.extractors.locators import DomSelector as Dom
from shopscraper.extractors.locators import StructuredPath as Json
from shopscraper.extractors.locators import TextPattern
from shopscraper.extractors.schema import ListingLayout, field_spec, schema
from shopscraper.sites.base import SiteConfig, price_field
from shopscraper.transformers.normalizers import (
    absolute_url,
    first_image,
    image_urls,
    text_list,
)

ORIGIN = "https://www.bigbasket.com"

_PRODUCT = "props.pageProps.productDetails.children.0"

PRODUCT_SCHEMA = schema(
    "product",
    [
        field_spec("title", Json(f"{_PRODUCT}.desc"), Dom("h1"), Dom(".product-title"), required=True),
        field_spec("brand", Json(f"{_PRODUCT}.brand.name"), Json(f"{_PRODUCT}.brand"), Dom(".brand")),
        price_field(
            "selling_price",
            Json(f"{_PRODUCT}.pricing.discount.prim_price.sp"),
            Json(f"{_PRODUCT}.pricing.price"),
            Dom(".selling-price"),
            Dom(".offer-price"),
            TextPattern(r"Price:\s*₹\s*([\d,.]+)"),
        ),
        price_field(
            "mrp",
            Json(f"{_PRODUCT}.pricing.discount.mrp"),
            Json(f"{_PRODUCT}.pricing.mrp"),
            Dom(".mrp"),
            Dom(".strikethrough"),
            TextPattern(r"MRP:\s*₹\s*([\d,.]+)"),
        ),
        field_spec(
            "images",
            Json(f"{_PRODUCT}.images.*.l"),
            Json(f"{_PRODUCT}.images.*.m"),
            Dom('img[src*="bbassets.com"]', attr="src", many=True),
            post_process=image_urls(ORIGIN),
        ),
        field_spec("description", Dom(".product-description"), Dom('[data-testid="description"]')),
        field_spec("pack_size", Json(f"{_PRODUCT}.w"), Dom(".pack-size")),
        field_spec(
            "highlights",
            Json(f"{_PRODUCT}.additional_info.key_highlights"),
            post_process=text_list,
        ),
        field_spec("product_id", Json(f"{_PRODUCT}.id"), TextPattern(r"/pd/(\d+)", source="html")),
    ],
)

LISTING_SCHEMA = schema(
    "listing_item",
    [
        field_spec("title", Json("desc"), Dom("h3"), Dom('div[class*="break-words"]'), required=True),
        field_spec("brand", Json("brand.name"), Dom('span[class*="BrandName"]')),
        price_field("selling_price", Json("pricing.discount.prim_price.sp"), Dom('span[class*="Pricing___StyledLabel-"]')),
        price_field("mrp", Json("pricing.discount.mrp"), Dom('span[class*="Pricing___StyledLabel2"]')),
        field_spec("image", Json("images.0.m"), Dom("img", attr="src"), post_process=first_image(ORIGIN)),
        field_spec(
            "product_url",
            Json("absolute_url"),
            Dom('a[href*="/pd/"]', attr="href"),
            post_process=absolute_url(ORIGIN),
        ),
        field_spec("pack_size", Json("w")),
        field_spec("product_id", Json("id")),
    ],
)

SITE = SiteConfig(
    name="bigbasket",
    label="BigBasket",
    domains=("bigbasket.com",),
    origin=ORIGIN,
    product_url_pattern=r"/pd/\d+",
    listing_url_pattern=r"/(pc|cl|ps)/",
    product_schema=PRODUCT_SCHEMA,
    listing_schema=LISTING_SCHEMA,
    listing_layout=ListingLayout(
        item_selectors=("li.PaginateItems", 'div[class*="SKUDeck___StyledDiv"]'),
        items_path="props.pageProps.SSRData.tabs.0.product_info.products",
    ),
    embedded_json=(NEXT_DATA,),
    block_signatures=("you don't have permission to access",),
    warmup_url=ORIGIN + "/",
)
