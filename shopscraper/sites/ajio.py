"""AJIO: ``window.__PRELOADED_STATE__`` first, DOM second."""

from shopscraper.extractors.document import PRELOADED_STATE
from shopscraper.extractors.locators import DomSelector as Dom
from shopscraper.extractors.locators import StructuredPath as Json
from shopscraper.extractors.schema import ListingLayout, field_spec, schema
from shopscraper.sites.base import LD_BRAND, LD_IMAGES, LD_NAME, LD_PRICE, SiteConfig, price_field
from shopscraper.transformers.normalizers import (
    absolute_url,
    attribute_map,
    first_image,
    image_urls,
    parse_count,
    parse_rating,
)

ORIGIN = "https://www.ajio.com"

PRODUCT_SCHEMA = schema(
    "product",
    [
        field_spec(
            "title",
            Json("product.productDetails.name"),
            Json("product.data.name"),
            Dom("h1.prod-name"),
            Dom(".prod-name"),
            LD_NAME,
            Dom("h1"),
            required=True,
        ),
        field_spec(
            "brand",
            Json("product.productDetails.brandName"),
            Json("product.data.brandName"),
            Json("product.data.brand"),
            Dom("h2.brand-name"),
            Dom(".brand-name"),
            LD_BRAND,
        ),
        price_field(
            "selling_price",
            Json("product.productDetails.price.value"),
            Json("product.data.sellingPrice"),
            Json("product.data.price"),
            Dom(".prod-sp"),
            LD_PRICE,
        ),
        price_field(
            "mrp",
            Json("product.productDetails.wasPriceData.value"),
            Json("product.data.mrp"),
            Dom(".prod-cp"),
        ),
        field_spec(
            "images",
            Json("product.productDetails.images.*.url"),
            Json("product.data.images.*.url"),
            Dom(".zoom-wrap img", attr="src", many=True),
            Dom("img.rilrtl-lazy-img", attr="src", many=True),
            LD_IMAGES,
            post_process=image_urls(ORIGIN),
        ),
        field_spec(
            "description",
            Json("product.productDetails.description"),
            Json("product.data.description"),
            Dom(".prod-desc"),
        ),
        field_spec(
            "attributes",
            Dom("ul.prod-list li.detail-list", pairs=True),
            Dom(".mandatory-info li", pairs=True),
            post_process=attribute_map,
        ),
        field_spec("rating", Json("product.productDetails.ratingsResponse.aggregateRating.averageRating"), Dom("._3c5q0"), post_process=parse_rating),
        field_spec("review_count", Json("product.productDetails.ratingsResponse.aggregateRating.numUserRatings"), post_process=parse_count),
        field_spec("product_id", Json("product.productDetails.code"), Json("product.data.code")),
    ],
)

LISTING_SCHEMA = schema(
    "listing_item",
    [
        field_spec("title", Json("name"), Dom(".nameCls"), required=True),
        field_spec("brand", Json("fnlColorVariantData.brandName"), Dom(".brand")),
        price_field("selling_price", Json("price.value"), Dom(".price strong"), Dom(".price")),
        price_field("mrp", Json("wasPriceData.value"), Dom(".orginal-price")),
        field_spec(
            "image",
            Json("images.0.url"),
            Dom("img.rilrtl-lazy-img", attr="src"),
            Dom("img", attr="src"),
            post_process=first_image(ORIGIN),
        ),
        field_spec(
            "product_url",
            Json("url"),
            Dom("a.rilrtl-products-list__link", attr="href"),
            Dom("a", attr="href"),
            post_process=absolute_url(ORIGIN),
        ),
        field_spec("product_id", Json("code")),
    ],
)

SITE = SiteConfig(
    name="ajio",
    label="AJIO",
    domains=("ajio.com",),
    origin=ORIGIN,
    product_url_pattern=r"/p/[\w-]+",
    listing_url_pattern=r"/(c|s|search)/|[?&]text=",
    product_schema=PRODUCT_SCHEMA,
    listing_schema=LISTING_SCHEMA,
    listing_layout=ListingLayout(
        item_selectors=(".item.rilrtl-products-list__item", ".rilrtl-products-list__item"),
        items_path="grid.entities",
    ),
    embedded_json=(PRELOADED_STATE,),
)
