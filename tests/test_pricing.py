"""
Tests for the pricing record builder and monetization classifier.

Usage:
    pytest tests/test_pricing.py -v
"""

import pytest
from src.analytics.models import CanonicalAppDetail, Platform, PricingRecord
from src.analytics.pricing import (
    COMPLETELY_FREE,
    FREE_WITH_ADS,
    FREEMIUM_ADS_IAP,
    FREEMIUM_ADS_SUBSCRIPTIONS,
    FREEMIUM_IAP,
    FREEMIUM_SUBSCRIPTIONS,
    PAID_PREMIUM,
    PAID_WITH_IAP,
    build_pricing_record,
    classify_monetization,
    extract_description_prices,
)


def make_detail(
    price: float = 0.0,
    description: str = "",
    iap: bool = False,
    ads: bool = False,
    iap_range: str = "",
) -> CanonicalAppDetail:
    """Helper to create an app detail with pricing fields."""
    return CanonicalAppDetail(
        id="com.example.app",
        title="Example",
        developer="Example Inc",
        developer_id="example",
        icon="",
        score=4.0,
        price=price,
        currency="USD",
        free=price == 0,
        category="Tools",
        platform=Platform.ANDROID,
        url="",
        description=description,
        offers_in_app_purchases=iap,
        in_app_product_price=iap_range,
        ad_supported=ads,
    )


def make_record(is_free=True, iap=False, subs=False, ads=False) -> PricingRecord:
    return PricingRecord(
        amount=0.0 if is_free else 1.99,
        currency="USD",
        formatted_price="",
        is_free=is_free,
        offers_in_app_purchases=iap,
        offers_subscriptions=subs,
        ad_supported=ads,
    )


# ============================================================================
# DECISION TABLE
# ============================================================================

class TestClassifyMonetization:

    @pytest.mark.parametrize("flags,model", [
        (dict(is_free=False, iap=True), PAID_WITH_IAP),
        (dict(is_free=False, iap=True, subs=True, ads=True), PAID_WITH_IAP),
        (dict(is_free=False), PAID_PREMIUM),
        (dict(is_free=False, subs=True, ads=True), PAID_PREMIUM),
        (dict(subs=True, ads=True), FREEMIUM_ADS_SUBSCRIPTIONS),
        (dict(subs=True, iap=True), FREEMIUM_SUBSCRIPTIONS),
        (dict(iap=True, ads=True), FREEMIUM_ADS_IAP),
        (dict(iap=True), FREEMIUM_IAP),
        (dict(ads=True), FREE_WITH_ADS),
        (dict(), COMPLETELY_FREE),
    ])
    def test_first_matching_branch_wins(self, flags, model):
        assert classify_monetization(make_record(**flags)) == model


# ============================================================================
# DESCRIPTION SCRAPING
# ============================================================================

class TestDescriptionPrices:

    def test_subscription_periods(self):
        _, subs = extract_description_prices(
            "Premium costs $4.99 per month or $39.99 per year."
        )
        assert [(item.amount, item.period) for item in subs] == [(4.99, "month"), (39.99, "year")]

    def test_in_app_purchase(self):
        in_app, subs = extract_description_prices("Unlock all levels for $2.99.")
        assert subs == []
        assert len(in_app) == 1
        assert in_app[0].amount == 2.99
        assert in_app[0].formatted_price == "$2.99"

    def test_unrelated_price_ignored(self):
        in_app, subs = extract_description_prices("Won the 2019 award, worth $500 to charity.")
        assert in_app == []
        assert subs == []

    def test_duplicates_collapsed(self):
        _, subs = extract_description_prices(
            "Subscribe for $9.99 monthly." + " " * 80 + "Again: subscribe for $9.99 monthly."
        )
        assert len(subs) == 1

    def test_empty_description(self):
        assert extract_description_prices("") == ([], [])
        assert extract_description_prices(None) == ([], [])


# ============================================================================
# PRICING RECORD
# ============================================================================

class TestBuildPricingRecord:

    def test_paid_with_iap_short_circuits(self):
        detail = make_detail(price=4.99, iap=True, ads=True,
                             description="Go premium: $1.99 per month.")
        record = build_pricing_record(detail)
        assert record.offers_subscriptions is True
        assert record.monetization_model == PAID_WITH_IAP

    def test_free_with_store_iap_flag(self):
        record = build_pricing_record(make_detail(iap=True, iap_range="$0.99 - $19.99"))
        assert record.monetization_model == FREEMIUM_IAP
        assert record.in_app_price_range == "$0.99 - $19.99"

    def test_scraped_items_add_to_flags(self):
        record = build_pricing_record(make_detail(ads=True, description="Buy coins from $0.99."))
        assert record.offers_in_app_purchases is True
        assert record.monetization_model == FREEMIUM_ADS_IAP

    def test_scraping_can_be_disabled(self):
        detail = make_detail(description="Premium plan: $4.99 per month.")
        assert build_pricing_record(detail, scrape_description=False).monetization_model == COMPLETELY_FREE
        assert build_pricing_record(detail).monetization_model == FREEMIUM_SUBSCRIPTIONS

    def test_formatted_price(self):
        assert build_pricing_record(make_detail(price=2.99)).formatted_price == "$2.99"
        assert build_pricing_record(make_detail()).formatted_price == "Free"

    def test_wire_format(self):
        data = build_pricing_record(make_detail(ads=True)).to_dict()
        assert data["basePrice"] == {
            "amount": 0.0,
            "currency": "USD",
            "formattedPrice": "Free",
            "isFree": True,
        }
        assert data["adSupported"] is True
        assert data["monetizationModel"] == FREE_WITH_ADS
