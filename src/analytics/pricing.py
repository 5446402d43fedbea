"""
Pricing & Monetization Classifier
=================================

Builds a PricingRecord from a canonical app detail and derives its
monetization model from an ordered decision table.

Description scraping is a best-effort enrichment: store descriptions are
free text, and a missed or spurious price mention is expected. Scraped
items never override the store's structured flags (price, IAP, ads);
they can only add to them.
"""

import logging
import re
from typing import List, Optional, Tuple

from .models import CanonicalAppDetail, PriceItem, PricingRecord

logger = logging.getLogger(__name__)


# =============================================================================
# MONETIZATION DECISION TABLE
# =============================================================================

PAID_WITH_IAP = "Paid app with in-app purchases"
PAID_PREMIUM = "Paid app (premium)"
FREEMIUM_ADS_SUBSCRIPTIONS = "Freemium with ads and subscriptions"
FREEMIUM_SUBSCRIPTIONS = "Freemium with subscriptions"
FREEMIUM_ADS_IAP = "Freemium with ads and in-app purchases"
FREEMIUM_IAP = "Freemium with in-app purchases"
FREE_WITH_ADS = "Free with ads"
COMPLETELY_FREE = "Completely free"


def classify_monetization(record: PricingRecord) -> str:
    """
    First matching branch wins:
        paid            -> with IAP / premium
        subscriptions   -> freemium with (ads and) subscriptions
        in-app purchase -> freemium with (ads and) in-app purchases
        ads             -> free with ads
        otherwise       -> completely free
    """
    if not record.is_free:
        return PAID_WITH_IAP if record.offers_in_app_purchases else PAID_PREMIUM
    if record.offers_subscriptions:
        return FREEMIUM_ADS_SUBSCRIPTIONS if record.ad_supported else FREEMIUM_SUBSCRIPTIONS
    if record.offers_in_app_purchases:
        return FREEMIUM_ADS_IAP if record.ad_supported else FREEMIUM_IAP
    if record.ad_supported:
        return FREE_WITH_ADS
    return COMPLETELY_FREE


# =============================================================================
# DESCRIPTION SCRAPING (best effort)
# =============================================================================

PRICE_RE = re.compile(r"(?:US)?\$\s?(\d{1,4}(?:[.,]\d{2})?)|(\d{1,4}[.,]\d{2})\s?(?:USD|EUR|GBP|€|£)")

SUBSCRIPTION_PERIODS = [
    (re.compile(r"\b(?:per|a|/)\s?(?:month|mo)\b|\bmonthly\b", re.IGNORECASE), "month"),
    (re.compile(r"\b(?:per|a|/)\s?(?:year|yr)\b|\b(?:yearly|annual(?:ly)?)\b", re.IGNORECASE), "year"),
    (re.compile(r"\b(?:per|a|/)\s?week\b|\bweekly\b", re.IGNORECASE), "week"),
]

SUBSCRIPTION_HINT_RE = re.compile(r"subscri|membership|auto-renew|\bpremium\b|\bplan\b", re.IGNORECASE)
IAP_HINT_RE = re.compile(r"in-app purchase|in app purchase|unlock|coins?|gems?|credits?|pack\b", re.IGNORECASE)

# Characters of surrounding text inspected for period/kind hints
CONTEXT_WINDOW = 60


def _amount(raw: str) -> float:
    return float(raw.replace(",", "."))


def _period(context: str) -> Optional[str]:
    for pattern, period in SUBSCRIPTION_PERIODS:
        if pattern.search(context):
            return period
    return None


def extract_description_prices(description: Optional[str]) -> Tuple[List[PriceItem], List[PriceItem]]:
    """
    Scrape (in_app_items, subscription_items) from a store description.

    A mention is a subscription when its surrounding text names a billing
    period or a subscription word; otherwise it is an in-app purchase only
    when the text hints at one. Other prices are ignored. Duplicate
    (amount, period) pairs are collapsed.
    """
    if not description:
        return [], []

    in_app: List[PriceItem] = []
    subscriptions: List[PriceItem] = []
    seen = set()

    for match in PRICE_RE.finditer(description):
        raw = match.group(1) or match.group(2)
        try:
            amount = _amount(raw)
        except ValueError:
            continue

        start = max(0, match.start() - CONTEXT_WINDOW)
        end = min(len(description), match.end() + CONTEXT_WINDOW)
        context = description[start:end]
        # Period hints must follow the price ("$4.99 per month")
        period = _period(description[match.end():end])
        snippet = " ".join(context.split())

        if period or SUBSCRIPTION_HINT_RE.search(context):
            key = ("sub", amount, period)
            if key not in seen:
                seen.add(key)
                subscriptions.append(PriceItem(
                    amount=amount,
                    formatted_price=match.group(0).strip(),
                    context=snippet,
                    period=period,
                ))
        elif IAP_HINT_RE.search(context):
            key = ("iap", amount, None)
            if key not in seen:
                seen.add(key)
                in_app.append(PriceItem(
                    amount=amount,
                    formatted_price=match.group(0).strip(),
                    context=snippet,
                ))

    return in_app, subscriptions


def _format_price(amount: float, currency: str) -> str:
    if amount <= 0:
        return "Free"
    symbol = {"USD": "$", "EUR": "€", "GBP": "£"}.get(currency.upper(), "")
    return f"{symbol}{amount:.2f}" if symbol else f"{amount:.2f} {currency}".strip()


def build_pricing_record(detail: CanonicalAppDetail, scrape_description: bool = True) -> PricingRecord:
    """Combine structured store fields with scraped description prices."""
    in_app_items: List[PriceItem] = []
    subscription_items: List[PriceItem] = []
    if scrape_description:
        in_app_items, subscription_items = extract_description_prices(detail.description)

    record = PricingRecord(
        amount=detail.price,
        currency=detail.currency,
        formatted_price=_format_price(detail.price, detail.currency),
        is_free=detail.free,
        offers_in_app_purchases=detail.offers_in_app_purchases or bool(in_app_items),
        in_app_price_range=detail.in_app_product_price,
        in_app_items=in_app_items,
        offers_subscriptions=bool(subscription_items),
        subscription_items=subscription_items,
        ad_supported=detail.ad_supported,
    )
    record.monetization_model = classify_monetization(record)

    logger.debug(
        f"Pricing for {detail.id}: model='{record.monetization_model}', "
        f"{len(in_app_items)} IAP items, {len(subscription_items)} subscription items"
    )
    return record
