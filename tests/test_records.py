"""Record builders: checkout attribution, partner coupon detection, amounts."""

from __future__ import annotations

import copy

import pytest
from pydantic import ValidationError

from checkoutrelay.services.records import (
    build_checkout_record,
    build_invoice_record,
    build_subscription_record,
    infer_source_channel,
)
from helpers import checkout_session

pytestmark = pytest.mark.unit

PARTNER = "PHENOM100"


def _discount(coupon_id: str | None) -> dict:
    return {"amount": 500, "discount": {"id": "di_1", "coupon": {"id": coupon_id}}}


def _with_discounts(*coupon_ids: str | None) -> dict:
    return checkout_session(
        total_details={
            "amount_discount": 500,
            "breakdown": {"discounts": [_discount(c) for c in coupon_ids], "taxes": []},
        }
    )


class TestCheckoutRecordBasics:
    def test_plain_checkout(self):
        record = build_checkout_record(checkout_session(), partner_code=PARTNER)

        assert record.kind == "checkout_completed"
        assert record.stripe_session_id == "cs_test_123"
        assert record.stripe_customer_id == "cus_123"
        assert record.stripe_subscription_id == "sub_123"
        assert record.amount_total == 2000
        assert record.currency == "usd"
        assert record.payment_status == "paid"
        assert record.phenom_partner is False
        assert record.phenom_code == ""
        assert record.source_channel == ""
        assert record.created == 1700000000

    def test_amount_is_not_converted(self):
        record = build_checkout_record(checkout_session(amount_total=1999), partner_code=PARTNER)
        assert record.amount_total == 1999

    def test_deterministic_and_pure(self):
        payload = _with_discounts("OTHER", PARTNER)
        payload["metadata"] = {"utm_source": "ig"}
        before = copy.deepcopy(payload)

        first = build_checkout_record(payload, partner_code=PARTNER)
        second = build_checkout_record(payload, partner_code=PARTNER)

        assert first == second
        assert first.to_fields() == second.to_fields()
        assert payload == before

    def test_to_fields_is_flat(self):
        fields = build_checkout_record(checkout_session(), partner_code=PARTNER).to_fields()
        assert "kind" not in fields
        assert all(not isinstance(v, (dict, list)) for v in fields.values())
        assert fields["stripe_session_id"] == "cs_test_123"

    def test_null_metadata_tolerated(self):
        record = build_checkout_record(checkout_session(metadata=None), partner_code=PARTNER)
        assert record.utm_source == ""

    def test_missing_session_id_is_error(self):
        payload = checkout_session()
        del payload["id"]
        with pytest.raises(ValidationError):
            build_checkout_record(payload, partner_code=PARTNER)


class TestLineItems:
    def test_no_line_items_yields_null_ids(self):
        record = build_checkout_record(checkout_session(), partner_code=PARTNER)
        assert record.price_id is None
        assert record.product_id is None

    def test_empty_line_items_yields_null_ids(self):
        record = build_checkout_record(checkout_session(line_items={"data": []}), partner_code=PARTNER)
        assert record.price_id is None

    def test_first_line_item_used(self):
        payload = checkout_session(
            line_items={
                "data": [
                    {"price": {"id": "price_A", "product": "prod_A"}},
                    {"price": {"id": "price_B", "product": "prod_B"}},
                ]
            }
        )
        record = build_checkout_record(payload, partner_code=PARTNER)
        assert record.price_id == "price_A"
        assert record.product_id == "prod_A"

    def test_expanded_product_object(self):
        payload = checkout_session(
            line_items={"data": [{"price": {"id": "price_A", "product": {"id": "prod_X", "name": "Pro"}}}]}
        )
        record = build_checkout_record(payload, partner_code=PARTNER)
        assert record.product_id == "prod_X"


class TestPartnerCoupon:
    def test_matching_coupon_sets_flag_and_code(self):
        record = build_checkout_record(_with_discounts(PARTNER), partner_code=PARTNER)
        assert record.phenom_partner is True
        assert record.phenom_code == PARTNER

    def test_match_after_other_discounts(self):
        record = build_checkout_record(_with_discounts("SUMMER10", None, PARTNER), partner_code=PARTNER)
        assert record.phenom_partner is True
        assert record.phenom_code == PARTNER

    def test_no_matching_coupon(self):
        record = build_checkout_record(_with_discounts("SUMMER10"), partner_code=PARTNER)
        assert record.phenom_partner is False
        assert record.phenom_code == ""

    def test_case_sensitive(self):
        record = build_checkout_record(_with_discounts("phenom100"), partner_code=PARTNER)
        assert record.phenom_partner is False

    def test_not_substring(self):
        record = build_checkout_record(_with_discounts("PHENOM1000"), partner_code=PARTNER)
        assert record.phenom_partner is False

    def test_configured_code_used(self):
        record = build_checkout_record(_with_discounts("ACME50"), partner_code="ACME50")
        assert record.phenom_partner is True
        assert record.phenom_code == "ACME50"

    def test_missing_breakdown(self):
        record = build_checkout_record(checkout_session(total_details=None), partner_code=PARTNER)
        assert record.phenom_partner is False

    def test_discount_without_coupon(self):
        payload = checkout_session(
            total_details={"breakdown": {"discounts": [{"amount": 100, "discount": None}]}}
        )
        record = build_checkout_record(payload, partner_code=PARTNER)
        assert record.phenom_partner is False


class TestAttribution:
    def test_utm_from_metadata(self):
        payload = checkout_session(
            metadata={
                "utm_source": "instagram",
                "utm_medium": "paid",
                "utm_campaign": "launch",
                "source_channel": "social",
            }
        )
        record = build_checkout_record(payload, partner_code=PARTNER)
        assert record.utm_source == "instagram"
        assert record.utm_medium == "paid"
        assert record.utm_campaign == "launch"
        assert record.utm_term == ""
        assert record.utm_content == ""
        assert record.source_channel == "social"

    def test_explicit_channel_beats_reference(self):
        payload = checkout_session(metadata={"source_channel": "partner"}, client_reference_id="sms_123")
        record = build_checkout_record(payload, partner_code=PARTNER)
        assert record.source_channel == "partner"

    @pytest.mark.parametrize(
        "reference, expected",
        [
            ("sms_campaign_7", "sms"),
            ("EMAIL-blast", "email"),
            ("from_phenom_landing_v2", "phenom_landing"),
            ("Social-Story", "social"),
            ("direct", ""),
        ],
    )
    def test_reference_keyword_fallback(self, reference, expected):
        assert infer_source_channel({}, reference) == expected

    def test_first_keyword_in_priority_order_wins(self):
        # contains both "email" and "social"; social is scanned first
        assert infer_source_channel({}, "email_to_social") == "social"

    def test_no_reference(self):
        assert infer_source_channel({}, None) == ""

    def test_empty_explicit_channel_falls_back(self):
        assert infer_source_channel({"source_channel": ""}, "sms_1") == "sms"


class TestOtherRecords:
    def test_subscription_record(self):
        payload = {
            "id": "sub_1",
            "customer": "cus_1",
            "status": "active",
            "current_period_start": 1700000000,
            "current_period_end": 1702592000,
            "items": {"data": [{"price": {"id": "price_monthly"}}]},
        }
        record = build_subscription_record(payload)
        assert record.kind == "subscription_created"
        assert record.plan_id == "price_monthly"
        assert record.stripe_customer_id == "cus_1"
        assert record.status == "active"

    def test_subscription_without_items(self):
        record = build_subscription_record({"id": "sub_1", "items": {"data": []}})
        assert record.plan_id is None

    def test_invoice_record(self):
        payload = {"id": "in_1", "customer": "cus_1", "subscription": "sub_1", "amount_paid": 4900, "currency": "usd"}
        record = build_invoice_record(payload)
        assert record.kind == "payment_succeeded"
        assert record.to_fields() == {
            "stripe_invoice_id": "in_1",
            "stripe_customer_id": "cus_1",
            "stripe_subscription_id": "sub_1",
            "amount_paid": 4900,
            "currency": "usd",
        }
