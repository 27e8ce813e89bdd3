"""Unit tests for the pure marketplace rules in app.domain."""

from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from decimal import Decimal

import pytest

from app.core.exceptions import (
    InsufficientPoints,
    InvalidBookingStatus,
    InvalidRefundStatus,
    ValidationError,
)
from app.domain import booking_state, fees, plans, pricing, reports, rewards, tiers


class TestPricing:
    def test_quote_without_promo_ignores_discount(self):
        quote = pricing.quote(Decimal("1000"), 3, Decimal("10"), listing_promo="SUMMER")

        assert quote.subtotal == Decimal("3000.00")
        assert quote.discount_amount == Decimal("0")
        assert quote.total == Decimal("3000.00")
        assert quote.promo_applied is False

    def test_matching_promo_is_case_insensitive(self):
        quote = pricing.quote(
            Decimal("1000"), 3, Decimal("10"), listing_promo="SUMMER", promo_code=" summer "
        )

        assert quote.promo_applied is True
        assert quote.discount_amount == Decimal("300")
        assert quote.total == Decimal("2700.00")

    def test_discount_rounds_to_whole_pesos(self):
        quote = pricing.quote(
            Decimal("999"), 1, Decimal("12.5"), listing_promo="X", promo_code="x"
        )
        # 999 * 12.5% = 124.875
        assert quote.discount_amount == Decimal("125")
        assert quote.total == Decimal("874.00")

    def test_zero_rate_is_rejected(self):
        with pytest.raises(ValidationError):
            pricing.quote(Decimal("0"), 2)

    def test_nights_round_partial_days_up(self):
        start = datetime(2026, 5, 1, 14, 0)
        end = datetime(2026, 5, 3, 15, 0)
        assert pricing.nights_between(start, end) == 3
        assert pricing.nights_between(date(2026, 5, 1), date(2026, 5, 3)) == 2

    @pytest.mark.parametrize(
        "check_in, check_out, guests, max_guests",
        [
            (None, date(2026, 5, 3), 1, None),
            (date(2026, 5, 3), date(2026, 5, 3), 1, None),
            (date(2026, 5, 1), date(2026, 5, 3), 0, None),
            (date(2026, 5, 1), date(2026, 5, 3), 5, 4),
        ],
    )
    def test_invalid_stays(self, check_in, check_out, guests, max_guests):
        with pytest.raises(ValidationError):
            pricing.validate_stay(check_in, check_out, guests, max_guests)


class TestTiers:
    @pytest.mark.parametrize(
        "points, expected",
        [(0, "bronze"), (499, "bronze"), (500, "silver"), (1500, "gold"), (3500, "platinum"), (7000, "diamond")],
    )
    def test_tier_boundaries(self, points, expected):
        assert tiers.tier_for(points).key == expected

    def test_progress_within_tier(self):
        # silver spans 500..1500
        assert tiers.tier_progress(1000) == 50
        assert tiers.points_to_next_tier(1000) == 500

    def test_top_tier_is_complete(self):
        assert tiers.tier_progress(9000) == 100
        assert tiers.points_to_next_tier(9000) == 0
        assert tiers.next_tier(tiers.tier_for(9000)) is None


class TestPlans:
    def test_label_round_trip(self):
        assert plans.plan_key_from_label("Pro Monthly") == "pro"
        assert plans.plan_key_from_label("Annual Unlimited") == "annual"
        assert plans.plan_key_from_label(None) is None

    def test_upgrade_only_moves_up(self):
        assert [p.key for p in plans.upgrade_options("basic")] == ["pro", "annual"]
        assert plans.upgrade_options("annual") == []
        assert plans.assert_upgrade_allowed("basic", "pro").listing_limit == 8

        with pytest.raises(ValidationError):
            plans.assert_upgrade_allowed("pro", "basic")

    def test_unknown_plan(self):
        with pytest.raises(ValidationError):
            plans.get_plan("platinum")


class TestRewards:
    def test_spend_requires_enough_points(self):
        assert rewards.spend(200, 150) == 50
        with pytest.raises(InsufficientPoints):
            rewards.spend(100, 150)

    def test_fee_discount_window_is_thirty_days(self):
        reward = rewards.get_reward("fee_discount")
        now = datetime(2026, 1, 1, tzinfo=UTC)
        start, end = rewards.validity_window(reward, now)
        assert start == now
        assert end - start == timedelta(days=30)

    def test_unknown_reward(self):
        with pytest.raises(ValidationError):
            rewards.get_reward("free_money")


@dataclass
class _Discount:
    discount_percent: Decimal
    valid_from: datetime
    valid_until: datetime


class TestFees:
    def test_best_active_discount_wins(self):
        now = datetime(2026, 6, 15, tzinfo=UTC)
        discounts = [
            _Discount(Decimal("5"), now - timedelta(days=1), now + timedelta(days=1)),
            _Discount(Decimal("10"), now - timedelta(days=1), now + timedelta(days=1)),
            _Discount(Decimal("20"), now - timedelta(days=40), now - timedelta(days=10)),
        ]
        assert fees.effective_platform_fee(Decimal("15"), discounts, now) == Decimal("5")

    def test_fee_never_negative(self):
        now = datetime(2026, 6, 15, tzinfo=UTC)
        discounts = [_Discount(Decimal("30"), now, now)]
        assert fees.effective_platform_fee(Decimal("15"), discounts, now) == Decimal("0")

    def test_split_amount(self):
        fee, net = fees.split_amount(Decimal("2700.00"), Decimal("15"))
        assert fee == Decimal("405.00")
        assert net == Decimal("2295.00")


class TestReports:
    def test_week_runs_monday_to_sunday(self):
        start, end = reports.period_window("week", date(2026, 3, 12))  # a Thursday
        assert start.date() == date(2026, 3, 9)
        assert end.date() == date(2026, 3, 15)

    def test_month_and_year_windows(self):
        start, end = reports.period_window("month", date(2024, 2, 10))
        assert (start.date(), end.date()) == (date(2024, 2, 1), date(2024, 2, 29))

        start, end = reports.period_window("year", date(2026, 7, 1))
        assert (start.date(), end.date()) == (date(2026, 1, 1), date(2026, 12, 31))

    def test_missing_timestamp_is_outside_window(self):
        window = reports.period_window("month", date(2026, 3, 1))
        assert reports.in_window(None, window) is False
        assert reports.in_window(datetime(2026, 3, 31, 23, 59), window) is True

    def test_status_groups(self):
        assert reports.status_matches("completed", "confirmed")
        assert reports.status_matches("pending", None)
        assert reports.status_matches("declined", "cancelled")
        assert not reports.status_matches("completed", "pending")
        assert reports.status_matches("all", "anything")
        assert reports.payment_status_matches("approved", "confirmed")


class TestBookingState:
    def test_valid_transitions(self):
        booking_state.assert_booking_transition("pending", "accepted")
        booking_state.assert_booking_transition("accepted", "confirmed")
        booking_state.assert_booking_transition("confirmed", "refunded")

    @pytest.mark.parametrize(
        "current, target",
        [("declined", "accepted"), ("pending", "confirmed"), ("refunded", "confirmed")],
    )
    def test_invalid_transitions(self, current, target):
        with pytest.raises(InvalidBookingStatus):
            booking_state.assert_booking_transition(current, target)

    def test_refund_decided_once(self):
        booking_state.assert_refund_transition("pending", "approved")
        with pytest.raises(InvalidRefundStatus):
            booking_state.assert_refund_transition("rejected", "approved")
