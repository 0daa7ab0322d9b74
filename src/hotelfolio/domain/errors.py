"""Billing error hierarchy.

Two tiers:
- BillingValidationError: expected business conditions (bad dates, amount <= 0,
  discount over cap, illegal transition). Recoverable; the service layer turns
  them into typed results.
- BillingConfigError: setup defects (bad multipliers, add-on with no price).
  These propagate and are never converted into results.
"""

from __future__ import annotations

from typing import Any


class BillingError(Exception):
    """Base class carrying a stable reason code plus structured metadata."""

    reason_code = "billing_error"

    def __init__(self, message: str, meta: dict[str, Any] | None = None):
        self.meta = meta or {}
        super().__init__(message)

    @property
    def message(self) -> str:
        return str(self)


class BillingValidationError(BillingError):
    reason_code = "validation_error"


class BillingConfigError(BillingError):
    reason_code = "config_error"


# ── Configuration tier ───────────────────────────────────


class InvalidMultiplier(BillingConfigError):
    reason_code = "invalid_multiplier"


class InvalidPricingConfig(BillingConfigError):
    reason_code = "invalid_pricing_config"


class InvalidLoyaltyConfig(BillingConfigError):
    reason_code = "invalid_loyalty_config"


class UnknownAddOn(BillingConfigError):
    reason_code = "unknown_addon"

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Add-on '{name}' has no configured price", {"addon": name})


# ── Pricing ──────────────────────────────────────────────


class InvalidDateRange(BillingValidationError):
    reason_code = "invalid_date_range"


class InvalidStay(BillingValidationError):
    reason_code = "invalid_stay"


# ── Discounts ────────────────────────────────────────────


class PercentOutOfRange(BillingValidationError):
    reason_code = "percent_out_of_range"


class RoleLimitExceeded(BillingValidationError):
    reason_code = "role_limit_exceeded"


# ── Loyalty ──────────────────────────────────────────────


class NegativePoints(BillingValidationError):
    reason_code = "negative_points"


class InsufficientPoints(BillingValidationError):
    reason_code = "insufficient_points"


# ── Ledger ───────────────────────────────────────────────


class NonPositiveAmount(BillingValidationError):
    reason_code = "non_positive_amount"


class AmountExceedsBalance(BillingValidationError):
    reason_code = "amount_exceeds_balance"


class RefundExceedsPaid(BillingValidationError):
    reason_code = "refund_exceeds_paid"


# ── Reservation / lifecycle ──────────────────────────────


class ReservationNotFound(BillingValidationError):
    reason_code = "reservation_not_found"

    def __init__(self, reservation_id: str):
        self.reservation_id = reservation_id
        super().__init__(
            f"Reservation {reservation_id} not found",
            {"reservation_id": reservation_id},
        )


class ReservationNotPayable(BillingValidationError):
    reason_code = "reservation_not_payable"


class IllegalTransition(BillingValidationError):
    reason_code = "illegal_transition"

    def __init__(self, current: Any, requested: Any):
        self.current = current
        self.requested = requested
        super().__init__(
            f"Cannot move reservation from {_status_name(current)} to {_status_name(requested)}",
            {"current": _status_name(current), "requested": _status_name(requested)},
        )


class OutstandingBalance(BillingValidationError):
    reason_code = "outstanding_balance"


class FeedbackPending(BillingValidationError):
    reason_code = "feedback_pending"


class AlreadyCheckedIn(BillingValidationError):
    reason_code = "already_checked_in"


class FeedbackNotEligible(BillingValidationError):
    reason_code = "feedback_not_eligible"


class ReservationNotPriced(BillingValidationError):
    reason_code = "reservation_not_priced"


def _status_name(status: Any) -> str:
    return getattr(status, "value", str(status))
