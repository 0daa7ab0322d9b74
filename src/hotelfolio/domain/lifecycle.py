"""Reservation status machine.

BOOKED -> CONFIRMED -> CHECKED_IN -> CHECKED_OUT -> COMPLETED, with CANCELLED
reachable from BOOKED, CONFIRMED and CHECKED_IN. Every (current, requested)
pair has an entry in TRANSITIONS; guards that depend on the ledger or on
feedback are evaluated by ``attempt_transition``.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from .errors import (
    AlreadyCheckedIn,
    FeedbackPending,
    IllegalTransition,
    OutstandingBalance,
)
from .money import to_money


class ReservationStatus(str, Enum):
    BOOKED = "BOOKED"
    CONFIRMED = "CONFIRMED"
    CHECKED_IN = "CHECKED_IN"
    CHECKED_OUT = "CHECKED_OUT"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class Rule(str, Enum):
    ALLOW = "allow"
    REQUIRE_ZERO_BALANCE = "require_zero_balance"
    REQUIRE_FEEDBACK = "require_feedback"
    ALREADY_CHECKED_IN = "already_checked_in"
    ILLEGAL = "illegal"


S = ReservationStatus

_EXPLICIT: dict[tuple[ReservationStatus, ReservationStatus], Rule] = {
    (S.BOOKED, S.CONFIRMED): Rule.ALLOW,
    (S.BOOKED, S.CANCELLED): Rule.ALLOW,
    (S.CONFIRMED, S.CHECKED_IN): Rule.ALLOW,
    (S.CONFIRMED, S.CANCELLED): Rule.ALLOW,
    (S.CHECKED_IN, S.CHECKED_OUT): Rule.REQUIRE_ZERO_BALANCE,
    (S.CHECKED_IN, S.CANCELLED): Rule.ALLOW,
    (S.CHECKED_OUT, S.COMPLETED): Rule.REQUIRE_FEEDBACK,
    (S.CHECKED_OUT, S.CANCELLED): Rule.ALREADY_CHECKED_IN,
    (S.COMPLETED, S.CANCELLED): Rule.ALREADY_CHECKED_IN,
}

TRANSITIONS: dict[tuple[ReservationStatus, ReservationStatus], Rule] = {
    (current, requested): _EXPLICIT.get((current, requested), Rule.ILLEGAL)
    for current in ReservationStatus
    for requested in ReservationStatus
}

TERMINAL_STATUSES = frozenset({S.COMPLETED, S.CANCELLED})


@dataclass(frozen=True)
class LifecyclePolicy:
    require_feedback_for_completion: bool = True


def allowed_targets(current: ReservationStatus) -> list[ReservationStatus]:
    """Statuses reachable from ``current`` when their guards pass."""
    return [
        requested
        for requested in ReservationStatus
        if TRANSITIONS[(current, requested)]
        in (Rule.ALLOW, Rule.REQUIRE_ZERO_BALANCE, Rule.REQUIRE_FEEDBACK)
    ]


def attempt_transition(
    current: ReservationStatus | str,
    requested: ReservationStatus | str,
    *,
    balance: Decimal,
    feedback_submitted: bool = False,
    operator_override: bool = False,
    policy: LifecyclePolicy | None = None,
) -> ReservationStatus:
    """Return the new status or raise the typed reason it is refused.

    Raises:
        IllegalTransition: the pair is not an edge of the machine.
        OutstandingBalance: checking out with balance > 0.
        FeedbackPending: completing without feedback or override.
        AlreadyCheckedIn: cancelling after check-out.
    """
    current = ReservationStatus(current)
    requested = ReservationStatus(requested)
    policy = policy or LifecyclePolicy()

    rule = TRANSITIONS[(current, requested)]

    if rule is Rule.ILLEGAL:
        raise IllegalTransition(current, requested)

    if rule is Rule.ALREADY_CHECKED_IN:
        raise AlreadyCheckedIn(
            f"Reservation in status {current.value} cannot be cancelled after check-in",
            {"current": current.value},
        )

    if rule is Rule.REQUIRE_ZERO_BALANCE:
        outstanding = to_money(balance)
        if outstanding > 0:
            raise OutstandingBalance(
                "Cannot check out with an outstanding balance",
                {"balance": str(outstanding)},
            )

    if rule is Rule.REQUIRE_FEEDBACK and policy.require_feedback_for_completion:
        if not (feedback_submitted or operator_override):
            raise FeedbackPending(
                "Guest feedback has not been submitted",
                {"current": current.value},
            )

    return requested
