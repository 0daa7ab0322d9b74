"""Role-based discount caps.

Validation gate in front of DiscountStep: STAFF may grant up to 15%,
MANAGER up to 30%.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from .errors import PercentOutOfRange, RoleLimitExceeded
from .money import ZERO, to_decimal


class StaffRole(str, Enum):
    STAFF = "STAFF"
    MANAGER = "MANAGER"


ROLE_DISCOUNT_CAPS: dict[StaffRole, Decimal] = {
    StaffRole.STAFF: Decimal("15"),
    StaffRole.MANAGER: Decimal("30"),
}


@dataclass(frozen=True)
class DiscountRequest:
    percent: Decimal
    role: StaffRole

    def __post_init__(self) -> None:
        object.__setattr__(self, "percent", to_decimal(self.percent))
        object.__setattr__(self, "role", StaffRole(self.role))


def validate_discount(request: DiscountRequest) -> Decimal:
    """Return the approved percent or raise.

    Raises:
        PercentOutOfRange: percent not in [0, 100].
        RoleLimitExceeded: percent above the role's cap.
    """
    if request is None:
        raise TypeError("request is required")

    percent = request.percent
    if not ZERO <= percent <= 100:
        raise PercentOutOfRange(
            f"Discount percent must be within [0, 100], got {percent}",
            {"percent": str(percent)},
        )

    cap = ROLE_DISCOUNT_CAPS[request.role]
    if percent > cap:
        raise RoleLimitExceeded(
            f"Discount {percent}% exceeds allowed cap of {cap}% for role {request.role.value}",
            {"percent": str(percent), "cap": str(cap), "role": request.role.value},
        )
    return percent
