"""Builders shared by the test modules (plain functions, not fixtures).

Calendar used throughout:
    2026-10-01 Thu, 10-02 Fri, 10-03 Sat, 10-04 Sun, 10-05 Mon, 10-06 Tue
    2026-07-03 Fri, 07-06 Mon (July is peak in the test config)
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from hotelfolio.domain.pricing import AddOnSelection, RoomSelection, StayRequest

MON = date(2026, 10, 5)
TUE = date(2026, 10, 6)
THU = date(2026, 10, 1)
FRI = date(2026, 10, 2)
SAT = date(2026, 10, 3)
PEAK_FRI = date(2026, 7, 3)
PEAK_SAT = date(2026, 7, 4)
PEAK_MON = date(2026, 7, 6)
PEAK_TUE = date(2026, 7, 7)


def room(base_price="100.00", quantity=1, room_type="DOUBLE", capacity=2) -> RoomSelection:
    return RoomSelection(
        room_type=room_type,
        base_price=Decimal(base_price),
        capacity=capacity,
        quantity=quantity,
    )


def make_stay(check_in=MON, check_out=TUE, rooms=None, addons=()) -> StayRequest:
    return StayRequest(
        rooms=tuple(rooms) if rooms is not None else (room(),),
        check_in=check_in,
        check_out=check_out,
        addons=frozenset(AddOnSelection(name) if isinstance(name, str) else name for name in addons),
    )


def stay_payload(check_in=MON, check_out=TUE, base_price="100.00", quantity=1, addons=()) -> dict:
    return {
        "rooms": [{"room_type": "DOUBLE", "base_price": base_price, "capacity": 2, "quantity": quantity}],
        "check_in": check_in.isoformat(),
        "check_out": check_out.isoformat(),
        "addons": [{"name": name} for name in addons],
    }
