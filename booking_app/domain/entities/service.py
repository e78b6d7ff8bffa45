from __future__ import annotations

from dataclasses import dataclass

DEFAULT_SERVICE_DURATION_MINUTES = 60


@dataclass(frozen=True)
class Service:
    id: str
    name: str
    duration_min: int | None = None
    duration_max: int | None = None
    price: float | None = None
    active: bool = True

    @property
    def is_quote_only(self) -> bool:
        # "valoración": no fixed price, operator sets it on approval
        return self.price is None

    @property
    def booking_duration(self) -> int:
        return self.duration_min or DEFAULT_SERVICE_DURATION_MINUTES
