from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Mapping

_ONE_DECIMAL = Decimal("0.1")


def round_half_up(value: float, places: Decimal = _ONE_DECIMAL) -> float:
    return float(Decimal(str(value)).quantize(places, rounding=ROUND_HALF_UP))


def mean_or_zero(values: Iterable[float]) -> float:
    items = list(values)
    if not items:
        return 0.0
    return sum(items) / len(items)


class RatingResolver:
    def resolve(self, overall: float | None, categories: Mapping[str, float]) -> float | None:
        # An explicit overall rating wins and is returned untouched, out of range or not.
        if overall is not None:
            return overall
        if categories:
            return round_half_up(mean_or_zero(categories.values()))
        return None
