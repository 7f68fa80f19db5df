from typing import List, Sequence, Tuple

from app.services.ranking_engine import WEIGHT_TOTAL, WEIGHT_TOLERANCE


def weight_summary(criteria) -> Tuple[float, bool]:
    """Total weight of the active criteria and whether it adds up to 100%."""
    total = round(sum(c.weight for c in criteria if c.active), 2)
    return total, abs(total - WEIGHT_TOTAL) <= WEIGHT_TOLERANCE


def equal_weights(criterion_ids: Sequence) -> List[Tuple[object, float]]:
    """
    Split 100% evenly across the given criteria.

    Each share is truncated to two decimals; whatever is left over goes to the
    first criterion so the weights still sum to exactly 100.
    """
    count = len(criterion_ids)
    if count == 0:
        return []

    share = int(WEIGHT_TOTAL / count * 100) / 100
    remainder = round(WEIGHT_TOTAL - share * count, 2)
    return [
        (criterion_id, round(share + remainder, 2) if index == 0 else share)
        for index, criterion_id in enumerate(criterion_ids)
    ]
