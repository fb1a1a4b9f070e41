from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List

from ..dataclasses import PurchaseBreakdown, StepCode
from .utils import ZERO, quantize_money

# Running-total row shown after each adjustment (IGST goes straight to the final row)
INTERMEDIATE_LABELS: Dict[str, str] = {
    StepCode.CASH_DISCOUNT.value: "Amount After Discount",
    StepCode.BROKER_COMMISSION.value: "Amount With Commission",
    StepCode.TRANSPORTATION.value: "Amount With Transportation",
}
FINAL_LABEL = "Final Total Amount"


class RowKind:
    BASE = "base"
    ADD = "add"
    SUBTRACT = "subtract"
    INTERMEDIATE = "intermediate"
    FINAL = "final"


@dataclass(frozen=True)
class BreakdownRow:
    label: str
    value: Decimal
    kind: str


def present_breakdown(breakdown: PurchaseBreakdown) -> List[BreakdownRow]:
    """Display rows for a purchase breakdown, values rounded to two places.

    Reads the engine's steps only; no arithmetic is redone here.
    """
    rows: List[BreakdownRow] = []
    for step in breakdown.steps:
        if step.code == StepCode.BASE:
            rows.append(BreakdownRow(step.label, quantize_money(step.delta), RowKind.BASE))
            continue
        kind = RowKind.SUBTRACT if step.delta < ZERO else RowKind.ADD
        rows.append(BreakdownRow(step.label, quantize_money(step.delta), kind))
        label = INTERMEDIATE_LABELS.get(step.code)
        if label:
            rows.append(BreakdownRow(label, quantize_money(step.running_total), RowKind.INTERMEDIATE))
    rows.append(BreakdownRow(FINAL_LABEL, quantize_money(breakdown.final_total), RowKind.FINAL))
    return rows
