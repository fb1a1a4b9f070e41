"""
Purchase financial computation pipeline.

Every screen that previews or persists a lot amount, purchase total or net
payable goes through the functions in this module; nothing recomputes these
figures inline.

    lot:       bill_weight = bags x unit weight, amount = received weight x rate
    purchase:  base -> cash discount -> broker commission -> transportation -> IGST
    advice:    net payable = amount - sum(charges)

All arithmetic is done on Decimal at full precision. Rounding to two places is
a display concern (see services.presenter) and is never applied here.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from ..dataclasses import (
    Charge,
    ChargeType,
    DeliveryBatch,
    Lot,
    LotSummary,
    NetPayable,
    PurchaseBreakdown,
    BreakdownStep,
    PurchaseTerms,
    StepCode,
)
from ..exceptions import InvalidArgument
from .terms import terms_from_mapping
from .utils import HUNDRED, ZERO, finite_or_zero, format_percent, optional_number, require_number

logger = logging.getLogger(__name__)


# ------------------------------ Lots ------------------------------

def compute_bill_weight(bag_count, unit_weight) -> Decimal:
    """Total weight of a lot from its bag count and per-bag weight.

    Runs on every edit of a lot row, so it never raises: anything that is not a
    finite number counts as zero.
    """
    return finite_or_zero(bag_count) * finite_or_zero(unit_weight)


def compute_lot_amount(received_weight, rate) -> Decimal:
    """Settlement amount of a lot: received weight x rate."""
    return require_number(received_weight, "received_weight") * require_number(rate, "rate")


def _lot_amount(lot: Any, idx: int) -> Decimal:
    if isinstance(lot, Mapping):
        if lot.get("amount") is not None:
            return require_number(lot["amount"], f"lots[{idx}].amount")
        return (
            require_number(lot.get("received_weight"), f"lots[{idx}].received_weight")
            * require_number(lot.get("rate"), f"lots[{idx}].rate")
        )
    return require_number(lot.amount, f"lots[{idx}].amount")


def compute_base_amount(lots: Optional[Iterable[Any]]) -> Decimal:
    """Sum of lot amounts. Accepts Lot objects or dicts carrying `amount`
    (or `received_weight` and `rate`). An empty set sums to zero."""
    total = ZERO
    for idx, lot in enumerate(lots or ()):
        total += _lot_amount(lot, idx)
    return total


def lots_for_contract(batches: Iterable[DeliveryBatch], contract_id=None) -> List[Lot]:
    """Lots of every delivery batch linked to `contract_id` (all batches when None).

    A lot belongs to exactly one batch; a lot id seen a second time is skipped.
    """
    seen = set()
    out: List[Lot] = []
    for batch in batches or ():
        if contract_id is not None and batch.contract_id != contract_id:
            continue
        for lot in batch.lots:
            key = lot.id if lot.id is not None else id(lot)
            if key in seen:
                logger.warning(
                    f"Lot {key} appears in more than one delivery batch (batch {batch.id}); counted once"
                )
                continue
            seen.add(key)
            out.append(lot)
    return out


def compute_purchase_base_amount(batches: Iterable[DeliveryBatch], contract_id=None) -> Decimal:
    return compute_base_amount(lots_for_contract(batches, contract_id))


def summarize_lots(lots: Sequence[Lot]) -> LotSummary:
    total_bags = 0
    total_bill = ZERO
    total_received = ZERO
    for idx, lot in enumerate(lots):
        total_bags += int(finite_or_zero(lot.bag_count))
        total_bill += lot.effective_bill_weight
        total_received += require_number(lot.received_weight, f"lots[{idx}].received_weight")
    return LotSummary(
        lot_count=len(lots),
        total_bags=total_bags,
        total_bill_weight=total_bill,
        total_received_weight=total_received,
        total_amount=compute_base_amount(lots),
    )


# ---------------------------- Purchase ----------------------------

def compute_igst_amount(taxable_amount, igst_percent) -> Decimal:
    return (
        require_number(taxable_amount, "taxable_amount")
        * optional_number(igst_percent, "igst_percent")
        / HUNDRED
    )


def _coerce_terms(terms: Any) -> PurchaseTerms:
    if terms is None:
        return PurchaseTerms()
    if isinstance(terms, PurchaseTerms):
        return terms
    if isinstance(terms, Mapping):
        return terms_from_mapping(terms)
    raise InvalidArgument("terms", terms)


def compute_purchase_breakdown(base_amount, terms: Any = None) -> PurchaseBreakdown:
    """
    Apply the purchase pipeline to `base_amount`.

    Order is fixed: cash discount, broker commission (percent of the discounted
    amount), transportation (only when `apply_transportation`), IGST (percent of
    everything before it). A term that is absent or zero contributes no step.
    Each applied step records its delta and the running total, so the sum of
    deltas always equals `final_total`.

    Raises InvalidArgument before any step is built if an input is not numeric.
    """
    t = _coerce_terms(terms)
    base = require_number(base_amount, "base_amount")
    cash_discount = optional_number(t.cash_discount, "cash_discount")
    commission_pct = optional_number(t.broker_commission_percent, "broker_commission_percent")
    transportation_cost = optional_number(t.transportation_cost, "transportation_cost")
    igst_pct = optional_number(t.igst_percent, "igst_percent")
    if not isinstance(t.apply_transportation, bool):
        raise InvalidArgument("apply_transportation", t.apply_transportation)

    running = base
    steps: List[BreakdownStep] = [BreakdownStep(StepCode.BASE.value, "Base Amount", base, running)]

    if cash_discount != ZERO:
        running = running - cash_discount
        steps.append(BreakdownStep(StepCode.CASH_DISCOUNT.value, "Cash Discount", -cash_discount, running))

    if commission_pct != ZERO:
        commission = running * commission_pct / HUNDRED
        running = running + commission
        steps.append(
            BreakdownStep(
                StepCode.BROKER_COMMISSION.value,
                f"Broker Commission ({format_percent(commission_pct)}%)",
                commission,
                running,
            )
        )

    transportation = transportation_cost if t.apply_transportation else ZERO
    if transportation != ZERO:
        running = running + transportation
        steps.append(BreakdownStep(StepCode.TRANSPORTATION.value, "Transportation Cost", transportation, running))

    if igst_pct != ZERO:
        igst_amount = compute_igst_amount(running, igst_pct)
        running = running + igst_amount
        steps.append(BreakdownStep(StepCode.IGST.value, f"IGST ({format_percent(igst_pct)}%)", igst_amount, running))

    logger.debug(
        f"Purchase breakdown: base={base} discount={cash_discount} commission_pct={commission_pct} "
        f"transportation={transportation} igst_pct={igst_pct} -> final_total={running}"
    )
    return PurchaseBreakdown(base_amount=base, steps=tuple(steps), final_total=running)


# ------------------------- Payment advice -------------------------

def _coerce_charge(charge: Any, idx: int) -> Charge:
    if isinstance(charge, Mapping):
        name = charge.get("name", charge.get("charge_name")) or ""
        value = charge.get("value", charge.get("charge_value"))
        charge_type = charge.get("type", charge.get("charge_type")) or ChargeType.FIXED
    else:
        name = getattr(charge, "name", "")
        value = charge.value
        charge_type = getattr(charge, "charge_type", ChargeType.FIXED)
    return Charge(name=name, value=optional_number(value, f"charges[{idx}].value"), charge_type=charge_type)


def charge_value(charge: Charge, amount: Decimal) -> Decimal:
    """Amount deducted for one charge.

    Every charge is deducted at face value, including percentage-typed ones:
    a "percentage" charge of 2 removes 2 currency units, not 2% of `amount`.
    charge_type is carried as metadata only. Scaling percentage charges by
    amount / 100 would be done here and nowhere else.
    """
    return charge.value


def compute_net_payable(amount, charges: Optional[Iterable[Any]] = None) -> NetPayable:
    """Net payable of a payment advice: amount minus the sum of its charges.

    A negative result (charges exceed the amount) is returned as is.
    """
    amt = require_number(amount, "amount")
    normalized = [_coerce_charge(c, idx) for idx, c in enumerate(charges or ())]
    total_charges = sum((charge_value(c, amt) for c in normalized), ZERO)
    net = amt - total_charges
    if net < ZERO:
        logger.warning(f"Payment advice over-charged: amount={amt} total_charges={total_charges} net={net}")
    return NetPayable(net_payable=net, total_charges=total_charges)
