"""
Contract/purchase term resolution for the purchase total pipeline.

Decides which cash discount, commission, transportation and tax terms feed
compute_purchase_breakdown, and whether transportation applies at all.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from ..dataclasses import Contract, ContractType, PurchaseSnapshot, PurchaseTerms
from ..exceptions import InvalidArgument

logger = logging.getLogger(__name__)

_TERM_FIELDS = ("cash_discount", "broker_commission_percent", "transportation_cost", "igst_percent")


def normalize_contract_type(contract_type: Any) -> Optional[ContractType]:
    """Map a raw contract type value onto ContractType; None when unknown or blank."""
    if contract_type is None:
        return None
    if isinstance(contract_type, ContractType):
        return contract_type
    raw = str(contract_type).strip().lower().replace("-", "").replace("_", "").replace(" ", "")
    try:
        return ContractType(raw)
    except ValueError:
        if raw:
            logger.warning(f"Unknown contract type: {contract_type!r}")
        return None


def applies_transportation(contract_type: Any) -> bool:
    """Transportation cost is borne by the buyer only on godown pickup contracts."""
    return normalize_contract_type(contract_type) is ContractType.XGODOWN


def terms_from_contract(contract: Contract, igst_percent=None) -> PurchaseTerms:
    return PurchaseTerms(
        cash_discount=contract.cash_discount,
        broker_commission_percent=contract.broker_commission_percent,
        transportation_cost=contract.transportation_cost,
        apply_transportation=applies_transportation(contract.contract_type),
        igst_percent=igst_percent,
    )


def terms_from_mapping(data: Mapping[str, Any]) -> PurchaseTerms:
    """Build PurchaseTerms from a plain dict (e.g. a validated form payload).

    An explicit boolean `apply_transportation` wins (any other non-None
    value is an InvalidArgument); otherwise it is derived from
    `contract_type`.
    """
    flag = data.get("apply_transportation")
    if flag is not None:
        if not isinstance(flag, bool):
            raise InvalidArgument("apply_transportation", flag)
        apply = flag
    else:
        apply = applies_transportation(data.get("contract_type"))
    return PurchaseTerms(apply_transportation=apply, **{k: data.get(k) for k in _TERM_FIELDS})


def resolve_purchase_terms(
    purchase: PurchaseSnapshot,
    contract: Optional[Contract] = None,
    *,
    cash_discount=None,
    transportation_cost=None,
) -> PurchaseTerms:
    """
    Assemble the pipeline terms for an invoiced purchase.

    Precedence per term: explicit keyword argument, then the purchase snapshot
    (when the field is present), then the contract. The purchase is treated as
    a frozen copy of the contract terms; if persistence never copied discount
    or transportation onto it, the caller passes them explicitly.
    """

    def pick(explicit, snapshot_value, contract_attr: str):
        if explicit is not None:
            return explicit
        if snapshot_value is not None:
            return snapshot_value
        if contract is not None:
            return getattr(contract, contract_attr)
        return None

    contract_type = purchase.contract_type
    if contract_type is None and contract is not None:
        contract_type = contract.contract_type

    return PurchaseTerms(
        cash_discount=pick(cash_discount, purchase.cash_discount, "cash_discount"),
        broker_commission_percent=pick(
            None, purchase.broker_commission_percent, "broker_commission_percent"
        ),
        transportation_cost=pick(transportation_cost, purchase.transportation_cost, "transportation_cost"),
        apply_transportation=applies_transportation(contract_type),
        igst_percent=purchase.igst_percent,
    )
