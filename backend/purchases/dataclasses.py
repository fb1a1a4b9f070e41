"""
Plain records passed through the purchase computation services.

services.calculations and services.terms import this module, so the derived
properties below (applies_transportation, effective_bill_weight, amount,
net_payable) import those services inside the property body.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import List, Optional, Tuple

from .services.utils import ZERO, d


class ContractType(str, Enum):
    # Goods picked up at the seller's godown; buyer bears transportation.
    XGODOWN = "xgodown"
    # Free on road: delivered to the buyer, transportation is the seller's.
    FOR = "for"


class ChargeType(str, Enum):
    FIXED = "fixed"
    PERCENTAGE = "percentage"


class PaymentAdviceStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class StepCode(str, Enum):
    BASE = "BASE"
    CASH_DISCOUNT = "CASH_DISCOUNT"
    BROKER_COMMISSION = "BROKER_COMMISSION"
    TRANSPORTATION = "TRANSPORTATION"
    IGST = "IGST"


@dataclass
class Contract:
    """A trade agreement (sauda) for a quantity of rice."""
    rate: Decimal
    contract_type: str = ContractType.XGODOWN
    broker_commission_percent: Decimal = ZERO
    cash_discount: Decimal = ZERO
    transportation_cost: Decimal = ZERO
    id: Optional[str] = None

    @property
    def applies_transportation(self) -> bool:
        from .services.terms import applies_transportation
        return applies_transportation(self.contract_type)


@dataclass
class Lot:
    received_weight: Decimal
    rate: Decimal
    bag_count: int = 0
    unit_weight: Decimal = ZERO
    # Manually entered bill weight; None means "derive from bags x unit weight".
    bill_weight: Optional[Decimal] = None
    id: Optional[str] = None

    @property
    def effective_bill_weight(self) -> Decimal:
        if self.bill_weight is not None:
            return d(self.bill_weight)
        from .services.calculations import compute_bill_weight
        return compute_bill_weight(self.bag_count, self.unit_weight)

    @property
    def amount(self) -> Decimal:
        from .services.calculations import compute_lot_amount
        return compute_lot_amount(self.received_weight, self.rate)


@dataclass
class DeliveryBatch:
    """Lots received together against one contract (an inward slip pass)."""
    contract_id: Optional[str]
    lots: List[Lot] = field(default_factory=list)
    id: Optional[str] = None


@dataclass(frozen=True)
class PurchaseSnapshot:
    """Commercial terms frozen onto a purchase at invoice time.

    cash_discount, transportation_cost and contract_type are optional: when the
    persisted purchase does not carry them they must come from the contract or
    be passed explicitly (see services.terms.resolve_purchase_terms).
    """
    rate: Optional[Decimal] = None
    total_weight: Optional[Decimal] = None
    total_amount: Optional[Decimal] = None
    broker_commission_percent: Optional[Decimal] = None
    igst_percent: Optional[Decimal] = None
    igst_amount: Optional[Decimal] = None
    cash_discount: Optional[Decimal] = None
    transportation_cost: Optional[Decimal] = None
    contract_type: Optional[str] = None


@dataclass(frozen=True)
class Charge:
    name: str
    value: Decimal
    # Metadata only; see services.calculations.charge_value
    charge_type: str = ChargeType.FIXED


@dataclass
class PaymentAdvice:
    amount: Decimal
    charges: List[Charge] = field(default_factory=list)
    status: str = PaymentAdviceStatus.PENDING

    @property
    def net_payable(self) -> Decimal:
        from .services.calculations import compute_net_payable
        return compute_net_payable(self.amount, self.charges).net_payable


@dataclass(frozen=True)
class PurchaseTerms:
    """Inputs to the purchase total pipeline. None means the term is absent."""
    cash_discount: Optional[Decimal] = None
    broker_commission_percent: Optional[Decimal] = None
    transportation_cost: Optional[Decimal] = None
    apply_transportation: bool = False
    igst_percent: Optional[Decimal] = None


@dataclass(frozen=True)
class BreakdownStep:
    code: str
    label: str
    delta: Decimal
    running_total: Decimal


@dataclass(frozen=True)
class PurchaseBreakdown:
    base_amount: Decimal
    steps: Tuple[BreakdownStep, ...]
    final_total: Decimal

    def step(self, code: str) -> Optional[BreakdownStep]:
        for s in self.steps:
            if s.code == code:
                return s
        return None

    @property
    def igst_amount(self) -> Decimal:
        s = self.step(StepCode.IGST)
        return s.delta if s is not None else ZERO


@dataclass(frozen=True)
class NetPayable:
    net_payable: Decimal
    total_charges: Decimal


@dataclass(frozen=True)
class LotSummary:
    lot_count: int
    total_bags: int
    total_bill_weight: Decimal
    total_received_weight: Decimal
    total_amount: Decimal
