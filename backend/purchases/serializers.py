from __future__ import annotations

from decimal import ROUND_HALF_UP

from rest_framework import serializers

from .dataclasses import ChargeType, ContractType, DeliveryBatch, Lot


def _amount_field(**kwargs):
    """Incoming currency value (< 10^12), full precision kept."""
    return serializers.DecimalField(max_digits=18, decimal_places=6, **kwargs)


def _quantity_field(**kwargs):
    """Incoming lot weight or rate (< 10^9), so a lot amount stays below 10^18."""
    return serializers.DecimalField(max_digits=15, decimal_places=6, **kwargs)


def _percent_field(**kwargs):
    """Incoming percentage (< 1000)."""
    return serializers.DecimalField(max_digits=9, decimal_places=6, **kwargs)


def _money_out():
    return serializers.DecimalField(max_digits=None, decimal_places=2, rounding=ROUND_HALF_UP, read_only=True)


# ---------- REQUEST SERIALIZERS ----------
class LotInputSerializer(serializers.Serializer):
    id = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    bag_count = serializers.IntegerField(required=False, default=0, min_value=0, max_value=10**9)
    unit_weight = _quantity_field(required=False, allow_null=True)
    bill_weight = _quantity_field(required=False, allow_null=True)
    received_weight = _quantity_field()
    rate = _quantity_field()

    def to_lot(self, data) -> Lot:
        return Lot(
            id=data.get("id") or None,
            bag_count=data.get("bag_count") or 0,
            unit_weight=data.get("unit_weight") or 0,
            bill_weight=data.get("bill_weight"),
            received_weight=data["received_weight"],
            rate=data["rate"],
        )


class DeliveryBatchInputSerializer(serializers.Serializer):
    id = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    contract_id = serializers.CharField(required=False, allow_null=True)
    lots = LotInputSerializer(many=True)


class BreakdownPreviewSerializer(serializers.Serializer):
    base_amount = _amount_field(required=False, allow_null=True)
    lots = LotInputSerializer(many=True, required=False)
    batches = DeliveryBatchInputSerializer(many=True, required=False)
    contract_id = serializers.CharField(required=False, allow_null=True)

    cash_discount = _amount_field(required=False, allow_null=True)
    broker_commission_percent = _percent_field(required=False, allow_null=True)
    transportation_cost = _amount_field(required=False, allow_null=True)
    contract_type = serializers.ChoiceField(
        choices=[c.value for c in ContractType], required=False, allow_null=True
    )
    igst_percent = _percent_field(required=False, allow_null=True)

    def validate(self, attrs):
        sources = [k for k in ("base_amount", "lots", "batches") if attrs.get(k) is not None]
        if len(sources) != 1:
            raise serializers.ValidationError("Provide exactly one of base_amount, lots or batches.")
        return attrs

    def lots_from(self, data):
        child = LotInputSerializer()
        return [child.to_lot(item) for item in data.get("lots") or []]

    def batches_from(self, data):
        child = LotInputSerializer()
        return [
            DeliveryBatch(
                id=b.get("id") or None,
                contract_id=b.get("contract_id"),
                lots=[child.to_lot(item) for item in b["lots"]],
            )
            for b in data.get("batches") or []
        ]


class ChargeInputSerializer(serializers.Serializer):
    charge_name = serializers.CharField(required=False, allow_blank=True, default="")
    charge_value = _amount_field()
    charge_type = serializers.ChoiceField(choices=[c.value for c in ChargeType], default=ChargeType.FIXED.value)


class NetPayablePreviewSerializer(serializers.Serializer):
    amount = _amount_field()
    charges = ChargeInputSerializer(many=True, required=False)


# ---------- RESPONSE SERIALIZERS ----------
class LotPreviewResultSerializer(serializers.Serializer):
    bill_weight = serializers.DecimalField(max_digits=None, decimal_places=3, rounding=ROUND_HALF_UP, read_only=True)
    amount = _money_out()


class BreakdownStepSerializer(serializers.Serializer):
    code = serializers.CharField(read_only=True)
    label = serializers.CharField(read_only=True)
    delta = _money_out()
    running_total = _money_out()


class BreakdownRowSerializer(serializers.Serializer):
    label = serializers.CharField(read_only=True)
    value = _money_out()
    kind = serializers.CharField(read_only=True)


class PurchaseBreakdownSerializer(serializers.Serializer):
    base_amount = _money_out()
    steps = BreakdownStepSerializer(many=True, read_only=True)
    igst_amount = _money_out()
    final_total = _money_out()


class NetPayableSerializer(serializers.Serializer):
    net_payable = _money_out()
    total_charges = _money_out()
