from __future__ import annotations

import logging
from decimal import InvalidOperation

from django.conf import settings
from rest_framework import status, views
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from .exceptions import InvalidArgument
from .serializers import (
    BreakdownPreviewSerializer,
    BreakdownRowSerializer,
    LotInputSerializer,
    LotPreviewResultSerializer,
    NetPayablePreviewSerializer,
    NetPayableSerializer,
    PurchaseBreakdownSerializer,
)
from .services.calculations import (
    compute_base_amount,
    compute_bill_weight,
    compute_lot_amount,
    compute_net_payable,
    compute_purchase_base_amount,
    compute_purchase_breakdown,
)
from .services.presenter import present_breakdown
from .services.terms import terms_from_mapping

logger = logging.getLogger(__name__)


class PreviewView(views.APIView):
    """Stateless calculation preview: validates, computes, returns. Nothing is persisted."""
    permission_classes = [IsAuthenticated]

    def post(self, request):
        if not getattr(settings, "PURCHASE_PREVIEW_ENABLED", True):
            return Response({"detail": "Calculation preview is not enabled."}, status=status.HTTP_404_NOT_FOUND)
        try:
            return Response(self.compute(request.data), status=status.HTTP_200_OK)
        except InvalidArgument as e:
            logger.info(f"{type(self).__name__} rejected input: {e}")
            return Response({"detail": str(e), "param": e.param}, status=status.HTTP_400_BAD_REQUEST)
        except InvalidOperation:
            # Result too large to render at two decimal places
            logger.info(f"{type(self).__name__} result exceeds decimal precision")
            return Response(
                {"detail": "Result exceeds the supported numeric range."}, status=status.HTTP_400_BAD_REQUEST
            )

    def compute(self, payload) -> dict:
        raise NotImplementedError


class LotPreviewView(PreviewView):
    def compute(self, payload) -> dict:
        ser = LotInputSerializer(data=payload)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data

        bill_weight = data.get("bill_weight")
        if bill_weight is None:
            bill_weight = compute_bill_weight(data.get("bag_count"), data.get("unit_weight"))
        result = {
            "bill_weight": bill_weight,
            "amount": compute_lot_amount(data["received_weight"], data["rate"]),
        }
        return LotPreviewResultSerializer(result).data


class PurchaseBreakdownPreviewView(PreviewView):
    def compute(self, payload) -> dict:
        ser = BreakdownPreviewSerializer(data=payload)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data

        if data.get("batches") is not None:
            base_amount = compute_purchase_base_amount(ser.batches_from(data), data.get("contract_id"))
        elif data.get("lots") is not None:
            base_amount = compute_base_amount(ser.lots_from(data))
        else:
            base_amount = data["base_amount"]

        breakdown = compute_purchase_breakdown(base_amount, terms_from_mapping(data))
        out = dict(PurchaseBreakdownSerializer(breakdown).data)
        out["rows"] = BreakdownRowSerializer(present_breakdown(breakdown), many=True).data
        return out


class NetPayablePreviewView(PreviewView):
    def compute(self, payload) -> dict:
        ser = NetPayablePreviewSerializer(data=payload)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data

        result = compute_net_payable(data["amount"], data.get("charges") or [])
        return NetPayableSerializer(result).data
