from decimal import Decimal

from ..dataclasses import BreakdownStep, PurchaseBreakdown, PurchaseTerms
from ..services.calculations import compute_purchase_breakdown
from ..services.presenter import RowKind, present_breakdown


def _rows(breakdown):
    return [(r.label, str(r.value), r.kind) for r in present_breakdown(breakdown)]


class TestPresentBreakdown:
    def test_full_pipeline_rows(self):
        terms = PurchaseTerms(
            cash_discount=Decimal("200"),
            broker_commission_percent=Decimal("2"),
            transportation_cost=Decimal("150"),
            apply_transportation=True,
            igst_percent=Decimal("5"),
        )
        rows = _rows(compute_purchase_breakdown(Decimal("10000"), terms))
        assert rows == [
            ("Base Amount", "10000.00", RowKind.BASE),
            ("Cash Discount", "-200.00", RowKind.SUBTRACT),
            ("Amount After Discount", "9800.00", RowKind.INTERMEDIATE),
            ("Broker Commission (2%)", "196.00", RowKind.ADD),
            ("Amount With Commission", "9996.00", RowKind.INTERMEDIATE),
            ("Transportation Cost", "150.00", RowKind.ADD),
            ("Amount With Transportation", "10146.00", RowKind.INTERMEDIATE),
            ("IGST (5%)", "507.30", RowKind.ADD),
            ("Final Total Amount", "10653.30", RowKind.FINAL),
        ]

    def test_base_only(self):
        rows = _rows(compute_purchase_breakdown(Decimal("2500")))
        assert rows == [
            ("Base Amount", "2500.00", RowKind.BASE),
            ("Final Total Amount", "2500.00", RowKind.FINAL),
        ]

    def test_rounds_half_up_for_display_only(self):
        breakdown = compute_purchase_breakdown(Decimal("10.005"))
        assert breakdown.final_total == Decimal("10.005")
        assert _rows(breakdown)[-1] == ("Final Total Amount", "10.01", RowKind.FINAL)

    def test_reads_values_from_steps(self):
        breakdown = PurchaseBreakdown(
            base_amount=Decimal("100"),
            steps=(
                BreakdownStep("BASE", "Base Amount", Decimal("100"), Decimal("100")),
                BreakdownStep("IGST", "IGST (12%)", Decimal("12"), Decimal("112")),
            ),
            final_total=Decimal("112"),
        )
        assert _rows(breakdown) == [
            ("Base Amount", "100.00", RowKind.BASE),
            ("IGST (12%)", "12.00", RowKind.ADD),
            ("Final Total Amount", "112.00", RowKind.FINAL),
        ]
