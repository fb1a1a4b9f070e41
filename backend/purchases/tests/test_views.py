import json

from django.contrib.auth import get_user_model
from django.test import Client, TestCase, override_settings
from rest_framework.authtoken.models import Token


class PreviewEndpointTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        U = get_user_model()
        cls.user = U.objects.create_user(username="accounts_clerk", password="x")
        cls.token, _ = Token.objects.get_or_create(user=cls.user)

    def setUp(self):
        self.client = Client()
        self.auth = {"HTTP_AUTHORIZATION": f"Token {self.token.key}"}

    def _post(self, url, body, **extra):
        headers = {**self.auth, **extra}
        return self.client.post(url, data=json.dumps(body), content_type="application/json", **headers)


class LotPreviewTests(PreviewEndpointTests):
    url = "/api/purchases/lots/preview"

    def test_derives_bill_weight_and_amount(self):
        r = self._post(self.url, {"bag_count": 100, "unit_weight": "50", "received_weight": "4950", "rate": "30"})
        self.assertEqual(r.status_code, 200, r.content)
        self.assertEqual(r.json(), {"bill_weight": "5000.000", "amount": "148500.00"})

    def test_manual_bill_weight_is_kept(self):
        r = self._post(self.url, {
            "bag_count": 20, "unit_weight": "50", "bill_weight": "1010",
            "received_weight": "980", "rate": "31",
        })
        self.assertEqual(r.status_code, 200, r.content)
        self.assertEqual(r.json()["bill_weight"], "1010.000")
        self.assertEqual(r.json()["amount"], "30380.00")

    def test_largest_accepted_lot_renders(self):
        r = self._post(self.url, {
            "bag_count": 1000000000,
            "unit_weight": "999999999.999999",
            "received_weight": "999999999.999999",
            "rate": "999999999.999999",
        })
        self.assertEqual(r.status_code, 200, r.content)
        self.assertEqual(r.json(), {
            "bill_weight": "999999999999999000.000",
            "amount": "999999999999998000.00",
        })

    def test_out_of_range_weight_is_rejected(self):
        r = self._post(self.url, {"received_weight": "999999999999", "rate": "999999999999"})
        self.assertEqual(r.status_code, 400)
        self.assertIn("received_weight", r.json())
        self.assertIn("rate", r.json())

    def test_missing_rate_is_rejected(self):
        r = self._post(self.url, {"received_weight": "100"})
        self.assertEqual(r.status_code, 400)
        self.assertIn("rate", r.json())


class PurchaseBreakdownPreviewTests(PreviewEndpointTests):
    url = "/api/purchases/breakdown/preview"
    terms = {
        "cash_discount": "200",
        "broker_commission_percent": "2",
        "transportation_cost": "150",
        "igst_percent": "5",
    }

    def test_godown_pickup_regression(self):
        r = self._post(self.url, {"base_amount": "10000", "contract_type": "xgodown", **self.terms})
        self.assertEqual(r.status_code, 200, r.content)
        data = r.json()
        self.assertEqual(data["final_total"], "10653.30")
        self.assertEqual(data["igst_amount"], "507.30")
        self.assertEqual(
            [s["code"] for s in data["steps"]],
            ["BASE", "CASH_DISCOUNT", "BROKER_COMMISSION", "TRANSPORTATION", "IGST"],
        )
        self.assertEqual(data["steps"][2], {
            "code": "BROKER_COMMISSION",
            "label": "Broker Commission (2%)",
            "delta": "196.00",
            "running_total": "9996.00",
        })
        self.assertEqual(data["rows"][-1], {"label": "Final Total Amount", "value": "10653.30", "kind": "final"})

    def test_delivered_contract_excludes_transportation(self):
        r = self._post(self.url, {"base_amount": "10000", "contract_type": "for", **self.terms})
        self.assertEqual(r.status_code, 200, r.content)
        data = r.json()
        self.assertEqual(data["final_total"], "10495.80")
        self.assertNotIn("TRANSPORTATION", [s["code"] for s in data["steps"]])

    def test_base_amount_from_linked_batches(self):
        body = {
            "contract_id": "S-1",
            "batches": [
                {"id": "B1", "contract_id": "S-1", "lots": [{"received_weight": "100", "rate": "30"}]},
                {"id": "B2", "contract_id": "S-1", "lots": [{"received_weight": "50", "rate": "20"}]},
                {"id": "B3", "contract_id": "S-2", "lots": [{"received_weight": "999", "rate": "99"}]},
            ],
        }
        r = self._post(self.url, body)
        self.assertEqual(r.status_code, 200, r.content)
        self.assertEqual(r.json()["base_amount"], "4000.00")
        self.assertEqual(r.json()["final_total"], "4000.00")

    def test_base_amount_from_lots(self):
        r = self._post(self.url, {"lots": [], "igst_percent": "5"})
        self.assertEqual(r.status_code, 200, r.content)
        self.assertEqual(r.json()["final_total"], "0.00")

    def test_requires_exactly_one_base_source(self):
        r = self._post(self.url, {"base_amount": "100", "lots": []})
        self.assertEqual(r.status_code, 400)
        r = self._post(self.url, {"igst_percent": "5"})
        self.assertEqual(r.status_code, 400)

    def test_unknown_contract_type_is_rejected(self):
        r = self._post(self.url, {"base_amount": "100", "contract_type": "ex-mill"})
        self.assertEqual(r.status_code, 400)
        self.assertIn("contract_type", r.json())

    def test_largest_accepted_terms_render(self):
        big = "999.999999"
        lot = {"received_weight": "999999999.999999", "rate": "999999999.999999"}
        for source in ({"base_amount": "999999999999.999999"}, {"lots": [lot, lot]}):
            r = self._post(self.url, {
                **source,
                "cash_discount": "-999999999999.999999",
                "broker_commission_percent": big,
                "transportation_cost": "999999999999.999999",
                "contract_type": "xgodown",
                "igst_percent": big,
            })
            self.assertEqual(r.status_code, 200, r.content)
            self.assertEqual(len(r.json()["steps"]), 5)

    def test_out_of_range_percent_is_rejected(self):
        r = self._post(self.url, {"base_amount": "100", "igst_percent": "1000"})
        self.assertEqual(r.status_code, 400)
        self.assertIn("igst_percent", r.json())

    def test_requires_authentication(self):
        r = self.client.post(self.url, data=json.dumps({"base_amount": "1"}), content_type="application/json")
        self.assertIn(r.status_code, (401, 403))

    @override_settings(PURCHASE_PREVIEW_ENABLED=False)
    def test_disabled_preview_returns_404(self):
        r = self._post(self.url, {"base_amount": "100"})
        self.assertEqual(r.status_code, 404)


class NetPayablePreviewTests(PreviewEndpointTests):
    url = "/api/payment-advices/net-payable/preview"

    def test_percentage_charge_summed_at_face_value(self):
        r = self._post(self.url, {
            "amount": "10000",
            "charges": [
                {"charge_name": "Hamali", "charge_value": "500", "charge_type": "fixed"},
                {"charge_name": "TDS", "charge_value": "2", "charge_type": "percentage"},
            ],
        })
        self.assertEqual(r.status_code, 200, r.content)
        self.assertEqual(r.json(), {"net_payable": "9498.00", "total_charges": "502.00"})

    def test_negative_net_payable(self):
        r = self._post(self.url, {"amount": "100", "charges": [{"charge_value": "150"}]})
        self.assertEqual(r.status_code, 200, r.content)
        self.assertEqual(r.json()["net_payable"], "-50.00")

    def test_no_charges(self):
        r = self._post(self.url, {"amount": "2500.5"})
        self.assertEqual(r.status_code, 200, r.content)
        self.assertEqual(r.json(), {"net_payable": "2500.50", "total_charges": "0.00"})

    def test_missing_amount(self):
        r = self._post(self.url, {"charges": []})
        self.assertEqual(r.status_code, 400)
        self.assertIn("amount", r.json())
