from django.urls import path

from .views import LotPreviewView, NetPayablePreviewView, PurchaseBreakdownPreviewView

app_name = "purchases"

urlpatterns = [
    path("purchases/lots/preview", LotPreviewView.as_view(), name="lot-preview"),
    path("purchases/breakdown/preview", PurchaseBreakdownPreviewView.as_view(), name="breakdown-preview"),
    path("payment-advices/net-payable/preview", NetPayablePreviewView.as_view(), name="net-payable-preview"),
]
