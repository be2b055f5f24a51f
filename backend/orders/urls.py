from django.urls import path, include
from rest_framework import routers

from .views import BillPreviewView, OrderViewSet, TableViewSet

app_name = "orders"

router = routers.DefaultRouter()
router.register(r"orders", OrderViewSet, basename="order")
router.register(r"tables", TableViewSet, basename="table")

urlpatterns = [
    path("billing/compute/", BillPreviewView.as_view(), name="billing-compute"),
    path("", include(router.urls)),
]
