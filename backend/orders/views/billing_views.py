from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from orders.serializers import BillPreviewSerializer
from orders.services import OrderCalculationService
from .base import validated


class BillPreviewView(APIView):
    """Prices a basket without creating an order."""

    def post(self, request: Request) -> Response:
        data = validated(BillPreviewSerializer, request)
        bill = OrderCalculationService.compute_bill(
            request.restaurant,
            [dict(item) for item in data["items"]],
            discount_amount=data.get("discount_amount"),
            discount_percent=data.get("discount_percent"),
            apply_tax=data["apply_tax"],
        )
        return Response(bill.to_dict())
