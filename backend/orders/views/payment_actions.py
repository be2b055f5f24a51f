from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response

from orders.serializers import OrderSerializer, PayLaterSerializer, SettlePaymentSerializer, SplitBillSerializer
from orders.services import OrderCalculationService, PendingPaymentService
from payments.services import PaymentLedgerService
from .base import result_response, validated


class PaymentActionsMixin:
    """Pay later, settlement and bill splitting actions for OrderViewSet."""

    @action(detail=True, methods=["post"], url_path="pay-later")
    def pay_later(self, request: Request, pk=None) -> Response:
        data = validated(PayLaterSerializer, request)
        result = PendingPaymentService.mark_pending_payment(
            pk,
            customer_name=data.get("customer_name"),
            customer_mobile=data.get("customer_mobile"),
            restaurant=request.restaurant,
            expected_version=data.get("expected_version"),
        )
        return result_response(result)

    @action(detail=True, methods=["post"], url_path="settle")
    def settle(self, request: Request, pk=None) -> Response:
        data = validated(SettlePaymentSerializer, request)
        result = PaymentLedgerService.settle(
            pk,
            data["method"],
            amount=data.get("amount"),
            restaurant=request.restaurant,
            expected_version=data.get("expected_version"),
        )
        return result_response(result)

    @action(detail=True, methods=["post"], url_path="split")
    def split(self, request: Request, pk=None) -> Response:
        data = validated(SplitBillSerializer, request)
        split = OrderCalculationService.split_bill(
            pk,
            data["mode"],
            payers=data.get("payers"),
            assignments=data.get("assignments"),
            restaurant=request.restaurant,
        )
        split["total"] = str(split["total"])
        if isinstance(split["shares"], dict):
            split["shares"] = {payer: str(amount) for payer, amount in split["shares"].items()}
        else:
            split["shares"] = [str(amount) for amount in split["shares"]]
        for key in ("tax", "service_charge", "discount"):
            if key in split:
                split[key] = str(split[key])
        if "unassigned" in split:
            split["unassigned"] = [str(item_id) for item_id in split["unassigned"]]
        return Response(split)

    @action(detail=False, methods=["get"], url_path="pending-payments")
    def pending_payments(self, request: Request) -> Response:
        orders = PendingPaymentService.list_pending(request.restaurant)
        return Response(OrderSerializer(orders, many=True).data)
