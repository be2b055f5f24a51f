from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import mixins, status, viewsets
from rest_framework.request import Request
from rest_framework.response import Response
import logging

from orders.filters import OrderFilter
from orders.models import Order
from orders.serializers import OrderCreateSerializer, OrderSerializer
from orders.services import OrderService
from .base import result_response, validated
from .payment_actions import PaymentActionsMixin
from .status_actions import StatusActionsMixin

logger = logging.getLogger(__name__)


class OrderViewSet(
    StatusActionsMixin,
    PaymentActionsMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """
    Orders for the restaurant named in the X-Restaurant header.

    Reads go through the restaurant-scoped manager; every change goes through
    the order services.
    """

    queryset = Order.objects.all()
    serializer_class = OrderSerializer
    filter_backends = [DjangoFilterBackend]
    filterset_class = OrderFilter

    def get_queryset(self):
        return (
            Order.objects.select_related("table")
            .prefetch_related(
                "items__modifiers", "partial_payments", "consolidated_orders", "audit_log"
            )
            .order_by("-created_at")
        )

    def create(self, request: Request) -> Response:
        data = validated(OrderCreateSerializer, request)
        result = OrderService.create_order(
            request.restaurant,
            [dict(item) for item in data["items"]],
            table_id=data.get("table"),
            channel=data["channel"],
            customer_name=data["customer_name"],
            customer_mobile=data["customer_mobile"],
            adults=data["adults"],
            kids=data["kids"],
            waiter_name=data["waiter_name"],
            discount_amount=data.get("discount_amount"),
            discount_percent=data.get("discount_percent"),
            apply_tax=data["apply_tax"],
        )
        return result_response(result, http_status=status.HTTP_201_CREATED)
