from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response
import logging

from orders.serializers import (
    CancelOrderSerializer,
    ChangeTableSerializer,
    CloseOrderSerializer,
    ItemStatusSerializer,
    UpdateCustomerSerializer,
    UpdateItemsSerializer,
)
from orders.services import OrderService
from .base import result_response, validated

logger = logging.getLogger(__name__)


class StatusActionsMixin:
    """
    Mixin for order lifecycle actions on OrderViewSet.

    Every action accepts an optional expected_version; a stale version is
    answered with 409 instead of overwriting someone else's change.
    """

    @action(detail=True, methods=["put"], url_path="items")
    def items(self, request: Request, pk=None) -> Response:
        data = validated(UpdateItemsSerializer, request)
        result = OrderService.update_order_items(
            pk,
            [dict(item) for item in data["items"]],
            restaurant=request.restaurant,
            expected_version=data.get("expected_version"),
        )
        return result_response(result)

    @action(detail=True, methods=["post"], url_path="item-status")
    def item_status(self, request: Request, pk=None) -> Response:
        data = validated(ItemStatusSerializer, request)
        result = OrderService.advance_item_status(
            pk,
            data["item_id"],
            data["status"],
            restaurant=request.restaurant,
            expected_version=data.get("expected_version"),
        )
        return result_response(result)

    @action(detail=True, methods=["post"], url_path="close")
    def close(self, request: Request, pk=None) -> Response:
        data = validated(CloseOrderSerializer, request)
        result = OrderService.close_order(
            pk,
            data["payment_method"],
            restaurant=request.restaurant,
            expected_version=data.get("expected_version"),
        )
        return result_response(result)

    @action(detail=True, methods=["post"], url_path="cancel")
    def cancel(self, request: Request, pk=None) -> Response:
        data = validated(CancelOrderSerializer, request)
        result = OrderService.cancel_order(
            pk,
            data["reason"],
            note=data.get("note", ""),
            restaurant=request.restaurant,
            expected_version=data.get("expected_version"),
        )
        return result_response(result)

    @action(detail=True, methods=["post"], url_path="change-table")
    def change_table(self, request: Request, pk=None) -> Response:
        data = validated(ChangeTableSerializer, request)
        result = OrderService.change_table(
            pk,
            data["table"],
            restaurant=request.restaurant,
            expected_version=data.get("expected_version"),
        )
        return result_response(result)

    @action(detail=True, methods=["patch"], url_path="customer")
    def customer(self, request: Request, pk=None) -> Response:
        data = validated(UpdateCustomerSerializer, request)
        result = OrderService.update_customer(
            pk,
            customer_name=data.get("customer_name"),
            customer_mobile=data.get("customer_mobile"),
            adults=data.get("adults"),
            kids=data.get("kids"),
            restaurant=request.restaurant,
            expected_version=data.get("expected_version"),
        )
        return result_response(result)
