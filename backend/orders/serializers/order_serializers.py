from rest_framework import serializers

from orders.models import (
    ConsolidatedOrder,
    Order,
    OrderAuditEntry,
    OrderItem,
    OrderItemModifier,
    Table,
)
from payments.serializers import PartialPaymentSerializer
from payments.states import describe


class OrderItemModifierSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderItemModifier
        fields = ["group_name", "option_name", "price_delta"]


class OrderItemSerializer(serializers.ModelSerializer):
    modifiers = OrderItemModifierSerializer(many=True, read_only=True)
    line_total = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = OrderItem
        fields = [
            "id",
            "menu_item",
            "is_custom",
            "name",
            "price",
            "quantity",
            "special_request",
            "status",
            "added_at",
            "modifiers",
            "line_total",
        ]


class ConsolidatedOrderSerializer(serializers.ModelSerializer):
    class Meta:
        model = ConsolidatedOrder
        fields = ["order_number", "created_at", "merged_at"]


class OrderAuditEntrySerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderAuditEntry
        fields = ["action", "performed_by", "performed_at", "details", "metadata"]


class OrderSerializer(serializers.ModelSerializer):
    items = OrderItemSerializer(many=True, read_only=True)
    partial_payments = PartialPaymentSerializer(many=True, read_only=True)
    consolidated_orders = ConsolidatedOrderSerializer(many=True, read_only=True)
    audit_log = OrderAuditEntrySerializer(many=True, read_only=True)
    table_number = serializers.CharField(source="table.number", read_only=True, default=None)
    payment_ledger = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "status",
            "channel",
            "table",
            "table_number",
            "customer_name",
            "customer_mobile",
            "adults",
            "kids",
            "waiter_name",
            "items",
            "subtotal",
            "tax",
            "service_charge",
            "discount",
            "total",
            "discount_amount",
            "discount_percent",
            "apply_tax",
            "payment_method",
            "payment_state",
            "amount_paid",
            "amount_due",
            "payment_ledger",
            "partial_payments",
            "consolidated_orders",
            "consolidated_into",
            "cancellation_reason",
            "cancellation_note",
            "inventory_deducted",
            "version",
            "created_at",
            "closed_at",
            "audit_log",
        ]
        read_only_fields = fields

    def get_payment_ledger(self, obj):
        return describe(obj.payment_ledger)


class TableSerializer(serializers.ModelSerializer):
    current_order_number = serializers.SerializerMethodField()

    class Meta:
        model = Table
        fields = ["id", "number", "capacity", "status", "current_order", "current_order_number"]
        read_only_fields = fields

    def get_current_order_number(self, obj):
        order = obj.occupying_order()
        return order.order_number if order else None
