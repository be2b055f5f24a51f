from rest_framework import serializers

from orders.models import Order, OrderItem


class ModifierInputSerializer(serializers.Serializer):
    group_name = serializers.CharField(max_length=100, required=False, allow_blank=True)
    option_name = serializers.CharField(max_length=100)
    price_delta = serializers.DecimalField(max_digits=10, decimal_places=2, required=False)


class ItemInputSerializer(serializers.Serializer):
    """A line item on create or edit. Send `id` to keep an existing item."""

    id = serializers.UUIDField(required=False)
    menu_item = serializers.IntegerField(required=False, allow_null=True)
    name = serializers.CharField(max_length=200, required=False, allow_blank=True)
    price = serializers.DecimalField(max_digits=10, decimal_places=2, required=False)
    quantity = serializers.IntegerField(min_value=1, required=False)
    special_request = serializers.CharField(max_length=500, required=False, allow_blank=True)
    modifiers = ModifierInputSerializer(many=True, required=False)

    def validate(self, data):
        if not data.get("id") and not data.get("menu_item") and not data.get("name"):
            raise serializers.ValidationError("Each item needs an id, a menu_item or a name and price.")
        return data


class VersionedActionSerializer(serializers.Serializer):
    expected_version = serializers.IntegerField(required=False, min_value=0)


class OrderCreateSerializer(serializers.Serializer):
    items = ItemInputSerializer(many=True)
    table = serializers.IntegerField(required=False, allow_null=True)
    channel = serializers.ChoiceField(choices=Order.Channel.choices, default=Order.Channel.DINE_IN)
    customer_name = serializers.CharField(max_length=200, required=False, allow_blank=True, default="")
    customer_mobile = serializers.CharField(max_length=20, required=False, allow_blank=True, default="")
    adults = serializers.IntegerField(min_value=0, default=1)
    kids = serializers.IntegerField(min_value=0, default=0)
    waiter_name = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")
    discount_amount = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, allow_null=True, min_value=0)
    discount_percent = serializers.DecimalField(
        max_digits=5, decimal_places=2, required=False, allow_null=True, min_value=0, max_value=100
    )
    apply_tax = serializers.BooleanField(default=True)


class UpdateItemsSerializer(VersionedActionSerializer):
    items = ItemInputSerializer(many=True)


class ItemStatusSerializer(VersionedActionSerializer):
    item_id = serializers.UUIDField()
    status = serializers.ChoiceField(choices=OrderItem.ItemStatus.choices)


class CloseOrderSerializer(VersionedActionSerializer):
    payment_method = serializers.CharField(max_length=50)


class CancelOrderSerializer(VersionedActionSerializer):
    reason = serializers.CharField(max_length=40)
    note = serializers.CharField(required=False, allow_blank=True, default="")


class PayLaterSerializer(VersionedActionSerializer):
    customer_name = serializers.CharField(max_length=200, required=False, allow_blank=True)
    customer_mobile = serializers.CharField(max_length=20, required=False, allow_blank=True)


class SettlePaymentSerializer(VersionedActionSerializer):
    method = serializers.CharField(max_length=50)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)


class ChangeTableSerializer(VersionedActionSerializer):
    table = serializers.IntegerField()


class UpdateCustomerSerializer(VersionedActionSerializer):
    customer_name = serializers.CharField(max_length=200, required=False, allow_blank=True)
    customer_mobile = serializers.CharField(max_length=20, required=False, allow_blank=True)
    adults = serializers.IntegerField(min_value=0, required=False)
    kids = serializers.IntegerField(min_value=0, required=False)


class SplitBillSerializer(serializers.Serializer):
    mode = serializers.ChoiceField(choices=[("equal", "Equal"), ("by_item", "By item")])
    payers = serializers.IntegerField(min_value=1, max_value=100, required=False)
    assignments = serializers.DictField(child=serializers.CharField(max_length=50), required=False)

    def validate(self, data):
        if data["mode"] == "equal" and not data.get("payers"):
            raise serializers.ValidationError({"payers": "Required for an equal split."})
        return data


class BillPreviewSerializer(serializers.Serializer):
    items = ItemInputSerializer(many=True)
    discount_amount = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, allow_null=True, min_value=0)
    discount_percent = serializers.DecimalField(
        max_digits=5, decimal_places=2, required=False, allow_null=True, min_value=0, max_value=100
    )
    apply_tax = serializers.BooleanField(default=True)
