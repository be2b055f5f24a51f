from rest_framework import serializers

from .models import PartialPayment


class PartialPaymentSerializer(serializers.ModelSerializer):
    class Meta:
        model = PartialPayment
        fields = ["method", "amount", "paid_at"]
