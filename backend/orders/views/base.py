from rest_framework import status
from rest_framework.response import Response

from orders.serializers import OrderSerializer


def result_response(result, http_status=status.HTTP_200_OK):
    """Serialized order plus the domain events the operation raised."""
    order = type(result.order).all_objects.get(pk=result.order.pk)
    return Response(
        {
            "order": OrderSerializer(order).data,
            "events": [event.to_dict() for event in result.events],
        },
        status=http_status,
    )


def validated(serializer_class, request):
    serializer = serializer_class(data=request.data)
    serializer.is_valid(raise_exception=True)
    return serializer.validated_data
