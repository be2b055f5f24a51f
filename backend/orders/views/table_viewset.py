from rest_framework import viewsets

from orders.models import Table
from orders.serializers import TableSerializer


class TableViewSet(viewsets.ReadOnlyModelViewSet):
    """Table occupancy board."""

    serializer_class = TableSerializer

    def get_queryset(self):
        return Table.objects.select_related("current_order").order_by("number")
