import django_filters

from .models import Order


class OrderFilter(django_filters.FilterSet):
    """
    Filters for the order list.

    `mobile` matches the guest mobile exactly; `open` limits the list to orders
    that still need attention (live or pay later).
    """

    status = django_filters.MultipleChoiceFilter(choices=Order.OrderStatus.choices)
    channel = django_filters.ChoiceFilter(choices=Order.Channel.choices)
    mobile = django_filters.CharFilter(field_name="customer_mobile", lookup_expr="exact")
    table = django_filters.NumberFilter(field_name="table_id")
    open = django_filters.BooleanFilter(method="filter_open")

    created_at__gte = django_filters.DateTimeFilter(field_name="created_at", lookup_expr="gte")
    created_at__lte = django_filters.DateTimeFilter(field_name="created_at", lookup_expr="lte")

    class Meta:
        model = Order
        fields = ["status", "channel", "mobile", "table"]

    def filter_open(self, queryset, name, value):
        if value is None:
            return queryset
        open_statuses = list(Order.LIVE_STATUSES) + [Order.OrderStatus.PENDING_PAYMENT]
        if value:
            return queryset.filter(status__in=open_statuses)
        return queryset.exclude(status__in=open_statuses)
