"""
Orders views package - order viewset assembled from action mixins.
"""

from .order_viewset import OrderViewSet
from .table_viewset import TableViewSet
from .billing_views import BillPreviewView

__all__ = [
    'OrderViewSet',
    'TableViewSet',
    'BillPreviewView',
]
