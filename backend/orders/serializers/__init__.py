from .order_serializers import (
    OrderItemModifierSerializer,
    OrderItemSerializer,
    ConsolidatedOrderSerializer,
    OrderAuditEntrySerializer,
    OrderSerializer,
    TableSerializer,
)
from .action_serializers import (
    ModifierInputSerializer,
    ItemInputSerializer,
    OrderCreateSerializer,
    UpdateItemsSerializer,
    ItemStatusSerializer,
    CloseOrderSerializer,
    CancelOrderSerializer,
    PayLaterSerializer,
    SettlePaymentSerializer,
    ChangeTableSerializer,
    UpdateCustomerSerializer,
    SplitBillSerializer,
    BillPreviewSerializer,
)
