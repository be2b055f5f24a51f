"""
Pay later tests: receivables and consolidation by mobile number.
"""
import pytest
from decimal import Decimal

from orders.exceptions import AlreadyClosed, InvalidOrder
from orders.models import ConsolidatedOrder, Order, OrderAuditEntry, Table
from orders.services import OrderService, PendingPaymentService


MOBILE = '9876543210'


@pytest.mark.django_db
class TestMarkPendingPayment:

    def test_order_becomes_receivable(self, billing_settings_a, table_1, paneer_tikka, place_order, restaurant_a):
        order = place_order([(paneer_tikka, 2)], table=table_1)

        result = PendingPaymentService.mark_pending_payment(
            order.pk, customer_name='Asha', customer_mobile=MOBILE, restaurant=restaurant_a
        )

        receivable = result.order
        assert receivable.pk == order.pk
        assert receivable.status == Order.OrderStatus.PENDING_PAYMENT
        assert receivable.payment_state == Order.PaymentState.PARTIAL
        assert receivable.amount_paid == Decimal('0')
        assert receivable.amount_due == receivable.total == Decimal('525')
        assert result.event_names() == ['PaymentPending']

        table_1.refresh_from_db()
        assert table_1.status == Table.TableStatus.AVAILABLE

    def test_pending_order_cannot_be_closed_directly(self, billing_settings_a, paneer_tikka, place_order, restaurant_a):
        order = place_order([(paneer_tikka, 1)], customer_mobile=MOBILE)
        PendingPaymentService.mark_pending_payment(order.pk, restaurant=restaurant_a)

        with pytest.raises(InvalidOrder):
            OrderService.close_order(order.pk, 'cash', restaurant=restaurant_a)

    def test_pay_later_twice_rejected(self, billing_settings_a, paneer_tikka, place_order, restaurant_a):
        order = place_order([(paneer_tikka, 1)])
        PendingPaymentService.mark_pending_payment(order.pk, restaurant=restaurant_a)

        with pytest.raises(InvalidOrder):
            PendingPaymentService.mark_pending_payment(order.pk, restaurant=restaurant_a)

    def test_closed_order_cannot_go_pay_later(self, billing_settings_a, paneer_tikka, place_order, restaurant_a):
        order = place_order([(paneer_tikka, 1)])
        OrderService.close_order(order.pk, 'cash', restaurant=restaurant_a)

        with pytest.raises(AlreadyClosed):
            PendingPaymentService.mark_pending_payment(order.pk, restaurant=restaurant_a)


@pytest.mark.django_db
class TestConsolidation:

    def test_second_order_merges_into_existing_receivable(
        self, billing_settings_a, table_1, table_2, paneer_tikka, butter_naan, place_order, restaurant_a
    ):
        """
        CRITICAL: A guest's pay-later orders collapse into one receivable

        Business Impact: The guest owes one amount; separate open bills get
        forgotten or collected twice
        """
        first = place_order([(paneer_tikka, 2)], table=table_1, customer_mobile=MOBILE)
        PendingPaymentService.mark_pending_payment(first.pk, restaurant=restaurant_a)

        second = place_order([(butter_naan, 3)], table=table_2)
        result = PendingPaymentService.mark_pending_payment(
            second.pk, customer_mobile=MOBILE, restaurant=restaurant_a
        )

        target = result.order
        assert target.pk == first.pk
        assert target.total == Decimal('840')
        assert target.amount_due == Decimal('840')
        assert sorted(target.items.values_list('name', flat=True)) == ['Butter Naan', 'Paneer Tikka']
        assert result.event_names() == ['OrderConsolidated']

        second.refresh_from_db()
        assert second.status == Order.OrderStatus.CANCELLED
        assert second.cancellation_reason == Order.CancellationReason.CONSOLIDATED
        assert second.consolidated_into_id == first.pk

        record = ConsolidatedOrder.objects.get(target=first)
        assert record.order_number == second.order_number

        table_2.refresh_from_db()
        assert table_2.current_order is None

        actions = set(OrderAuditEntry.objects.filter(order=first).values_list('action', flat=True))
        assert OrderAuditEntry.Action.ORDER_CONSOLIDATED in actions

    def test_merge_keeps_partial_payments(self, billing_settings_a, paneer_tikka, butter_naan, place_order, restaurant_a):
        from payments.services import PaymentLedgerService

        first = place_order([(paneer_tikka, 2)], customer_mobile=MOBILE)
        PendingPaymentService.mark_pending_payment(first.pk, restaurant=restaurant_a)
        PaymentLedgerService.settle(first.pk, 'cash', Decimal('200'), restaurant=restaurant_a)

        second = place_order([(butter_naan, 3)], customer_mobile=MOBILE)
        result = PendingPaymentService.mark_pending_payment(second.pk, restaurant=restaurant_a)

        assert result.order.amount_paid == Decimal('200')
        assert result.order.amount_due == Decimal('640')

    def test_blank_mobile_never_merges(self, billing_settings_a, paneer_tikka, butter_naan, place_order, restaurant_a):
        first = place_order([(paneer_tikka, 1)], customer_name='Walk-in')
        PendingPaymentService.mark_pending_payment(first.pk, restaurant=restaurant_a)

        second = place_order([(butter_naan, 1)], customer_name='Walk-in')
        result = PendingPaymentService.mark_pending_payment(second.pk, restaurant=restaurant_a)

        assert result.order.pk == second.pk
        assert result.order.status == Order.OrderStatus.PENDING_PAYMENT
        assert PendingPaymentService.list_pending(restaurant_a).count() == 2

    def test_different_mobiles_stay_separate(self, billing_settings_a, paneer_tikka, place_order, restaurant_a):
        first = place_order([(paneer_tikka, 1)], customer_mobile=MOBILE)
        PendingPaymentService.mark_pending_payment(first.pk, restaurant=restaurant_a)

        second = place_order([(paneer_tikka, 1)], customer_mobile='9123456780')
        result = PendingPaymentService.mark_pending_payment(second.pk, restaurant=restaurant_a)

        assert result.order.pk == second.pk

    def test_other_restaurant_receivable_not_used(
        self, billing_settings_a, paneer_tikka, place_order, restaurant_a, restaurant_b
    ):
        from products.models import MenuItem
        from settings.models import BillingSettings

        BillingSettings.all_objects.create(restaurant=restaurant_b)
        dosa = MenuItem.all_objects.create(restaurant=restaurant_b, name='Dosa', price=Decimal('120'))
        foreign = OrderService.create_order(
            restaurant_b, [{'menu_item': dosa.pk}], customer_mobile=MOBILE
        ).order
        PendingPaymentService.mark_pending_payment(foreign.pk, restaurant=restaurant_b)

        order = place_order([(paneer_tikka, 1)], customer_mobile=MOBILE)
        result = PendingPaymentService.mark_pending_payment(order.pk, restaurant=restaurant_a)

        assert result.order.pk == order.pk

    def test_merged_total_is_sum_of_both_bills(
        self, untaxed_settings_a, paneer_tikka, butter_naan, place_order, restaurant_a
    ):
        """
        CRITICAL: A discount on the merged-in order survives consolidation

        Business Impact: Repricing with only the receivable's own discount
        overcharges the guest
        """
        first = place_order([(paneer_tikka, 4)], customer_mobile=MOBILE)
        PendingPaymentService.mark_pending_payment(first.pk, restaurant=restaurant_a)

        second = place_order([(butter_naan, 5)], customer_mobile=MOBILE, discount_amount=Decimal('100'))
        assert second.total == Decimal('400')

        result = PendingPaymentService.mark_pending_payment(second.pk, restaurant=restaurant_a)

        assert result.order.subtotal == Decimal('1500')
        assert result.order.discount == Decimal('100')
        assert result.order.total == Decimal('1400')
        assert result.order.amount_due == Decimal('1400')

    def test_merged_tax_keeps_each_bills_rounding(self, billing_settings_a, restaurant_a, place_order):
        """Two 10 rupee bills at 5% are 11 each, so the receivable owes 22."""
        tea = {'name': 'Cutting Chai', 'price': '10', 'quantity': 1}
        first = place_order([tea], customer_mobile=MOBILE)
        PendingPaymentService.mark_pending_payment(first.pk, restaurant=restaurant_a)
        second = place_order([tea], customer_mobile=MOBILE)

        result = PendingPaymentService.mark_pending_payment(second.pk, restaurant=restaurant_a)

        assert first.total == second.total == Decimal('11')
        assert result.order.subtotal == Decimal('20')
        assert result.order.total == Decimal('22')

    def test_merged_order_is_stamped_closed(self, billing_settings_a, paneer_tikka, place_order, restaurant_a):
        first = place_order([(paneer_tikka, 1)], customer_mobile=MOBILE)
        PendingPaymentService.mark_pending_payment(first.pk, restaurant=restaurant_a)
        second = place_order([(paneer_tikka, 1)], customer_mobile=MOBILE)

        PendingPaymentService.mark_pending_payment(second.pk, restaurant=restaurant_a)

        second.refresh_from_db()
        first.refresh_from_db()
        assert second.closed_at is not None
        assert first.closed_at is None


@pytest.mark.django_db
class TestReceivableLeavesTableAlone:
    """Once a receivable has given up its table, settling or cancelling it must not touch that table."""

    def _reserve_after_pay_later(self, table, order, restaurant):
        PendingPaymentService.mark_pending_payment(order.pk, customer_mobile=MOBILE, restaurant=restaurant)
        table.refresh_from_db()
        table.status = Table.TableStatus.RESERVED
        table.save(update_fields=['status'])

    def test_settling_keeps_reservation(self, billing_settings_a, table_1, paneer_tikka, place_order, restaurant_a):
        from payments.services import PaymentLedgerService

        order = place_order([(paneer_tikka, 1)], table=table_1)
        self._reserve_after_pay_later(table_1, order, restaurant_a)

        result = PaymentLedgerService.settle(order.pk, 'cash', restaurant=restaurant_a)

        assert result.order.status == Order.OrderStatus.CLOSED
        table_1.refresh_from_db()
        assert table_1.status == Table.TableStatus.RESERVED

    def test_cancelling_keeps_reservation(self, billing_settings_a, table_1, paneer_tikka, place_order, restaurant_a):
        order = place_order([(paneer_tikka, 1)], table=table_1)
        self._reserve_after_pay_later(table_1, order, restaurant_a)

        OrderService.cancel_order(order.pk, 'CUSTOMER_DISPUTE', restaurant=restaurant_a)

        table_1.refresh_from_db()
        assert table_1.status == Table.TableStatus.RESERVED

    def test_settling_keeps_next_guest_seated(
        self, billing_settings_a, table_1, paneer_tikka, butter_naan, place_order, restaurant_a
    ):
        from payments.services import PaymentLedgerService

        order = place_order([(paneer_tikka, 1)], table=table_1)
        PendingPaymentService.mark_pending_payment(order.pk, customer_mobile=MOBILE, restaurant=restaurant_a)
        next_guest = place_order([(butter_naan, 1)], table=table_1)

        PaymentLedgerService.settle(order.pk, 'upi', restaurant=restaurant_a)

        table_1.refresh_from_db()
        assert table_1.status == Table.TableStatus.OCCUPIED
        assert table_1.current_order_id == next_guest.pk
