"""
Partial settlement tests for pay-later orders.

Bills here are untaxed so the amounts read as plain sums: four Paneer Tikka
is a Rs 1000 receivable.
"""
import pytest
from decimal import Decimal

from orders.exceptions import AlreadyClosed, ConcurrentModification, InvalidAmount, InvalidOrder
from orders.models import Order, OrderAuditEntry
from orders.services import OrderService, PendingPaymentService
from payments.models import PartialPayment
from payments.services import PaymentLedgerService
from payments.states import NotStarted, Partial, Settled, describe


@pytest.fixture
def receivable(untaxed_settings_a, paneer_tikka, place_order, restaurant_a):
    """A Rs 1000 pay-later order for Asha."""
    order = place_order([(paneer_tikka, 4)], customer_name='Asha', customer_mobile='9876543210')
    return PendingPaymentService.mark_pending_payment(order.pk, restaurant=restaurant_a).order


@pytest.mark.django_db
class TestSettle:

    def test_two_payments_settle_the_order(self, receivable, restaurant_a):
        """
        CRITICAL: Rs 400 cash then Rs 600 UPI settles a Rs 1000 receivable

        Business Impact: Split settlements are how regulars pay their tabs
        """
        first = PaymentLedgerService.settle(receivable.pk, 'cash', Decimal('400'), restaurant=restaurant_a)

        assert first.order.status == Order.OrderStatus.PENDING_PAYMENT
        assert first.order.payment_state == Order.PaymentState.PARTIAL
        assert first.order.amount_paid == Decimal('400')
        assert first.order.amount_due == Decimal('600')
        assert first.order.amount_paid + first.order.amount_due == first.order.total
        assert first.event_names() == ['PartialPaymentRecorded']

        second = PaymentLedgerService.settle(receivable.pk, 'upi', Decimal('600'), restaurant=restaurant_a)

        order = second.order
        assert order.status == Order.OrderStatus.CLOSED
        assert order.payment_state == Order.PaymentState.SETTLED
        assert order.amount_paid == Decimal('1000')
        assert order.amount_due == Decimal('0')
        assert order.payment_method == 'cash: ₹400, upi: ₹600'
        assert order.closed_at is not None
        assert 'OrderClosed' in second.event_names()
        assert 'PaymentSettled' in second.event_names()
        assert PartialPayment.objects.filter(order=order).count() == 2

    def test_amount_defaults_to_everything_due(self, receivable, restaurant_a):
        result = PaymentLedgerService.settle(receivable.pk, 'card', restaurant=restaurant_a)

        assert result.order.status == Order.OrderStatus.CLOSED
        assert result.order.amount_paid == Decimal('1000')

    def test_overpayment_rejected(self, receivable, restaurant_a):
        """
        CRITICAL: Paying more than is due is refused, not silently absorbed

        Business Impact: Overpayments turn into unexplained cash variances
        """
        PaymentLedgerService.settle(receivable.pk, 'cash', Decimal('400'), restaurant=restaurant_a)

        with pytest.raises(InvalidAmount):
            PaymentLedgerService.settle(receivable.pk, 'cash', Decimal('601'), restaurant=restaurant_a)

        receivable.refresh_from_db()
        assert receivable.amount_due == Decimal('600')

    @pytest.mark.parametrize('amount', [Decimal('0'), Decimal('-50')])
    def test_non_positive_amount_rejected(self, amount, receivable, restaurant_a):
        with pytest.raises(InvalidAmount):
            PaymentLedgerService.settle(receivable.pk, 'cash', amount, restaurant=restaurant_a)

    def test_method_required(self, receivable, restaurant_a):
        with pytest.raises(InvalidOrder):
            PaymentLedgerService.settle(receivable.pk, '', Decimal('100'), restaurant=restaurant_a)

    def test_settled_order_rejects_more_payments(self, receivable, restaurant_a):
        PaymentLedgerService.settle(receivable.pk, 'cash', restaurant=restaurant_a)

        with pytest.raises(AlreadyClosed):
            PaymentLedgerService.settle(receivable.pk, 'cash', Decimal('1'), restaurant=restaurant_a)

    def test_live_order_must_be_closed_not_settled(self, untaxed_settings_a, paneer_tikka, place_order, restaurant_a):
        order = place_order([(paneer_tikka, 1)])

        with pytest.raises(InvalidOrder):
            PaymentLedgerService.settle(order.pk, 'cash', Decimal('250'), restaurant=restaurant_a)

    def test_stale_version_rejected(self, receivable, restaurant_a):
        PaymentLedgerService.settle(receivable.pk, 'cash', Decimal('100'), restaurant=restaurant_a)

        with pytest.raises(ConcurrentModification):
            PaymentLedgerService.settle(
                receivable.pk, 'cash', Decimal('100'), restaurant=restaurant_a,
                expected_version=receivable.version,
            )

    def test_payments_are_audited(self, receivable, restaurant_a):
        PaymentLedgerService.settle(receivable.pk, 'cash', Decimal('400'), restaurant=restaurant_a)
        PaymentLedgerService.settle(receivable.pk, 'upi', Decimal('600'), restaurant=restaurant_a)

        actions = list(
            OrderAuditEntry.objects.filter(order=receivable).order_by('performed_at', 'pk').values_list('action', flat=True)
        )
        assert actions[-2:] == [OrderAuditEntry.Action.PARTIAL_PAYMENT, OrderAuditEntry.Action.PAYMENT_SETTLED]

    def test_settling_closes_through_loyalty(self, receivable, restaurant_a):
        from customers.models import Customer

        PaymentLedgerService.settle(receivable.pk, 'cash', restaurant=restaurant_a)

        customer = Customer.all_objects.get(restaurant=restaurant_a, mobile='9876543210')
        assert customer.visits == 1
        assert customer.total_spent == Decimal('1000')

    def test_many_small_payments_settle(self, receivable, restaurant_a):
        """Twenty Rs 50 payments leave a payment summary longer than any short column."""
        for _ in range(20):
            result = PaymentLedgerService.settle(
                receivable.pk, 'card ending 4242', Decimal('50'), restaurant=restaurant_a
            )

        order = Order.all_objects.get(pk=receivable.pk)
        assert result.order.status == Order.OrderStatus.CLOSED
        assert order.status == Order.OrderStatus.CLOSED
        assert len(order.payment_method) > 255
        assert order.payment_method == ', '.join(['card ending 4242: ₹50'] * 20)
        assert Order._meta.get_field('payment_method').max_length is None


@pytest.mark.django_db
class TestPaymentLedgerVariant:

    def test_new_order_not_started(self, untaxed_settings_a, paneer_tikka, place_order):
        order = place_order([(paneer_tikka, 1)])

        assert isinstance(order.payment_ledger, NotStarted)
        assert describe(order.payment_ledger) == {'state': 'NOT_STARTED'}

    def test_partial_carries_history(self, receivable, restaurant_a):
        PaymentLedgerService.settle(receivable.pk, 'cash', Decimal('400'), restaurant=restaurant_a)
        receivable.refresh_from_db()

        ledger = receivable.payment_ledger
        assert isinstance(ledger, Partial)
        assert ledger.paid == Decimal('400')
        assert ledger.due == Decimal('600')
        assert [record.method for record in ledger.history] == ['cash']

    def test_direct_close_is_settled(self, untaxed_settings_a, paneer_tikka, place_order, restaurant_a):
        order = place_order([(paneer_tikka, 1)])
        OrderService.close_order(order.pk, 'card', restaurant=restaurant_a)
        order.refresh_from_db()

        ledger = order.payment_ledger
        assert isinstance(ledger, Settled)
        assert ledger.paid == Decimal('250')
        assert describe(ledger)['history'][0]['method'] == 'card'
