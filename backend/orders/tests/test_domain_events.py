"""
Domain events are delivered through the domain_event signal after commit.
"""
import pytest
from decimal import Decimal

from orders.events import LowStockCrossed, OrderCreated
from orders.exceptions import InvalidOrder
from orders.services import OrderService
from orders.signals import domain_event


@pytest.fixture
def received():
    events = []

    def collect(sender, event, **kwargs):
        events.append(event)

    domain_event.connect(collect, weak=False)
    yield events
    domain_event.disconnect(collect)


@pytest.mark.django_db
class TestDomainEvents:

    def test_events_sent_on_commit(self, billing_settings_a, paneer_tikka, restaurant_a, received, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=False) as callbacks:
            OrderService.create_order(restaurant_a, [{'menu_item': paneer_tikka.pk}])

        assert received == []

        for callback in callbacks:
            callback()

        assert [type(e) for e in received] == [OrderCreated]

    def test_failed_operation_sends_nothing(self, billing_settings_a, restaurant_a, received, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=True):
            with pytest.raises(InvalidOrder):
                OrderService.create_order(restaurant_a, [])

        assert received == []

    def test_close_reports_stock_alerts(self, billing_settings_a, masala_chai, place_order, restaurant_a, received, django_capture_on_commit_callbacks):
        order = place_order([(masala_chai, 16)])

        with django_capture_on_commit_callbacks(execute=True):
            OrderService.close_order(order.pk, 'cash', restaurant=restaurant_a)

        alerts = [e for e in received if isinstance(e, LowStockCrossed)]
        assert len(alerts) == 1
        assert alerts[0].quantity == Decimal('4')

    def test_event_serialization(self):
        event = OrderCreated(order_number=7, table_number='T1')

        assert event.to_dict() == {'type': 'OrderCreated', 'order_number': 7, 'table_number': 'T1'}
