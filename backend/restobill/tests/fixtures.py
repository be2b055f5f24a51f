"""
Shared test fixtures for all backend tests.

Restaurant A ("Spice Route") is fully set up: billing settings, two tables,
a small menu with one recipe and tracked stock. Restaurant B exists to prove
isolation.
"""
import pytest
from decimal import Decimal

from restaurants.models import Restaurant
from restaurants.managers import set_current_restaurant
from settings.models import BillingSettings
from products.models import MenuItem
from inventory.models import InventoryItem, RecipeItem
from orders.models import Table


# ============================================================================
# RESTAURANT FIXTURES
# ============================================================================

@pytest.fixture
def restaurant_a(db):
    """Create test restaurant A (Spice Route)"""
    return Restaurant.objects.create(name='Spice Route', slug='spice-route', is_active=True)


@pytest.fixture
def restaurant_b(db):
    """Create test restaurant B (Curry House)"""
    return Restaurant.objects.create(name='Curry House', slug='curry-house', is_active=True)


@pytest.fixture
def inactive_restaurant(db):
    """Create inactive test restaurant"""
    return Restaurant.objects.create(name='Closed Kitchen', slug='closed-kitchen', is_active=False)


@pytest.fixture
def restaurant_context(restaurant_a):
    """Scope ORM managers to restaurant A for the test."""
    set_current_restaurant(restaurant_a)
    yield restaurant_a
    set_current_restaurant(None)


# ============================================================================
# SETTINGS FIXTURES
# ============================================================================

@pytest.fixture
def billing_settings_a(restaurant_a):
    """Flat 5% tax, no service charge, loyalty and inventory on."""
    return BillingSettings.all_objects.create(restaurant=restaurant_a)


@pytest.fixture
def gst_settings_a(restaurant_a):
    """CGST 2.5% + SGST 2.5%."""
    return BillingSettings.all_objects.create(
        restaurant=restaurant_a,
        cgst_rate=Decimal('2.5'),
        sgst_rate=Decimal('2.5'),
    )


@pytest.fixture
def untaxed_settings_a(restaurant_a):
    """No tax at all, so bills are plain sums of their items."""
    return BillingSettings.all_objects.create(restaurant=restaurant_a, tax_rate=Decimal('0'))


# ============================================================================
# TABLE FIXTURES
# ============================================================================

@pytest.fixture
def table_1(restaurant_a):
    return Table.all_objects.create(restaurant=restaurant_a, number='T1', capacity=4)


@pytest.fixture
def table_2(restaurant_a):
    return Table.all_objects.create(restaurant=restaurant_a, number='T2', capacity=2)


# ============================================================================
# MENU & INVENTORY FIXTURES
# ============================================================================

@pytest.fixture
def paneer_tikka(restaurant_a):
    """Recipe-driven item: no direct stock."""
    return MenuItem.all_objects.create(restaurant=restaurant_a, name='Paneer Tikka', price=Decimal('250.00'))


@pytest.fixture
def masala_chai(restaurant_a):
    """Directly stocked item: 20 cups, warn at 5."""
    return MenuItem.all_objects.create(
        restaurant=restaurant_a,
        name='Masala Chai',
        price=Decimal('50.00'),
        stock_quantity=Decimal('20'),
        low_stock_threshold=Decimal('5'),
    )


@pytest.fixture
def butter_naan(restaurant_a):
    return MenuItem.all_objects.create(restaurant=restaurant_a, name='Butter Naan', price=Decimal('100.00'))


@pytest.fixture
def paneer_stock(restaurant_a):
    """2 kg of paneer, warn at 0.5 kg."""
    return InventoryItem.all_objects.create(
        restaurant=restaurant_a,
        name='Paneer',
        unit='kg',
        quantity=Decimal('2.000'),
        low_stock_threshold=Decimal('0.500'),
    )


@pytest.fixture
def paneer_recipe(paneer_tikka, paneer_stock):
    """One plate of Paneer Tikka uses 0.2 kg of paneer."""
    return RecipeItem.objects.create(
        menu_item=paneer_tikka,
        inventory_item=paneer_stock,
        quantity=Decimal('0.200'),
    )


# ============================================================================
# ORDER HELPERS
# ============================================================================

@pytest.fixture
def place_order(restaurant_a):
    """
    Factory that creates an order through OrderService.

    Usage:
        order = place_order([(paneer_tikka, 2)], table=table_1, customer_mobile='9876543210')
    """
    from orders.services import OrderService

    def _place(lines, table=None, **kwargs):
        items = []
        for line in lines:
            if isinstance(line, dict):
                items.append(line)
            else:
                menu_item, quantity = line
                items.append({'menu_item': menu_item.pk, 'quantity': quantity})
        result = OrderService.create_order(
            restaurant_a,
            items,
            table_id=table.pk if table is not None else None,
            **kwargs,
        )
        return result.order

    return _place
