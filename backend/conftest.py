"""
Root conftest.py for all backend tests.

This file makes fixtures available to all test files across all apps.
"""
import pytest

from restaurants.managers import set_current_restaurant

from restobill.tests.fixtures import *  # noqa: F401,F403


# ============================================================================
# AUTO-USE FIXTURES (Run automatically for every test)
# ============================================================================

@pytest.fixture(autouse=True)
def reset_restaurant_context():
    """
    Reset restaurant context after each test.

    CRITICAL: If the context leaks, scoped managers return another test's
    restaurant data and isolation tests pass when they should fail.
    """
    yield
    set_current_restaurant(None)


@pytest.fixture
def api_client(restaurant_a):
    """DRF client that sends restaurant A's X-Restaurant header."""
    from rest_framework.test import APIClient

    client = APIClient()
    client.credentials(HTTP_X_RESTAURANT=restaurant_a.slug)
    return client
