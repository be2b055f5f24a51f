"""
RestaurantMiddleware tests: resolving the restaurant from X-Restaurant.
"""
import pytest
from rest_framework import status
from rest_framework.test import APIClient

from restaurants.managers import get_current_restaurant


@pytest.mark.django_db
class TestRestaurantMiddleware:

    def test_missing_header_rejected(self, restaurant_a):
        response = APIClient().get('/api/orders/')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()['code'] == 'RESTAURANT_NOT_FOUND'

    def test_unknown_restaurant_rejected(self):
        client = APIClient()
        client.credentials(HTTP_X_RESTAURANT='no-such-place')

        response = client.get('/api/orders/')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "no-such-place" in response.json()['error']

    def test_inactive_restaurant_forbidden(self, inactive_restaurant):
        client = APIClient()
        client.credentials(HTTP_X_RESTAURANT=inactive_restaurant.slug)

        response = client.get('/api/orders/')

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()['code'] == 'RESTAURANT_INACTIVE'

    def test_context_cleared_after_request(self, api_client, billing_settings_a):
        """
        CRITICAL: The restaurant context never outlives its request

        Business Impact: A leaked context shows one restaurant's orders to the next caller on that thread
        """
        response = api_client.get('/api/orders/')

        assert response.status_code == status.HTTP_200_OK
        assert get_current_restaurant() is None

    def test_non_api_paths_pass_through(self):
        response = APIClient().get('/not-an-api-path/')

        assert response.status_code == status.HTTP_404_NOT_FOUND
