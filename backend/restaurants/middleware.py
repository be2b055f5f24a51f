from django.conf import settings
from django.http import JsonResponse

from .models import Restaurant
from .managers import set_current_restaurant


class RestaurantNotFoundError(Exception):
    """Raised when the restaurant cannot be resolved from the request."""
    pass


class RestaurantMiddleware:
    """
    Resolves the restaurant from the X-Restaurant header (slug) and attaches it
    to request.restaurant, setting the thread-local context for
    RestaurantScopedManager.

    Requests outside /api/ pass through without a restaurant.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        if not request.path.startswith('/api/'):
            request.restaurant = None
            return self.get_response(request)

        try:
            restaurant = self.get_restaurant_from_request(request)
            request.restaurant = restaurant
            set_current_restaurant(restaurant)

            if not restaurant.is_active:
                return JsonResponse({
                    'error': 'Restaurant account is inactive',
                    'code': 'RESTAURANT_INACTIVE'
                }, status=403)

            return self.get_response(request)

        except RestaurantNotFoundError as e:
            return JsonResponse({
                'error': str(e),
                'code': 'RESTAURANT_NOT_FOUND'
            }, status=400)

        finally:
            # Always clear the thread-local context so it cannot leak into the
            # next request served by this thread.
            set_current_restaurant(None)

    def get_restaurant_from_request(self, request):
        header = getattr(settings, 'RESTAURANT_HEADER', 'HTTP_X_RESTAURANT')
        slug = request.META.get(header, '').strip()
        if not slug:
            raise RestaurantNotFoundError("Missing X-Restaurant header")

        try:
            return Restaurant.objects.get(slug=slug)
        except Restaurant.DoesNotExist:
            raise RestaurantNotFoundError(f"Unknown restaurant '{slug}'")
