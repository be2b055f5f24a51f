from django.db import models
from threading import local

# Thread-local storage for the current restaurant
_thread_locals = local()


def set_current_restaurant(restaurant):
    """
    Set the current restaurant for this thread.

    Args:
        restaurant: Restaurant instance or None to clear

    Called by RestaurantMiddleware for every request, and by tests and scripts
    that operate on one restaurant's data.
    """
    _thread_locals.restaurant = restaurant


def get_current_restaurant():
    """
    Get the current restaurant for this thread.

    Returns:
        Restaurant instance or None if no restaurant context is set
    """
    return getattr(_thread_locals, 'restaurant', None)


class RestaurantScopedManager(models.Manager):
    """
    Automatically filters querysets by the current restaurant.

    FAILS CLOSED: Returns an empty queryset if no restaurant context is set,
    so one restaurant's orders can never leak into another's screens.

    Usage:
        class Order(models.Model):
            restaurant = models.ForeignKey('restaurants.Restaurant', on_delete=models.CASCADE)

            objects = RestaurantScopedManager()  # Default manager (restaurant-filtered)
            all_objects = models.Manager()  # Unfiltered, for services that pass the restaurant explicitly
    """

    def get_queryset(self):
        restaurant = get_current_restaurant()

        if restaurant:
            return super().get_queryset().filter(restaurant=restaurant)

        return super().get_queryset().none()
