"""Django app configuration for django-care-bookings."""

from django.apps import AppConfig


class CareBookingsConfig(AppConfig):
    """Configuration for django-care-bookings app."""

    name = "django_care_bookings"
    label = "care_bookings"
    verbose_name = "Care Bookings"
    default_auto_field = "django.db.models.BigAutoField"
