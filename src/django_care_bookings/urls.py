"""URL configuration for django-care-bookings API."""

from django.urls import path

from . import views

app_name = "care_bookings"

urlpatterns = [
    path("bookings/<uuid:uuid>/qa-pairs/", views.save_qa_pairs, name="save_qa_pairs"),
    path("bookings/<uuid:uuid>/status/", views.update_status, name="update_status"),
    path("amendments/", views.resolve_amendment, name="resolve_amendment"),
]
