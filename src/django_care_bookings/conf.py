"""Django Care Bookings configuration.

All settings can be overridden in your Django settings.py.

Example:
    # settings.py
    CARE_BOOKINGS_APP_URL = 'https://bookings.example.com'
    CARE_BOOKINGS_ADMIN_EMAIL = 'admin@example.com'
"""

from django.conf import settings


def get_setting(name: str, default=None):
    """Get a setting with CARE_BOOKINGS_ prefix."""
    return getattr(settings, f"CARE_BOOKINGS_{name}", default)


# =============================================================================
# URLS AND ADDRESSES
# =============================================================================

def app_url() -> str:
    """Base URL used when building links in notifications and emails."""
    return get_setting("APP_URL", "http://localhost:8000").rstrip("/")


def admin_email() -> str | None:
    """Fallback admin recipient when no admin recipients are configured."""
    return get_setting("ADMIN_EMAIL", None)


def info_email() -> str:
    """Mailbox that receives staff copies of booking emails."""
    return get_setting("INFO_EMAIL", "info@example.com")


def from_email() -> str | None:
    """Sender address for booking emails (None uses DEFAULT_FROM_EMAIL)."""
    return get_setting("FROM_EMAIL", None)


# =============================================================================
# BEHAVIOUR
# =============================================================================

def recipients_cache_ttl() -> int:
    """Seconds a loaded recipient list stays valid."""
    return int(get_setting("RECIPIENTS_CACHE_TTL", 300))


def pdf_export_debounce() -> int:
    """Seconds during which a repeated PDF export request is skipped."""
    return int(get_setting("PDF_EXPORT_DEBOUNCE", 30))


def cascade_dependents_on_reject() -> bool:
    """Whether rejecting an amendment also clears answers of dependent questions."""
    return bool(get_setting("CASCADE_DEPENDENTS_ON_REJECT", False))


def reference_start() -> int:
    """Value after which booking reference ids are allocated."""
    return int(get_setting("REFERENCE_START", 100000))


# =============================================================================
# DEFAULT SETTINGS REFERENCE
# =============================================================================

# CARE_BOOKINGS_APP_URL = 'https://bookings.example.com'
# CARE_BOOKINGS_ADMIN_EMAIL = 'admin@example.com'     # Optional - admin fallback
# CARE_BOOKINGS_INFO_EMAIL = 'info@example.com'
# CARE_BOOKINGS_FROM_EMAIL = 'bookings@example.com'   # Optional
# CARE_BOOKINGS_RECIPIENTS_CACHE_TTL = 300
# CARE_BOOKINGS_PDF_EXPORT_DEBOUNCE = 30
# CARE_BOOKINGS_CASCADE_DEPENDENTS_ON_REJECT = False
# CARE_BOOKINGS_REFERENCE_START = 100000
