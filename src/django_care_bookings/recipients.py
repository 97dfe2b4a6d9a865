"""Email recipient lists stored in settings.

Recipient lists live in ``Setting`` rows as comma-separated addresses.
Callers hold a :class:`RecipientsCache` and pass it where recipients
are needed; the cache reloads once its TTL has passed.

Usage:
    cache = RecipientsCache(ttl=conf.recipients_cache_ttl())
    for address in cache.admin_recipients():
        ...
"""

import logging
import time
from typing import Callable

from django.db import DatabaseError

from . import conf

logger = logging.getLogger(__name__)

EOI_RECIPIENTS = "email_eoi_recipients"
ADMIN_RECIPIENTS = "email_admin_recipients"
INFO_RECIPIENTS = "email_info_recipients"

RECIPIENT_ATTRIBUTES = (EOI_RECIPIENTS, ADMIN_RECIPIENTS, INFO_RECIPIENTS)


def _split_addresses(value: str) -> list[str]:
    return [address.strip() for address in value.split(",") if address.strip()]


class RecipientsCache:
    """Time-boxed cache of the recipient settings.

    Args:
        ttl: Seconds a loaded snapshot stays valid
        clock: Monotonic time source, injectable for tests
    """

    def __init__(self, ttl: float | None = None, clock: Callable[[], float] = time.monotonic):
        self.ttl = conf.recipients_cache_ttl() if ttl is None else ttl
        self.clock = clock
        self._recipients: dict[str, list[str]] | None = None
        self._loaded_at: float | None = None

    def is_valid(self) -> bool:
        if self._loaded_at is None:
            return False
        return (self.clock() - self._loaded_at) < self.ttl

    def clear(self) -> None:
        self._recipients = None
        self._loaded_at = None

    def load(self) -> dict[str, list[str]]:
        """Read all recipient lists from settings and refresh the cache.

        A database error is logged and yields empty lists (not cached).
        """
        from .models import Setting

        recipients = {attribute: [] for attribute in RECIPIENT_ATTRIBUTES}
        try:
            for setting in Setting.objects.filter(attribute__in=RECIPIENT_ATTRIBUTES):
                if setting.value:
                    recipients[setting.attribute] = _split_addresses(setting.value)
        except DatabaseError as e:
            logger.error("Error loading email recipients from settings: %s", e)
            return {attribute: [] for attribute in RECIPIENT_ATTRIBUTES}

        self._recipients = recipients
        self._loaded_at = self.clock()
        return recipients

    def _get(self, attribute: str, use_cache: bool) -> list[str]:
        if use_cache and self.is_valid() and self._recipients is not None:
            return list(self._recipients[attribute])
        return list(self.load()[attribute])

    def eoi_recipients(self, use_cache: bool = True) -> list[str]:
        return self._get(EOI_RECIPIENTS, use_cache)

    def info_recipients(self, use_cache: bool = True) -> list[str]:
        return self._get(INFO_RECIPIENTS, use_cache)

    def admin_recipients(self, use_cache: bool = True) -> list[str]:
        """Admin recipients, falling back to CARE_BOOKINGS_ADMIN_EMAIL."""
        recipients = self._get(ADMIN_RECIPIENTS, use_cache)
        if not recipients and conf.admin_email():
            return [conf.admin_email()]
        return recipients
