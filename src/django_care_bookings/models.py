"""Models for django-care-bookings.

Bookings are made of sections of question/answer pairs filled against a
questionnaire template. Post-completion changes are recorded as
amendment logs, and lifecycle status is tracked on the booking together
with an append-only status history.
"""

import uuid

from django.conf import settings
from django.contrib.contenttypes.fields import GenericForeignKey
from django.contrib.contenttypes.models import ContentType
from django.db import models
from django.utils import timezone

from .log_data import LogKind, QaPairLogData, parse_log_data
from .status_log import append_status
from .statuses import (
    BookingStatus,
    BookingType,
    EligibilityStatus,
    StatusValue,
    booking_status,
    eligibility_status,
)


class QuestionType(models.TextChoices):
    """Question type choices."""

    TEXT = "text", "Text"
    TEXTAREA = "textarea", "Long Text"
    NUMBER = "number", "Number"
    DATE = "date", "Date"
    DATE_RANGE = "date-range", "Date Range"
    RADIO = "radio", "Radio"
    SELECT = "select", "Select"
    CHECKBOX = "checkbox", "Checkbox"
    FILE_UPLOAD = "file-upload", "File Upload"
    EQUIPMENT = "equipment", "Equipment"
    PACKAGE_SELECTION = "package-selection", "Package Selection"
    PHONE_NUMBER = "phone-number", "Phone Number"
    EMAIL = "email", "Email"
    YEAR = "year", "Year"


# =============================================================================
# Base models
# =============================================================================


class TimeStampedModel(models.Model):
    """Abstract base model with created/updated timestamps."""

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class SoftDeleteManager(models.Manager):
    """Manager that excludes soft-deleted objects by default."""

    def get_queryset(self):
        return super().get_queryset().filter(deleted_at__isnull=True)


class BaseModel(TimeStampedModel):
    """Timestamps plus soft delete.

    Attributes:
        deleted_at: Timestamp when soft-deleted, None if active
        objects: Manager that excludes deleted records
        all_objects: Manager that includes all records
    """

    deleted_at = models.DateTimeField(null=True, blank=True)

    objects = SoftDeleteManager()
    all_objects = models.Manager()

    class Meta:
        abstract = True

    def delete(self, using=None, keep_parents=False):
        """Soft delete the object by setting deleted_at timestamp."""
        self.deleted_at = timezone.now()
        self.save(update_fields=["deleted_at"])

    def restore(self):
        """Restore a soft-deleted object by clearing deleted_at."""
        self.deleted_at = None
        self.save(update_fields=["deleted_at"])

    @property
    def is_deleted(self):
        return self.deleted_at is not None


# =============================================================================
# Guests and templates
# =============================================================================


class Guest(TimeStampedModel):
    """Person a booking is made for."""

    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100, blank=True, default="")
    email = models.EmailField(unique=True)
    active = models.BooleanField(default=False)

    def __str__(self):
        return self.full_name

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class BookingTemplate(TimeStampedModel):
    """Questionnaire a booking is filled against."""

    name = models.CharField(max_length=255)

    def __str__(self):
        return self.name


class Question(TimeStampedModel):
    """Template question.

    Attributes:
        template: Owning booking template
        section_label: Label of the template section holding the question
        order: Position within the template
        question: Question text as shown to the guest
        question_key: Stable machine key used to look answers up
        question_type: Input type
        required: Whether an answer is needed for the booking to be complete
        second_booking_only: Only asked on returning bookings
        ndis_only: Only asked of NDIS funded guests
        options: Choices for radio/select/checkbox questions
    """

    template = models.ForeignKey(
        BookingTemplate,
        on_delete=models.CASCADE,
        related_name="questions",
    )
    section_label = models.CharField(max_length=255, blank=True, default="")
    order = models.PositiveIntegerField(default=0)
    question = models.TextField()
    question_key = models.CharField(max_length=100, blank=True, default="", db_index=True)
    question_type = models.CharField(max_length=30, choices=QuestionType.choices)
    required = models.BooleanField(default=False)
    second_booking_only = models.BooleanField(default=False)
    ndis_only = models.BooleanField(default=False)
    options = models.JSONField(default=list, blank=True)

    class Meta:
        ordering = ["order"]

    def __str__(self):
        return self.question[:50]


class QuestionDependency(models.Model):
    """Makes ``question`` apply only when ``dependence`` was answered with ``answer``."""

    question = models.ForeignKey(
        Question,
        on_delete=models.CASCADE,
        related_name="dependencies",
    )
    dependence = models.ForeignKey(
        Question,
        on_delete=models.CASCADE,
        related_name="dependents",
    )
    answer = models.TextField()

    def __str__(self):
        return f"{self.question_id} <- {self.dependence_id}={self.answer}"


# =============================================================================
# Bookings
# =============================================================================


def default_metainfo() -> dict:
    return {
        "notifications": False,
        "triggered_emails": {"on_submit": False, "on_booking_confirmed": False},
    }


def default_status() -> str:
    return booking_status(BookingStatus.ENQUIRY).to_json()


def default_eligibility() -> str:
    return eligibility_status(EligibilityStatus.PENDING_ELIGIBILITY).to_json()


class ReferenceCounter(models.Model):
    """Counter row for human-readable booking references."""

    scope = models.CharField(max_length=50, unique=True)
    current_value = models.PositiveBigIntegerField(default=0)

    def __str__(self):
        return f"{self.scope}: {self.current_value}"


class Booking(BaseModel):
    """A guest's stay request and its lifecycle record.

    ``status`` and ``eligibility`` hold the serialized status tuples; use
    :meth:`set_status` / :meth:`set_eligibility` so the denormalized
    ``*_name`` columns stay in step.
    """

    uuid = models.UUIDField(default=uuid.uuid4, unique=True, editable=False)
    reference_id = models.CharField(max_length=20, unique=True, null=True, blank=True)
    guest = models.ForeignKey(Guest, on_delete=models.PROTECT, related_name="bookings")
    template = models.ForeignKey(
        BookingTemplate,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="bookings",
    )
    type = models.CharField(
        max_length=30,
        choices=BookingType.choices,
        default=BookingType.ENQUIRY,
    )
    status = models.TextField(default=default_status)
    status_name = models.CharField(
        max_length=30,
        choices=BookingStatus.choices,
        default=BookingStatus.ENQUIRY,
        db_index=True,
    )
    status_logs = models.JSONField(default=list, blank=True)
    eligibility = models.TextField(default=default_eligibility)
    eligibility_name = models.CharField(
        max_length=30,
        choices=EligibilityStatus.choices,
        default=EligibilityStatus.PENDING_ELIGIBILITY,
        db_index=True,
    )
    complete = models.BooleanField(default=False)
    metainfo = models.JSONField(default=default_metainfo, blank=True)
    preferred_arrival_date = models.DateField(null=True, blank=True)
    preferred_departure_date = models.DateField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"Booking {self.reference_id or self.uuid}"

    def get_status(self) -> StatusValue:
        return StatusValue.from_json(self.status)

    def set_status(self, value: StatusValue) -> None:
        self.status = value.to_json()
        self.status_name = value.name

    def get_eligibility(self) -> StatusValue:
        return StatusValue.from_json(self.eligibility)

    def set_eligibility(self, value: StatusValue) -> None:
        self.eligibility = value.to_json()
        self.eligibility_name = value.name

    def log_status(self, name: str) -> None:
        """Record ``name`` in the status history (merging a repeat)."""
        self.status_logs = append_status(self.status_logs, name)

    def qa_pairs(self):
        """All answers of this booking across its sections."""
        return QaPair.objects.filter(section__booking=self).select_related("section", "template_question")


class Section(TimeStampedModel):
    """Group of answers within a booking."""

    booking = models.ForeignKey(Booking, on_delete=models.CASCADE, related_name="sections")
    label = models.CharField(max_length=255, blank=True, default="")
    order = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["order"]

    def __str__(self):
        return self.label or f"Section {self.pk}"


class QaPair(TimeStampedModel):
    """An answered question within a section.

    Composite answers (radio, select, checkbox) are stored as JSON text.
    """

    section = models.ForeignKey(Section, on_delete=models.CASCADE, related_name="qa_pairs")
    template_question = models.ForeignKey(
        Question,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="answers",
    )
    question = models.TextField()
    answer = models.TextField(blank=True, default="")
    question_type = models.CharField(max_length=30, choices=QuestionType.choices, default=QuestionType.TEXT)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["section", "question"],
                name="unique_qa_pair_question_per_section",
            ),
        ]

    def __str__(self):
        return f"{self.question[:40]}: {self.answer[:40]}"


class AmendmentLog(TimeStampedModel):
    """A change to a booking made after it was complete.

    ``data`` holds the kind-specific payload (see ``log_data``);
    ``approved`` and ``change_key`` mirror parts of it so the database
    can enforce one pending entry per question.
    """

    booking = models.ForeignKey(Booking, on_delete=models.CASCADE, related_name="amendment_logs")
    kind = models.CharField(max_length=20, choices=LogKind.choices, default=LogKind.QA_PAIR)
    change_key = models.CharField(max_length=512)
    approved = models.BooleanField(default=False)
    data = models.JSONField(default=dict)

    class Meta:
        ordering = ["created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["booking", "change_key"],
                condition=models.Q(approved=False),
                name="unique_pending_amendment_per_question",
            ),
        ]

    def __str__(self):
        state = "approved" if self.approved else "pending"
        return f"{self.kind} amendment {self.change_key} ({state})"

    @property
    def payload(self) -> QaPairLogData:
        return parse_log_data(self.kind, self.data)

    def set_payload(self, payload: QaPairLogData) -> None:
        self.data = payload.to_dict()
        self.approved = payload.approved


# =============================================================================
# Equipment
# =============================================================================


class EquipmentType(models.TextChoices):
    INDEPENDENT = "independent", "Independent"
    GROUP = "group", "Group"


class Equipment(TimeStampedModel):
    """Item of equipment a guest can request."""

    name = models.CharField(max_length=255)
    category = models.CharField(max_length=100, db_index=True)
    equipment_type = models.CharField(
        max_length=20,
        choices=EquipmentType.choices,
        default=EquipmentType.INDEPENDENT,
    )

    def __str__(self):
        return self.name


class BookingEquipment(models.Model):
    booking = models.ForeignKey(Booking, on_delete=models.CASCADE, related_name="booking_equipment")
    equipment = models.ForeignKey(Equipment, on_delete=models.CASCADE, related_name="booking_links")

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["booking", "equipment"],
                name="unique_booking_equipment",
            ),
        ]

    def __str__(self):
        return f"{self.booking_id} -> {self.equipment_id}"


# =============================================================================
# Emails, settings and notifications
# =============================================================================


class EmailTemplate(TimeStampedModel):
    """Email content rendered with the Django template engine."""

    key = models.CharField(max_length=100, unique=True)
    subject = models.CharField(max_length=255)
    body_text = models.TextField()
    body_html = models.TextField(blank=True, default="")
    is_active = models.BooleanField(default=True)

    def __str__(self):
        return self.key


class TriggerType(models.TextChoices):
    INTERNAL = "internal", "Internal"
    EXTERNAL = "external", "External"


class EmailTrigger(TimeStampedModel):
    """Rule that sends a template when a booking answers certain questions.

    Attributes:
        email_template: Key of the EmailTemplate to send
        recipient: Address the email goes to
        trigger_type: internal (staff) or external (funder, coordinator, ...)
        trigger_questions: List of ``{"question": str, "answer": str | list}``
        enabled: Disabled triggers are ignored
    """

    email_template = models.CharField(max_length=100)
    recipient = models.EmailField(blank=True, default="")
    trigger_type = models.CharField(
        max_length=20,
        choices=TriggerType.choices,
        default=TriggerType.INTERNAL,
    )
    trigger_questions = models.JSONField(default=list, blank=True)
    enabled = models.BooleanField(default=True)

    def __str__(self):
        return f"{self.email_template} -> {self.recipient}"

    def has_question(self, question: str) -> bool:
        return any(item.get("question") == question for item in self.trigger_questions)

    def matches(self, question: str, answer) -> bool:
        """Whether an answer to ``question`` fires this trigger.

        A trigger question without an answer matches any answer; a list
        answer matches when it contains the given answer.
        """
        for item in self.trigger_questions:
            if item.get("question") != question:
                continue
            expected = item.get("answer")
            if expected in (None, ""):
                return True
            if isinstance(expected, list):
                if answer in expected:
                    return True
            elif expected == answer:
                return True
        return False


class Setting(TimeStampedModel):
    """Key/value application setting."""

    attribute = models.CharField(max_length=100, db_index=True)
    value = models.TextField(blank=True, default="")

    def __str__(self):
        return self.attribute


class AlertType(models.TextChoices):
    ADMIN = "admin", "Admin"
    GUEST = "guest", "Guest"


class NotificationLibrary(TimeStampedModel):
    """Notification template applied to bookings.

    ``notification`` may contain the placeholders ``[guest_name]``,
    ``[arrival_date]``, ``[booking_id]``, ``[has been]`` and ``[status]``.
    """

    name = models.CharField(max_length=255)
    notification = models.TextField()
    notification_to = models.CharField(max_length=255, blank=True, default="")
    alert_type = models.CharField(max_length=20, choices=AlertType.choices, default=AlertType.ADMIN)
    date_factor = models.IntegerField(default=0)
    enabled = models.BooleanField(default=True)

    class Meta:
        verbose_name_plural = "notification library"

    def __str__(self):
        return self.name


class Notification(TimeStampedModel):
    """In-app notification for a staff user or a guest."""

    message = models.TextField()
    link = models.CharField(max_length=500, blank=True, null=True)
    notifyee_content_type = models.ForeignKey(ContentType, on_delete=models.CASCADE)
    notifyee_id = models.CharField(max_length=64)
    notifyee = GenericForeignKey("notifyee_content_type", "notifyee_id")
    read = models.BooleanField(default=False)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["notifyee_content_type", "notifyee_id"], name="care_notification_notifyee_idx"),
        ]

    def __str__(self):
        return self.message[:50]


class BookingAuditEntry(models.Model):
    """Immutable record of a staff or system action on a booking."""

    booking = models.ForeignKey(Booking, on_delete=models.CASCADE, related_name="audit_entries")
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="care_booking_audit_entries",
    )
    actor_display = models.CharField(max_length=200, blank=True, default="")
    action = models.CharField(max_length=50, db_index=True)
    description = models.TextField(blank=True, default="")
    old_value = models.JSONField(null=True, blank=True)
    new_value = models.JSONField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.actor_display or 'System'} {self.action} booking {self.booking_id}"

    def save(self, *args, **kwargs):
        if self.pk and BookingAuditEntry.objects.filter(pk=self.pk).exists():
            raise ValueError("Audit entries are immutable and cannot be updated")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError("Audit entries are immutable and cannot be deleted")
