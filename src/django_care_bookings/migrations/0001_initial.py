import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

import django_care_bookings.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("contenttypes", "0002_remove_content_type_name"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="BookingTemplate",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=255)),
            ],
            options={"abstract": False},
        ),
        migrations.CreateModel(
            name="EmailTemplate",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("key", models.CharField(max_length=100, unique=True)),
                ("subject", models.CharField(max_length=255)),
                ("body_text", models.TextField()),
                ("body_html", models.TextField(blank=True, default="")),
                ("is_active", models.BooleanField(default=True)),
            ],
            options={"abstract": False},
        ),
        migrations.CreateModel(
            name="EmailTrigger",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("email_template", models.CharField(max_length=100)),
                ("recipient", models.EmailField(blank=True, default="", max_length=254)),
                (
                    "trigger_type",
                    models.CharField(
                        choices=[("internal", "Internal"), ("external", "External")],
                        default="internal",
                        max_length=20,
                    ),
                ),
                ("trigger_questions", models.JSONField(blank=True, default=list)),
                ("enabled", models.BooleanField(default=True)),
            ],
            options={"abstract": False},
        ),
        migrations.CreateModel(
            name="Equipment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=255)),
                ("category", models.CharField(db_index=True, max_length=100)),
                (
                    "equipment_type",
                    models.CharField(
                        choices=[("independent", "Independent"), ("group", "Group")],
                        default="independent",
                        max_length=20,
                    ),
                ),
            ],
            options={"abstract": False},
        ),
        migrations.CreateModel(
            name="Guest",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("first_name", models.CharField(max_length=100)),
                ("last_name", models.CharField(blank=True, default="", max_length=100)),
                ("email", models.EmailField(max_length=254, unique=True)),
                ("active", models.BooleanField(default=False)),
            ],
            options={"abstract": False},
        ),
        migrations.CreateModel(
            name="NotificationLibrary",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=255)),
                ("notification", models.TextField()),
                ("notification_to", models.CharField(blank=True, default="", max_length=255)),
                (
                    "alert_type",
                    models.CharField(
                        choices=[("admin", "Admin"), ("guest", "Guest")],
                        default="admin",
                        max_length=20,
                    ),
                ),
                ("date_factor", models.IntegerField(default=0)),
                ("enabled", models.BooleanField(default=True)),
            ],
            options={"verbose_name_plural": "notification library"},
        ),
        migrations.CreateModel(
            name="ReferenceCounter",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("scope", models.CharField(max_length=50, unique=True)),
                ("current_value", models.PositiveBigIntegerField(default=0)),
            ],
        ),
        migrations.CreateModel(
            name="Setting",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("attribute", models.CharField(db_index=True, max_length=100)),
                ("value", models.TextField(blank=True, default="")),
            ],
            options={"abstract": False},
        ),
        migrations.CreateModel(
            name="Booking",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("deleted_at", models.DateTimeField(blank=True, null=True)),
                ("uuid", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ("reference_id", models.CharField(blank=True, max_length=20, null=True, unique=True)),
                (
                    "type",
                    models.CharField(
                        choices=[
                            ("Enquiry", "Enquiry"),
                            ("First-Time Guest", "First-Time Guest"),
                            ("Returning Guest", "Returning Guest"),
                        ],
                        default="Enquiry",
                        max_length=30,
                    ),
                ),
                ("status", models.TextField(default=django_care_bookings.models.default_status)),
                (
                    "status_name",
                    models.CharField(
                        choices=[
                            ("enquiry", "Enquiry"),
                            ("pending_approval", "Pending Approval"),
                            ("ready_to_process", "Ready to Process"),
                            ("in_progress", "In Progress"),
                            ("on_hold", "On Hold"),
                            ("booking_amended", "Amendment Requested"),
                            ("booking_confirmed", "Booking Confirmed"),
                            ("booking_cancelled", "Booking Cancelled"),
                            ("guest_cancelled", "Guest Cancelled"),
                        ],
                        db_index=True,
                        default="enquiry",
                        max_length=30,
                    ),
                ),
                ("status_logs", models.JSONField(blank=True, default=list)),
                ("eligibility", models.TextField(default=django_care_bookings.models.default_eligibility)),
                (
                    "eligibility_name",
                    models.CharField(
                        choices=[
                            ("pending_eligibility", "Pending Eligibility"),
                            ("eligible", "Eligible"),
                            ("ineligible", "Not Eligible"),
                        ],
                        db_index=True,
                        default="pending_eligibility",
                        max_length=30,
                    ),
                ),
                ("complete", models.BooleanField(default=False)),
                ("metainfo", models.JSONField(blank=True, default=django_care_bookings.models.default_metainfo)),
                ("preferred_arrival_date", models.DateField(blank=True, null=True)),
                ("preferred_departure_date", models.DateField(blank=True, null=True)),
                (
                    "guest",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="bookings",
                        to="care_bookings.guest",
                    ),
                ),
                (
                    "template",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="bookings",
                        to="care_bookings.bookingtemplate",
                    ),
                ),
            ],
            options={"ordering": ["-created_at"]},
        ),
        migrations.CreateModel(
            name="Question",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("section_label", models.CharField(blank=True, default="", max_length=255)),
                ("order", models.PositiveIntegerField(default=0)),
                ("question", models.TextField()),
                ("question_key", models.CharField(blank=True, db_index=True, default="", max_length=100)),
                ("question_type", models.CharField(choices=django_care_bookings.models.QuestionType.choices, max_length=30)),
                ("required", models.BooleanField(default=False)),
                ("second_booking_only", models.BooleanField(default=False)),
                ("ndis_only", models.BooleanField(default=False)),
                ("options", models.JSONField(blank=True, default=list)),
                (
                    "template",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="questions",
                        to="care_bookings.bookingtemplate",
                    ),
                ),
            ],
            options={"ordering": ["order"]},
        ),
        migrations.CreateModel(
            name="QuestionDependency",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("answer", models.TextField()),
                (
                    "dependence",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="dependents",
                        to="care_bookings.question",
                    ),
                ),
                (
                    "question",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="dependencies",
                        to="care_bookings.question",
                    ),
                ),
            ],
        ),
        migrations.CreateModel(
            name="Section",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("label", models.CharField(blank=True, default="", max_length=255)),
                ("order", models.PositiveIntegerField(default=0)),
                (
                    "booking",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="sections",
                        to="care_bookings.booking",
                    ),
                ),
            ],
            options={"ordering": ["order"]},
        ),
        migrations.CreateModel(
            name="QaPair",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("question", models.TextField()),
                ("answer", models.TextField(blank=True, default="")),
                (
                    "question_type",
                    models.CharField(
                        choices=django_care_bookings.models.QuestionType.choices,
                        default="text",
                        max_length=30,
                    ),
                ),
                (
                    "section",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="qa_pairs",
                        to="care_bookings.section",
                    ),
                ),
                (
                    "template_question",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="answers",
                        to="care_bookings.question",
                    ),
                ),
            ],
            options={
                "constraints": [
                    models.UniqueConstraint(
                        fields=("section", "question"),
                        name="unique_qa_pair_question_per_section",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="AmendmentLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "kind",
                    models.CharField(
                        choices=[("qa_pair", "Question/Answer"), ("equipment", "Equipment")],
                        default="qa_pair",
                        max_length=20,
                    ),
                ),
                ("change_key", models.CharField(max_length=512)),
                ("approved", models.BooleanField(default=False)),
                ("data", models.JSONField(default=dict)),
                (
                    "booking",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="amendment_logs",
                        to="care_bookings.booking",
                    ),
                ),
            ],
            options={
                "ordering": ["created_at"],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("approved", False)),
                        fields=("booking", "change_key"),
                        name="unique_pending_amendment_per_question",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="BookingEquipment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "booking",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="booking_equipment",
                        to="care_bookings.booking",
                    ),
                ),
                (
                    "equipment",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="booking_links",
                        to="care_bookings.equipment",
                    ),
                ),
            ],
            options={
                "constraints": [
                    models.UniqueConstraint(fields=("booking", "equipment"), name="unique_booking_equipment")
                ],
            },
        ),
        migrations.CreateModel(
            name="Notification",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("message", models.TextField()),
                ("link", models.CharField(blank=True, max_length=500, null=True)),
                ("notifyee_id", models.CharField(max_length=64)),
                ("read", models.BooleanField(default=False)),
                (
                    "notifyee_content_type",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        to="contenttypes.contenttype",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["notifyee_content_type", "notifyee_id"],
                        name="care_notification_notifyee_idx",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="BookingAuditEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("actor_display", models.CharField(blank=True, default="", max_length=200)),
                ("action", models.CharField(db_index=True, max_length=50)),
                ("description", models.TextField(blank=True, default="")),
                ("old_value", models.JSONField(blank=True, null=True)),
                ("new_value", models.JSONField(blank=True, null=True)),
                (
                    "actor",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="care_booking_audit_entries",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "booking",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="audit_entries",
                        to="care_bookings.booking",
                    ),
                ),
            ],
            options={"ordering": ["-created_at"]},
        ),
    ]
