import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("sites", "0001_initial"),
        ("contacts", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="EmailTemplate",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=255)),
                ("subject_template", models.CharField(max_length=500)),
                ("body_template", models.TextField()),
                ("preheader", models.CharField(blank=True, max_length=255)),
                ("is_active", models.BooleanField(db_index=True, default=True)),
                ("usage_count", models.PositiveIntegerField(default=0)),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="SendAccount",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=255)),
                ("host", models.CharField(max_length=255)),
                ("port", models.PositiveIntegerField(default=587)),
                ("use_tls", models.BooleanField(default=True)),
                ("username", models.CharField(blank=True, max_length=255)),
                ("credentials_key", models.CharField(
                    blank=True,
                    help_text="Key to look up the SMTP password in LEADMAILER_SMTP_CREDENTIALS",
                    max_length=100,
                )),
                ("from_address", models.EmailField(max_length=254)),
                ("from_name", models.CharField(blank=True, max_length=255)),
                ("daily_limit", models.PositiveIntegerField(default=100)),
                ("hourly_limit", models.PositiveIntegerField(default=20)),
                ("emails_sent_today", models.PositiveIntegerField(default=0)),
                ("emails_sent_this_hour", models.PositiveIntegerField(default=0)),
                ("hour_window_started_at", models.DateTimeField(blank=True, null=True)),
                ("last_reset_date", models.DateField(blank=True, null=True)),
                ("priority", models.IntegerField(default=10, help_text="Lower is preferred")),
                ("is_active", models.BooleanField(db_index=True, default=True)),
                ("success_count", models.PositiveIntegerField(default=0)),
                ("failure_count", models.PositiveIntegerField(default=0)),
                ("last_used_at", models.DateTimeField(blank=True, null=True)),
            ],
            options={
                "ordering": ["priority", "name"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("emails_sent_today__lte", models.F("daily_limit"))),
                        name="send_account_daily_quota",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("emails_sent_this_hour__lte", models.F("hourly_limit"))),
                        name="send_account_hourly_quota",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="ReviewItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("subject", models.CharField(max_length=500)),
                ("body", models.TextField()),
                ("preheader", models.CharField(blank=True, max_length=255)),
                ("status", models.CharField(
                    choices=[
                        ("pending", "Pending"),
                        ("approved", "Approved"),
                        ("rejected", "Rejected"),
                        ("sent", "Sent"),
                        ("failed", "Failed"),
                    ],
                    db_index=True,
                    default="pending",
                    max_length=20,
                )),
                ("priority", models.PositiveSmallIntegerField(default=50)),
                ("reviewed_at", models.DateTimeField(blank=True, null=True)),
                ("review_notes", models.TextField(blank=True)),
                ("claimed_at", models.DateTimeField(blank=True, null=True)),
                ("send_attempts", models.PositiveSmallIntegerField(default=0)),
                ("failure_reason", models.TextField(blank=True)),
                ("sent_at", models.DateTimeField(blank=True, null=True)),
                ("contact", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name="review_items",
                    to="contacts.contact",
                )),
                ("reviewed_by", models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name="reviewed_items",
                    to=settings.AUTH_USER_MODEL,
                )),
                ("send_account", models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name="review_items",
                    to="outreach.sendaccount",
                )),
                ("site", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name="review_items",
                    to="sites.site",
                )),
                ("template", models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name="review_items",
                    to="outreach.emailtemplate",
                )),
            ],
            options={
                "ordering": ["-priority", "created_at"],
                "indexes": [
                    models.Index(fields=["status", "-priority", "created_at"], name="review_status_priority_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("site", "contact"), name="unique_review_item_per_contact"),
                ],
            },
        ),
        migrations.CreateModel(
            name="SentRecord",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("recipient_email", models.EmailField(db_index=True, max_length=254)),
                ("recipient_name", models.CharField(blank=True, max_length=255)),
                ("subject", models.CharField(max_length=500)),
                ("body", models.TextField()),
                ("status", models.CharField(
                    choices=[("sent", "Sent"), ("failed", "Failed"), ("bounced", "Bounced")],
                    db_index=True,
                    max_length=20,
                )),
                ("error_message", models.TextField(blank=True)),
                ("sent_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ("contact", models.ForeignKey(
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name="sent_records",
                    to="contacts.contact",
                )),
                ("review_item", models.ForeignKey(
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name="sent_records",
                    to="outreach.reviewitem",
                )),
                ("send_account", models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name="sent_records",
                    to="outreach.sendaccount",
                )),
                ("site", models.ForeignKey(
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name="sent_records",
                    to="sites.site",
                )),
                ("template", models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name="sent_records",
                    to="outreach.emailtemplate",
                )),
            ],
            options={
                "ordering": ["-sent_at"],
                "indexes": [
                    models.Index(fields=["contact", "status", "sent_at"], name="sent_contact_status_idx"),
                    models.Index(fields=["site", "status", "sent_at"], name="sent_site_status_idx"),
                ],
            },
        ),
    ]
