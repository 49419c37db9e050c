import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("qualification", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Site",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("domain", models.CharField(max_length=255, unique=True)),
                ("title", models.CharField(blank=True, max_length=500)),
                ("status", models.CharField(
                    choices=[
                        ("pending", "Pending"),
                        ("crawling", "Crawling"),
                        ("completed", "Completed"),
                        ("failed", "Failed"),
                        ("per_review", "Per Review"),
                    ],
                    db_index=True,
                    default="pending",
                    max_length=20,
                )),
                ("crawl_attempts", models.PositiveIntegerField(default=0)),
                ("crawl_started_at", models.DateTimeField(blank=True, null=True)),
                ("crawl_finished_at", models.DateTimeField(blank=True, null=True)),
                ("last_crawl_error", models.TextField(blank=True)),
                ("snapshot_pages", models.JSONField(
                    blank=True,
                    default=list,
                    help_text="Fetched pages as [{url, content}], homepage first",
                )),
                ("page_count", models.PositiveIntegerField(default=0)),
                ("word_count", models.PositiveIntegerField(default=0)),
                ("detected_platform", models.CharField(blank=True, max_length=50, null=True)),
                ("is_qualified", models.BooleanField(db_index=True, default=False)),
                ("match_details", models.JSONField(
                    blank=True,
                    default=dict,
                    help_text="Per requirement set evaluation detail",
                )),
                ("evaluated_at", models.DateTimeField(blank=True, null=True)),
                ("matched_requirement", models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name="matched_sites",
                    to="qualification.requirementset",
                )),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["status", "crawl_started_at"], name="site_status_crawl_idx"),
                    models.Index(fields=["is_qualified", "status"], name="site_qualified_status_idx"),
                ],
            },
        ),
    ]
