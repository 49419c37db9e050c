import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("sites", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Contact",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("email", models.EmailField(max_length=254)),
                ("name", models.CharField(blank=True, max_length=255)),
                ("phone", models.CharField(blank=True, max_length=50)),
                ("role", models.CharField(blank=True, max_length=255)),
                ("source_type", models.CharField(
                    choices=[
                        ("contact_page", "Contact Page"),
                        ("about_page", "About Page"),
                        ("team_page", "Team Page"),
                        ("header", "Header"),
                        ("footer", "Footer"),
                        ("body", "Body"),
                    ],
                    default="body",
                    max_length=20,
                )),
                ("source_url", models.URLField(blank=True, max_length=2048)),
                ("source_context", models.TextField(blank=True)),
                ("priority", models.PositiveSmallIntegerField(db_index=True, default=50)),
                ("is_validated", models.BooleanField(db_index=True, default=False)),
                ("is_valid", models.BooleanField(default=False)),
                ("validation_error", models.CharField(blank=True, max_length=500)),
                ("validated_at", models.DateTimeField(blank=True, null=True)),
                ("contacted", models.BooleanField(db_index=True, default=False)),
                ("first_contacted_at", models.DateTimeField(blank=True, null=True)),
                ("last_contacted_at", models.DateTimeField(blank=True, null=True)),
                ("contact_count", models.PositiveIntegerField(default=0)),
                ("site", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name="contacts",
                    to="sites.site",
                )),
            ],
            options={
                "ordering": ["-priority", "created_at"],
                "indexes": [
                    models.Index(fields=["site", "is_valid", "-priority"], name="contact_site_valid_idx"),
                    models.Index(fields=["email"], name="contact_email_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("site", "email"), name="unique_contact_per_site"),
                ],
            },
        ),
    ]
