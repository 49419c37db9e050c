from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="RequirementSet",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True)),
                ("is_active", models.BooleanField(db_index=True, default=True)),
                ("priority", models.IntegerField(default=0, help_text="Higher wins when several sets match")),
                ("criteria", models.JSONField(
                    blank=True,
                    default=dict,
                    help_text="min_pages, max_pages, min_word_count, max_word_count, platforms, "
                              "blocked_platforms, required_keywords, excluded_keywords, required_urls",
                )),
            ],
            options={
                "verbose_name": "Requirement Set",
                "verbose_name_plural": "Requirement Sets",
                "ordering": ["-priority", "name"],
            },
        ),
    ]
