from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="BlockEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("type", models.CharField(
                    choices=[("email", "Email"), ("domain", "Domain")],
                    db_index=True,
                    max_length=10,
                )),
                ("value", models.CharField(help_text="Lower-cased e-mail address or domain", max_length=255)),
                ("reason", models.CharField(blank=True, max_length=500)),
                ("source", models.CharField(
                    choices=[("manual", "Manual"), ("imported", "Imported"), ("auto", "Auto-detected")],
                    default="manual",
                    max_length=20,
                )),
                ("is_active", models.BooleanField(db_index=True, default=True)),
            ],
            options={
                "verbose_name": "Block Entry",
                "verbose_name_plural": "Block Entries",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["type", "value", "is_active"], name="blockentry_lookup_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("type", "value"), name="unique_block_entry"),
                ],
            },
        ),
    ]
