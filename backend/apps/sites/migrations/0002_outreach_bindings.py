import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("sites", "0001_initial"),
        ("outreach", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="site",
            name="email_template",
            field=models.ForeignKey(
                blank=True,
                null=True,
                on_delete=django.db.models.deletion.SET_NULL,
                related_name="sites",
                to="outreach.emailtemplate",
            ),
        ),
        migrations.AddField(
            model_name="site",
            name="send_account",
            field=models.ForeignKey(
                blank=True,
                help_text="Preferred account; rotation falls back to any account with capacity",
                null=True,
                on_delete=django.db.models.deletion.SET_NULL,
                related_name="sites",
                to="outreach.sendaccount",
            ),
        ),
    ]
