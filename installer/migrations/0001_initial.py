from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="AppMetadata",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("app", models.CharField(max_length=255)),
                ("key", models.CharField(max_length=255)),
                ("value", models.TextField(blank=True)),
                ("timestamp", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "app_metadata",
                "managed": False,
                "unique_together": {("app", "key")},
            },
        ),
    ]
