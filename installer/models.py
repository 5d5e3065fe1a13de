from django.db import models


class AppMetadata(models.Model):
    """
    Key/value metadata for an installed app, keyed by the app id from the
    secrets file.

    The table is created by the install wizard (see metadata.prepare_database)
    rather than by migrations, since the database only exists once the
    wizard has collected its credentials.
    """
    app = models.CharField(max_length=255)
    key = models.CharField(max_length=255)
    value = models.TextField(blank=True)
    timestamp = models.DateTimeField(auto_now=True)

    class Meta:
        managed = False
        db_table = "app_metadata"
        unique_together = ("app", "key")

    def __str__(self):
        return f"{self.app}: {self.key}"
