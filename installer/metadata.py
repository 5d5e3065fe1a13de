import json
import logging
from collections.abc import MutableMapping

from django.db import connections

from .database import table_exists
from .models import AppMetadata

logger = logging.getLogger(__name__)


def prepare_database(using="default"):
    """Create the app_metadata table. Returns True if it was created, False if it already existed."""
    connection = connections[using]
    if table_exists(connection, AppMetadata._meta.db_table):
        return False
    with connection.schema_editor() as editor:
        editor.create_model(AppMetadata)
    logger.info("Created %s table", AppMetadata._meta.db_table)
    return True


class AppMetadataStore(MutableMapping):
    """
    Dict-like access to the metadata rows of one app.

    Values are stored JSON-encoded, so strings, numbers and small dicts
    (e.g. the Canvas user that owns the admin token) all round trip.
    """

    def __init__(self, app_id, using="default"):
        self.app_id = app_id
        self.using = using

    def _rows(self):
        return AppMetadata.objects.using(self.using).filter(app=self.app_id)

    def __getitem__(self, key):
        try:
            row = self._rows().get(key=key)
        except AppMetadata.DoesNotExist:
            raise KeyError(key) from None
        try:
            return json.loads(row.value)
        except ValueError:
            return row.value

    def __setitem__(self, key, value):
        AppMetadata.objects.using(self.using).update_or_create(
            app=self.app_id,
            key=key,
            defaults={"value": json.dumps(value)},
        )

    def __delitem__(self, key):
        deleted, _ = self._rows().filter(key=key).delete()
        if not deleted:
            raise KeyError(key)

    def __iter__(self):
        return iter(list(self._rows().order_by("key").values_list("key", flat=True)))

    def __len__(self):
        return self._rows().count()

    def __repr__(self):
        return f"<AppMetadataStore app_id={self.app_id!r}>"
