from unittest import mock

import pytest
from django.db import connection

from installer.secrets import Secrets
from installer.wizard import Installer

INSTALLED_TABLES = ("lti_", "app_", "user_tokens", "course_settings")


@pytest.fixture(autouse=True)
def keep_test_connection():
    """The wizard re-points the connection at freshly entered credentials; keep the test database instead."""
    with mock.patch("installer.wizard.configure_connection") as configure:
        yield configure


@pytest.fixture
def secrets_file(settings, tmp_path):
    settings.SECRETS_FILE = tmp_path / "secrets.xml"
    return settings.SECRETS_FILE


@pytest.fixture
def secrets():
    return Secrets(
        app_name="Canvas API via LTI starter",
        app_id="canvas-lti-via-api-starter",
        host="localhost",
        username="lti",
        password="s3cret",
        database="canvas_lti",
        oauth_id="10000000000001",
        oauth_key="oauth-client-key",
    )


@pytest.fixture
def written_secrets(secrets_file, secrets):
    secrets.write(secrets_file)
    return secrets


@pytest.fixture
def db_tables(transactional_db):
    """A database the wizard may create tables in; drops them again afterwards."""
    yield connection
    with connection.constraint_checks_disabled():
        with connection.cursor() as cursor:
            for table in connection.introspection.table_names(cursor):
                if table.startswith(INSTALLED_TABLES):
                    cursor.execute(f"DROP TABLE {connection.ops.quote_name(table)}")


@pytest.fixture
def installed(db_tables, written_secrets):
    """Schemas and metadata in place, as after the first pass of the wizard."""
    installer = Installer()
    installer.load_secrets()
    installer.create_lti_tables()
    installer.create_app_tables()
    return installer.init_app_metadata("https://testserver")
