import xml.etree.ElementTree as ET

from installer.secrets import Secrets, database_settings


def test_write_then_load(tmp_path, secrets):
    path = tmp_path / "secrets.xml"
    secrets.write(path)

    loaded = Secrets.load(path)
    assert loaded.app_name == "Canvas API via LTI starter"
    assert loaded.app_id == "canvas-lti-via-api-starter"
    assert loaded.host == "localhost"
    assert loaded.username == "lti"
    assert loaded.password == "s3cret"
    assert loaded.database == "canvas_lti"
    assert loaded.oauth_id == "10000000000001"
    assert loaded.oauth_key == "oauth-client-key"


def test_file_layout(tmp_path, secrets):
    path = tmp_path / "secrets.xml"
    secrets.write(path)

    root = ET.parse(path).getroot()
    assert root.tag == "secrets"
    assert [child.tag for child in root] == ["app", "mysql", "oauth"]
    assert root.findtext("mysql/database") == "canvas_lti"
    assert root.findtext("oauth/key") == "oauth-client-key"


def test_load_tolerates_missing_oauth(tmp_path):
    path = tmp_path / "secrets.xml"
    path.write_text(
        "<secrets><app><name>App</name><id>app</id></app>"
        "<mysql><host>db</host><username>u</username><password>p</password>"
        "<database>d</database></mysql><oauth /></secrets>"
    )
    loaded = Secrets.load(path)
    assert loaded.host == "db"
    assert loaded.oauth_id == ""
    assert loaded.oauth_key == ""


def test_database_settings_from_file(tmp_path, secrets):
    path = tmp_path / "secrets.xml"
    secrets.write(path)

    db = database_settings(path)
    assert db["ENGINE"] == "django.db.backends.mysql"
    assert db["HOST"] == "localhost"
    assert db["USER"] == "lti"
    assert db["PASSWORD"] == "s3cret"
    assert db["NAME"] == "canvas_lti"


def test_database_settings_before_install(tmp_path):
    db = database_settings(tmp_path / "missing.xml")
    assert db["ENGINE"] == "django.db.backends.mysql"
    assert db["NAME"] == ""


def test_database_settings_with_unreadable_file(tmp_path):
    path = tmp_path / "secrets.xml"
    path.write_text("<secrets><mysql>")

    db = database_settings(path)
    assert db["ENGINE"] == "django.db.backends.mysql"
    assert db["NAME"] == ""
