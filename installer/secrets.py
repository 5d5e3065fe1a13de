"""
Reading and writing the installer's secrets file.

The file is a small XML document holding the app identity, the MySQL
credentials and the Canvas OAuth client credentials:

    <secrets>
      <app><name/><id/></app>
      <mysql><host/><username/><password/><database/></mysql>
      <oauth><id/><key/></oauth>
    </secrets>

This module is imported from the settings module, so it must not touch
Django models or connections.
"""

import xml.etree.ElementTree as ET
from pathlib import Path


class Secrets:
    def __init__(self, app_name, app_id, host, username, password, database,
                 oauth_id="", oauth_key=""):
        self.app_name = app_name
        self.app_id = app_id
        self.host = host
        self.username = username
        self.password = password
        self.database = database
        self.oauth_id = oauth_id
        self.oauth_key = oauth_key

    @classmethod
    def load(cls, path):
        root = ET.parse(path).getroot()

        def text(xpath):
            return (root.findtext(xpath) or "").strip()

        return cls(
            app_name=text("app/name"),
            app_id=text("app/id"),
            host=text("mysql/host"),
            username=text("mysql/username"),
            password=text("mysql/password"),
            database=text("mysql/database"),
            oauth_id=text("oauth/id"),
            oauth_key=text("oauth/key"),
        )

    def to_xml(self):
        secrets = ET.Element("secrets")

        app = ET.SubElement(secrets, "app")
        ET.SubElement(app, "name").text = self.app_name
        ET.SubElement(app, "id").text = self.app_id

        mysql = ET.SubElement(secrets, "mysql")
        ET.SubElement(mysql, "host").text = self.host
        ET.SubElement(mysql, "username").text = self.username
        ET.SubElement(mysql, "password").text = self.password
        ET.SubElement(mysql, "database").text = self.database

        oauth = ET.SubElement(secrets, "oauth")
        ET.SubElement(oauth, "id").text = self.oauth_id
        ET.SubElement(oauth, "key").text = self.oauth_key

        return ET.ElementTree(secrets)

    def write(self, path):
        """Write the secrets file. Raises OSError if it cannot be written."""
        self.to_xml().write(str(path), encoding="utf-8", xml_declaration=True)

    def database_settings(self):
        return {
            "ENGINE": "django.db.backends.mysql",
            "HOST": self.host,
            "USER": self.username,
            "PASSWORD": self.password,
            "NAME": self.database,
            "OPTIONS": {"charset": "utf8mb4"},
        }

    def __repr__(self):
        return f"<Secrets app_id={self.app_id!r} host={self.host!r} database={self.database!r}>"


def database_settings(path):
    """
    Build DATABASES["default"] from the secrets file at `path`.

    Before installation there is no secrets file (a file that does not parse
    counts as none); the MySQL backend is still configured, without
    credentials, so the connection can be pointed at the new credentials once
    the wizard has collected them.
    """
    path = Path(path)
    if path.exists():
        try:
            return Secrets.load(path).database_settings()
        except ET.ParseError:
            # the wizard reports the unreadable file; the site itself stays up
            pass
    return {
        "ENGINE": "django.db.backends.mysql",
        "NAME": "",
        "OPTIONS": {"charset": "utf8mb4"},
    }
