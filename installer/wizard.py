"""
The install wizard.

Each public method of `Installer` is one provisioning step. Steps that need
more input from the person installing return an HttpResponse holding a form;
all others return None and record their outcome with `append_message`.
Failures are raised as `InstallerError` and reported by the view.
"""

import logging
import xml.etree.ElementTree as ET
from pathlib import Path

from django.conf import settings
from django.db import DatabaseError, connections
from django.shortcuts import render
from django.urls import reverse

from .database import (
    configure_connection,
    created_table_name,
    database_errors,
    execute,
    split_statements,
    table_exists,
    table_names,
)
from .exceptions import ErrorCode, InstallerError
from .metadata import AppMetadataStore, prepare_database
from .models import AppMetadata
from .oauth import OAuthNegotiator, revoke_token
from .secrets import Secrets

logger = logging.getLogger(__name__)

SECRETS_NEEDED_STEP = 0
SECRETS_ENTERED_STEP = 1
API_DECISION_NEEDED_STEP = 2
API_DECISION_ENTERED_STEP = 3

LTI_TABLE_PREFIX = "lti_"
LTI_TABLE_COUNT = 5

DEFAULT_APP_NAME = "Canvas API via LTI starter"
DEFAULT_APP_ID = "canvas-lti-via-api-starter"
DEFAULT_HOST = "localhost"

APP_FIELDS = ("name", "id")
MYSQL_FIELDS = ("host", "username", "password", "database")


def parse_step(value):
    """Step flags arrive as strings; anything that is not an integer is kept as-is and rejected later."""
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return value


def is_installed(secrets_file=None, using=None):
    secrets_file = Path(secrets_file or settings.SECRETS_FILE)
    using = using or settings.INSTALLER_DATABASE
    if not secrets_file.exists():
        return False
    try:
        secrets = Secrets.load(secrets_file)
        if not table_exists(connections[using], AppMetadata._meta.db_table):
            return False
        return "APP_URL" in AppMetadataStore(secrets.app_id, using=using)
    except ET.ParseError as exc:
        logger.warning("Could not read %s: %s", secrets_file, exc)
        return False
    except DatabaseError as exc:
        logger.warning("Could not check installation state: %s", exc)
        return False


class Installer:
    def __init__(self, request=None, secrets_file=None, using=None):
        self.request = request
        self.secrets_file = Path(secrets_file or settings.SECRETS_FILE)
        self.using = using or settings.INSTALLER_DATABASE
        self.messages = []
        self.secrets = None
        self.metadata = None

    @property
    def connection(self):
        return connections[self.using]

    def append_message(self, message):
        """Append another message to the output of the install wizard (HTML is fine)."""
        logger.info("%s", message)
        self.messages.append(message)

    def render(self, template_name, context=None):
        ctx = {"install_messages": self.messages}
        ctx.update(context or {})
        return render(self.request, template_name, ctx)

    def load_secrets(self):
        try:
            self.secrets = Secrets.load(self.secrets_file)
        except ET.ParseError as exc:
            logger.error("Reading %s failed: %s", self.secrets_file, exc)
            raise InstallerError(
                f"Failed to read {self.secrets_file}: {exc}",
                ErrorCode.SECRETS_FILE_CREATION,
            ) from exc
        return self.secrets

    def discard_secrets_file(self):
        """Remove a secrets file so the wizard asks for the credentials again."""
        self.secrets_file.unlink(missing_ok=True)
        self.secrets = None
        self.append_message("Secrets file removed, please enter the database credentials again.")

    # ============================================================
    # Secrets file
    # ============================================================
    def create_secrets_file(self, step=SECRETS_NEEDED_STEP, data=None):
        if step == SECRETS_NEEDED_STEP:
            return self.render("installer/secrets_form.html", {
                "step": SECRETS_ENTERED_STEP,
                "default_name": DEFAULT_APP_NAME,
                "default_id": DEFAULT_APP_ID,
                "default_host": DEFAULT_HOST,
            })

        if step == SECRETS_ENTERED_STEP:
            data = data if data is not None else {}
            if not all(field in data for field in APP_FIELDS):
                raise InstallerError(
                    "Missing a required app identity (name and id both required).",
                    ErrorCode.SECRETS_FILE_APP,
                )
            if not all(field in data for field in MYSQL_FIELDS):
                raise InstallerError(
                    "Missing a required mysql credential (host, username, password and database all required).",
                    ErrorCode.SECRETS_FILE_MYSQL,
                )

            secrets = Secrets(
                app_name=data["name"],
                app_id=data["id"],
                host=data["host"],
                username=data["username"],
                password=data["password"],
                database=data["database"],
                oauth_id=data.get("oauth_id", ""),
                oauth_key=data.get("oauth_key", ""),
            )
            try:
                secrets.write(self.secrets_file)
            except OSError as exc:
                logger.error("Writing %s failed: %s", self.secrets_file, exc)
                raise InstallerError(
                    f"Failed to create {self.secrets_file}",
                    ErrorCode.SECRETS_FILE_CREATION,
                ) from exc

            self.secrets = secrets
            configure_connection(secrets, alias=self.using)
            self.append_message("Secrets file created.")
            return None

        raise InstallerError(
            f"Unknown step ({step}) in SECRETS_FILE creation.",
            ErrorCode.SECRETS_NEEDED_STEP,
        )

    # ============================================================
    # Database schemas
    # ============================================================
    def create_lti_tables(self, schema_file=None):
        """Create the tables backing the LTI tool provider."""
        schema_file = Path(schema_file or settings.LTI_SCHEMA_FILE)

        with database_errors("Error creating LTI database tables", ErrorCode.LTI_PREPARE_DATABASE):
            existing = [t for t in table_names(self.connection) if t.startswith(LTI_TABLE_PREFIX)]
            if len(existing) >= LTI_TABLE_COUNT:
                self.append_message("LTI database tables already exist")
                return

            if not schema_file.exists():
                raise InstallerError(f"{schema_file} not found.", ErrorCode.LTI_SCHEMA)

            for statement in split_statements(schema_file.read_text(encoding="utf-8")):
                execute(self.connection, statement)

        self.append_message("LTI database tables created.")

    def create_app_tables(self, schema_file=None):
        """Create the app's own tables, skipping any that already exist."""
        schema_file = Path(schema_file or settings.SCHEMA_FILE)

        if not schema_file.exists():
            self.append_message("No app database schema found.")
            return

        created = True
        for statement in split_statements(schema_file.read_text(encoding="utf-8")):
            table_name = created_table_name(statement)
            if table_name:
                with database_errors("Error creating app database tables", ErrorCode.APP_PREPARE_DATABASE):
                    exists = table_exists(self.connection, table_name)
                if exists:
                    created = False
                    continue
                code = ErrorCode.APP_CREATE_TABLE
            else:
                code = ErrorCode.APP_PREPARE_DATABASE

            with database_errors("Error creating app database tables", code):
                execute(self.connection, statement)

        if created:
            self.append_message("App database tables created.")
        else:
            self.append_message("App database tables already exist.")

    # ============================================================
    # App metadata
    # ============================================================
    def open_metadata(self):
        if self.secrets is None:
            self.load_secrets()
        self.metadata = AppMetadataStore(self.secrets.app_id, using=self.using)
        return self.metadata

    def init_app_metadata(self, app_url):
        """Initialize the metadata store, especially APP_PATH and APP_URL."""
        with database_errors("Error initializing app metadata", ErrorCode.APP_PREPARE_DATABASE):
            if prepare_database(using=self.using):
                self.append_message("App metadata database tables created.")
            else:
                self.append_message("App metadata database tables already exist.")

            metadata = self.open_metadata()
            metadata["APP_PATH"] = str(settings.BASE_DIR)
            metadata["APP_URL"] = app_url.rstrip("/")
            if "CANVAS_INSTANCE_URL_PLACEHOLDER" not in metadata:
                metadata["CANVAS_INSTANCE_URL_PLACEHOLDER"] = settings.CANVAS_INSTANCE_URL_PLACEHOLDER

        self.append_message("App metadata initialized.")
        return metadata

    # ============================================================
    # Canvas API token
    # ============================================================
    def acquire_api_token(self, step=API_DECISION_NEEDED_STEP, skip=False):
        metadata = self.metadata if self.metadata is not None else self.open_metadata()

        if skip:
            with database_errors("Error expunging admin Canvas API token information", ErrorCode.API_TOKEN):
                stored = "CANVAS_API_TOKEN" in metadata or "CANVAS_API_USER" in metadata
                if stored:
                    token = metadata.get("CANVAS_API_TOKEN")
                    instance_url = metadata.get("CANVAS_INSTANCE_URL")
                    if token and instance_url:
                        try:
                            revoke_token(instance_url, token)
                        except InstallerError as exc:
                            logger.warning("Could not revoke admin Canvas API token: %s", exc.message)
                    metadata.pop("CANVAS_API_TOKEN", None)
                    metadata.pop("CANVAS_API_USER", None)

            if stored:
                self.append_message("Existing admin Canvas API token information expunged.")
            else:
                self.append_message("No admin Canvas API token acquired.")
            return None

        if step == API_DECISION_NEEDED_STEP:
            with database_errors("Error reading app metadata", ErrorCode.API_TOKEN):
                instance_url = metadata.get("CANVAS_INSTANCE_URL", "")
                placeholder = metadata.get("CANVAS_INSTANCE_URL_PLACEHOLDER", settings.CANVAS_INSTANCE_URL_PLACEHOLDER)
            return self.render("installer/api_decision.html", {
                "step": API_DECISION_ENTERED_STEP,
                "oauth_url": reverse("oauth_start"),
                "install_url": reverse("install"),
                "instance_url": instance_url,
                "instance_url_placeholder": placeholder,
            })

        if step == API_DECISION_ENTERED_STEP:
            oauth = OAuthNegotiator(self.request.session) if self.request is not None else None
            if oauth is not None and oauth.is_api_token():
                with database_errors("Error storing admin Canvas API token", ErrorCode.API_TOKEN):
                    metadata["CANVAS_API_TOKEN"] = oauth.get_token()
                    metadata["CANVAS_API_USER"] = oauth.get_user()
                oauth.clear()
                self.append_message("Admin Canvas API token acquired.")
            return None

        raise InstallerError(
            f"Unknown step ({step}) in obtaining API token.",
            ErrorCode.API_STEP_MISMATCH,
        )
