import logging
import re
from contextlib import contextmanager

from django.db import DatabaseError, connections

from .exceptions import InstallerError

logger = logging.getLogger(__name__)

CREATE_TABLE_RE = re.compile(
    r'CREATE\s+TABLE\s+(?:IF\s+NOT\s+EXISTS\s+)?(?:`([^`]+)`|"([^"]+)"|(\w+))',
    re.IGNORECASE,
)


def configure_connection(secrets, alias="default"):
    """
    Point an existing connection at freshly entered credentials.

    The settings module reads the secrets file once at startup; when the
    wizard writes the file mid-process the open connection still carries
    the old (empty) credentials.
    """
    connection = connections[alias]
    connection.close()
    connection.settings_dict.update({
        "HOST": secrets.host,
        "USER": secrets.username,
        "PASSWORD": secrets.password,
        "NAME": secrets.database,
    })
    logger.info("Database connection %r now uses %s@%s/%s", alias, secrets.username, secrets.host, secrets.database)


def split_statements(sql):
    """Split a schema file on semicolons, dropping `--` comment lines and blank statements."""
    lines = [line for line in sql.splitlines() if not line.strip().startswith("--")]
    statements = []
    for statement in "\n".join(lines).split(";"):
        statement = statement.strip()
        if statement:
            statements.append(statement)
    return statements


def created_table_name(statement):
    """Return the table a CREATE TABLE statement creates, or None for any other statement."""
    match = CREATE_TABLE_RE.search(statement)
    if not match:
        return None
    return next(group for group in match.groups() if group)


def table_names(connection):
    with connection.cursor() as cursor:
        return connection.introspection.table_names(cursor)


def table_exists(connection, name):
    return name in table_names(connection)


def execute(connection, statement):
    with connection.cursor() as cursor:
        cursor.execute(statement)


@contextmanager
def database_errors(message, code):
    """Turn database failures inside the block into an InstallerError reading "<message>: <db error>"."""
    try:
        yield
    except DatabaseError as exc:
        logger.error("%s: %s", message, exc)
        raise InstallerError(f"{message}: {exc}", code) from exc
