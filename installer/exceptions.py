from enum import IntEnum


class ErrorCode(IntEnum):
    SECRETS_NEEDED_STEP = 0
    SECRETS_FILE_CREATION = 1
    SECRETS_FILE_APP = 2
    SECRETS_FILE_MYSQL = 3
    LTI_SCHEMA = 4
    LTI_PREPARE_DATABASE = 5
    LTI_CREATE_TABLE = 6
    APP_SCHEMA = 7
    APP_PREPARE_DATABASE = 8
    APP_CREATE_TABLE = 9
    API_STEP_MISMATCH = 10
    API_TOKEN = 11


class InstallerError(Exception):
    """Raised by an install step; the wizard reports it and stops."""

    def __init__(self, message, code):
        super().__init__(message)
        self.message = message
        self.code = ErrorCode(code)

    def __str__(self):
        return f"{self.message} [Error {int(self.code)}]"
