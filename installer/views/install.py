from ..exceptions import InstallerError
from ..wizard import (
    API_DECISION_NEEDED_STEP,
    SECRETS_ENTERED_STEP,
    Installer,
    is_installed,
    parse_step,
)
from .helpers import app_url, is_truthy, request_param


def install(request):
    step = parse_step(request_param(request, "step"))
    installer = Installer(request)

    # test if we already have a working install...
    if step is None and is_installed(installer.secrets_file, installer.using):
        installer.append_message("App already installed.")
        return installer.render("installer/messages.html")

    created_secrets = False
    try:
        # ...otherwise, start with the secrets file
        if not installer.secrets_file.exists():
            if step != SECRETS_ENTERED_STEP:
                return installer.create_secrets_file()
            installer.create_secrets_file(SECRETS_ENTERED_STEP, request.POST)
            created_secrets = True
            step = None
        else:
            installer.load_secrets()

        if step is None:
            # load the schemas, initialize the metadata, then offer an admin token
            installer.create_lti_tables()
            installer.create_app_tables()
            installer.init_app_metadata(app_url(request))
            response = installer.acquire_api_token(API_DECISION_NEEDED_STEP)
        else:
            installer.open_metadata()
            skip = is_truthy(request_param(request, "skip"))
            response = installer.acquire_api_token(step, skip)
    except InstallerError as exc:
        installer.append_message(str(exc))
        # credentials that do not work should be asked for again
        if created_secrets:
            installer.discard_secrets_file()
        return installer.render("installer/messages.html", {"failed": True})

    if response is not None:
        return response

    installer.append_message("Installation complete.")
    return installer.render("installer/messages.html")
