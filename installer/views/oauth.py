from urllib.parse import urlencode

from django.http import HttpResponseBadRequest
from django.shortcuts import redirect
from django.urls import reverse
from django.views.decorators.http import require_GET, require_POST

from ..database import database_errors
from ..exceptions import ErrorCode, InstallerError
from ..oauth import OAuthNegotiator, normalize_instance_url
from ..wizard import API_DECISION_ENTERED_STEP, Installer


# ============================================================
# Step 1: send the installer to Canvas to authorize the app
# ============================================================
@require_POST
def oauth_start(request):
    url = normalize_instance_url(request.POST.get("url"))
    if not url:
        return HttpResponseBadRequest("Missing Canvas instance URL")

    installer = Installer(request)
    if not installer.secrets_file.exists():
        return redirect("install")

    try:
        secrets = installer.load_secrets()
        metadata = installer.open_metadata()
        with database_errors("Error storing the Canvas instance URL", ErrorCode.API_TOKEN):
            metadata["CANVAS_INSTANCE_URL"] = url
    except InstallerError as exc:
        installer.append_message(str(exc))
        return installer.render("installer/messages.html", {"failed": True})

    oauth = OAuthNegotiator(
        request.session,
        instance_url=url,
        client_id=secrets.oauth_id,
        client_secret=secrets.oauth_key,
        redirect_uri=request.build_absolute_uri(reverse("oauth_callback")),
    )
    return redirect(oauth.authorize_url(purpose=secrets.app_name))


# ============================================================
# Step 2: Canvas sends us back with a code to exchange
# ============================================================
@require_GET
def oauth_callback(request):
    installer = Installer(request)
    if not installer.secrets_file.exists():
        return redirect("install")

    try:
        error = request.GET.get("error")
        if error:
            description = request.GET.get("error_description") or error
            raise InstallerError(f"Canvas did not authorize the token request: {description}", ErrorCode.API_TOKEN)

        secrets = installer.load_secrets()
        oauth = OAuthNegotiator(
            request.session,
            client_id=secrets.oauth_id,
            client_secret=secrets.oauth_key,
        )
        oauth.exchange(request.GET.get("code"), request.GET.get("state"))
    except InstallerError as exc:
        installer.append_message(str(exc))
        return installer.render("installer/messages.html", {"failed": True})

    return redirect(f"{reverse('install')}?{urlencode({'step': API_DECISION_ENTERED_STEP})}")
