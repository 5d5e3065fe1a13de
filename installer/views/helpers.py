from django.urls import get_script_prefix


def request_param(request, name, default=None):
    """POST value first, then the query string."""
    if name in request.POST:
        return request.POST[name]
    return request.GET.get(name, default)


def is_truthy(value):
    if value is None:
        return False
    return str(value).strip().lower() not in ("", "0", "false", "no", "off")


def app_url(request):
    """Public https URL of the app root, without a trailing slash."""
    return f"https://{request.get_host()}{get_script_prefix().rstrip('/')}"
