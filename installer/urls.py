from django.urls import path
from . import views

urlpatterns = [
    path("install/", views.install, name="install"),

    # Admin Canvas API token (OAuth2)
    path("oauth/", views.oauth_start, name="oauth_start"),
    path("oauth/callback/", views.oauth_callback, name="oauth_callback"),
]
