from django.urls import path, include
from django.views.generic import RedirectView

urlpatterns = [
    path("admin/", include("installer.urls")),
    path("", RedirectView.as_view(pattern_name="install", permanent=False)),
]
