"""Root URL configuration."""

from django.contrib import admin
from django.urls import include, path

admin.site.site_header = 'Recruitment back office'

urlpatterns = [
    path('admin/', admin.site.urls),
    path('', include('server.apps.files.urls')),
]
