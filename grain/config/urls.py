"""
URL configuration for the Grain backend.

Every app mounts its endpoints under ``api/v1/``; the Django admin lives
under ``admin/``.
"""
from django.contrib import admin
from django.urls import path, include, re_path
from django.conf import settings
from django.views.static import serve

admin.site.site_header = "Grain Workshop Admin"
admin.site.site_title = "Grain Admin Portal"
admin.site.index_title = "Workshop inventory and projects"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('grain.core.urls')),
    path('api/v1/', include('grain.inventory.urls')),
    path('api/v1/', include('grain.projects.urls')),
    path('api/v1/', include('grain.reports.urls')),
    re_path(r'^media/(?P<path>.*)$', serve, {'document_root': settings.MEDIA_ROOT}),
    re_path(r'^static/(?P<path>.*)$', serve, {'document_root': settings.STATIC_ROOT}),
]
