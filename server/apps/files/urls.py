"""URL routes for files app."""

from django.urls import path

from server.apps.files import views

app_name = 'files'

urlpatterns = [
    path(
        'api/files/upload/<str:entity_type>/<int:entity_id>/',
        views.upload_files,
        name='upload',
    ),
    path(
        'api/files/bulk-verify/',
        views.bulk_verify_files,
        name='bulk_verify',
    ),
    path(
        'api/files/entity/<str:entity_type>/<int:entity_id>/',
        views.entity_documents,
        name='entity_documents',
    ),
    path('api/files/<uuid:file_id>/', views.file_detail, name='detail'),
    path(
        'api/files/<uuid:file_id>/download/',
        views.download_file,
        name='download',
    ),
    path(
        'api/files/<uuid:file_id>/verify/',
        views.verify_file,
        name='verify',
    ),
    path('uploads/<path:storage_key>', views.serve_file, name='serve'),
]
