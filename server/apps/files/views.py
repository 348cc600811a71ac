"""HTTP endpoints for documents.

All endpoints answer JSON ``{"status": "success", "data": ...}`` or
``{"status": "error", "message": ...}``, except the download and serve
endpoints which stream the file itself.
"""

import json
import logging
from collections.abc import Callable
from functools import wraps
from typing import Any

from django.conf import settings
from django.core.files.uploadedfile import UploadedFile
from django.db.models import TextChoices
from django.http import (
    FileResponse,
    HttpRequest,
    HttpResponse,
    JsonResponse,
)
from django.views.decorators.http import (
    require_GET,
    require_http_methods,
    require_POST,
)

from server.apps.accounts.decorators import login_required_json, require_roles
from server.apps.accounts.logic.token_store import get_token_store
from server.apps.accounts.models import REVIEWER_ROLES
from server.apps.accounts.principal import Principal
from server.apps.files.choices import AccessLevel, EntityType, FileCategory
from server.apps.files.exceptions import (
    AuthenticationRequiredError,
    FileRecordNotFoundError,
    FileServiceError,
    InvalidInputError,
    InvalidUploadError,
    UploadRateLimitedError,
)
from server.apps.files.logic.file_operations import (
    authorize_read,
    get_entity_documents,
    get_file,
    get_live_record,
    open_file,
    upload_multiple,
    upload_single,
    validate_upload,
)
from server.apps.files.logic.owners import owner_exists
from server.apps.files.logic.review_operations import (
    bulk_verify,
    verify_document,
)
from server.apps.files.logic.trash_operations import delete_file
from server.apps.files.models import FileRecord
from server.apps.files.serializers import serialize_file_record

logger = logging.getLogger(__name__)

_View = Callable[..., HttpResponse]


def _success(data: Any, status: int = 200) -> JsonResponse:
    return JsonResponse({'status': 'success', 'data': data}, status=status)


def handle_file_errors(view: _View) -> _View:
    """Translate file service errors into JSON error responses."""

    @wraps(view)
    def wrapper(
        request: HttpRequest,
        *args: Any,
        **kwargs: Any,
    ) -> HttpResponse:
        try:
            return view(request, *args, **kwargs)
        except FileServiceError as exc:
            logger.info(
                '%s %s failed with %d: %s',
                request.method,
                request.path,
                exc.status_code,
                exc,
            )
            return JsonResponse(
                {'status': 'error', 'message': str(exc)},
                status=exc.status_code,
            )

    return wrapper


def _choice(value: str, choices: type[TextChoices], field: str) -> str:
    """Reject values outside a closed enumeration.

    Raises:
        InvalidInputError: If value is not one of choices.
    """
    if value not in choices.values:
        raise InvalidInputError(f'Invalid {field}: {value}')
    return value


def _json_body(request: HttpRequest) -> dict[str, Any]:
    try:
        body = json.loads(request.body or b'{}')
    except json.JSONDecodeError as exc:
        raise InvalidInputError('Malformed JSON body') from exc
    if not isinstance(body, dict):
        raise InvalidInputError('JSON body must be an object')
    return body


def _check_upload_rate(user_id: int) -> None:
    result = get_token_store().check_rate_limit(
        f'upload:{user_id}',
        limit=getattr(settings, 'FILES_UPLOAD_RATE_LIMIT', 100),
        window=getattr(settings, 'FILES_UPLOAD_RATE_WINDOW', 3600),
    )
    if not result.allowed:
        raise UploadRateLimitedError()


def _files_by_field(request: HttpRequest) -> dict[str, UploadedFile]:
    """Key every uploaded file by a unique field name.

    Repeated fields keep all their files: the second file sent as
    ``certificate`` becomes ``certificate_1``, and so on.
    """
    files_by_field: dict[str, UploadedFile] = {}
    for field_name, uploaded_files in request.FILES.lists():
        for uploaded_file in uploaded_files:
            key = field_name
            suffix = 0
            while key in files_by_field:
                suffix += 1
                key = f'{field_name}_{suffix}'
            files_by_field[key] = uploaded_file
    return files_by_field


@require_POST
@login_required_json
@handle_file_errors
def upload_files(
    request: HttpRequest,
    entity_type: str,
    entity_id: int,
) -> HttpResponse:
    """Upload one or more files for an entity.

    Every file of every multipart field is stored. A ``category`` form
    value applies to single-file uploads; otherwise the category is
    derived from each field name.
    """
    _choice(entity_type, EntityType, 'entity type')
    access_level = _choice(
        request.POST.get('access_level', AccessLevel.INTERNAL),
        AccessLevel,
        'access level',
    )
    category = request.POST.get('category')
    if category:
        _choice(category, FileCategory, 'category')

    if not owner_exists(entity_type, entity_id):
        raise FileRecordNotFoundError(f'{entity_type} not found')

    _check_upload_rate(request.user.pk)

    files_by_field = _files_by_field(request)
    if not files_by_field:
        raise InvalidUploadError('No files were uploaded')
    for uploaded_file in files_by_field.values():
        validate_upload(uploaded_file)

    if category:
        if len(files_by_field) != 1:
            raise InvalidInputError(
                'A category can only be given for a single file',
            )
        field_name, uploaded_file = next(iter(files_by_field.items()))
        records = {
            field_name: upload_single(
                uploaded_file,
                entity_type,
                entity_id,
                request.user,
                category=category,
                access_level=access_level,
            ),
        }
    else:
        records = upload_multiple(
            files_by_field,
            entity_type,
            entity_id,
            request.user,
            access_level=access_level,
        )

    return _success(
        {
            field_name: serialize_file_record(record)
            for field_name, record in records.items()
        },
        status=201,
    )


@require_http_methods(['GET', 'DELETE'])
@login_required_json
@handle_file_errors
def file_detail(request: HttpRequest, file_id: Any) -> HttpResponse:
    """Read a file's metadata and access URL, or soft delete it."""
    principal = Principal.from_user(request.user)
    if request.method == 'DELETE':
        delete_file(file_id, principal)
        return HttpResponse(status=204)

    access = get_file(file_id, principal)
    data = serialize_file_record(access.record)
    data['url'] = access.url
    data['expires_in'] = access.expires_in
    return _success(data)


@require_GET
@login_required_json
@handle_file_errors
def download_file(request: HttpRequest, file_id: Any) -> HttpResponse:
    """Stream a file as an attachment."""
    record = get_live_record(file_id)
    authorize_read(record, Principal.from_user(request.user))
    return FileResponse(
        open_file(record),
        as_attachment=True,
        filename=record.original_name,
        content_type=record.mime_type,
    )


@require_http_methods(['POST', 'PATCH'])
@require_roles(*REVIEWER_ROLES)
@handle_file_errors
def verify_file(request: HttpRequest, file_id: Any) -> HttpResponse:
    """Approve or reject a document.

    Body: ``{"status": "approved" | "rejected", "notes": "..."}``.
    """
    body = _json_body(request)
    record = verify_document(
        file_id,
        Principal.from_user(request.user),
        str(body.get('status', '')),
        notes=str(body.get('notes', '')),
    )
    return _success(serialize_file_record(record))


@require_POST
@require_roles(*REVIEWER_ROLES)
@handle_file_errors
def bulk_verify_files(request: HttpRequest) -> HttpResponse:
    """Approve or reject many documents.

    Body: ``{"file_ids": [...], "status": "approved" | "rejected"}``.
    """
    body = _json_body(request)
    file_ids = body.get('file_ids')
    if not isinstance(file_ids, list):
        raise InvalidInputError('file_ids must be a list')
    modified = bulk_verify(
        file_ids,
        Principal.from_user(request.user),
        str(body.get('status', '')),
    )
    return _success({'modified': modified})


@require_GET
@login_required_json
@handle_file_errors
def entity_documents(
    request: HttpRequest,
    entity_type: str,
    entity_id: int,
) -> HttpResponse:
    """List live documents of an entity, optionally by category."""
    _choice(entity_type, EntityType, 'entity type')
    category = request.GET.get('category')
    if category:
        _choice(category, FileCategory, 'category')

    records = get_entity_documents(entity_type, entity_id, category)
    return _success([serialize_file_record(record) for record in records])


@require_GET
@handle_file_errors
def serve_file(request: HttpRequest, storage_key: str) -> HttpResponse:
    """Stream a stored file inline by its storage key.

    Anonymous callers may only read public files. Everyone else goes
    through the read policy.
    """
    record = FileRecord.objects.filter(storage_key=storage_key).first()
    if record is None:
        raise FileRecordNotFoundError()

    principal = Principal.from_user(request.user)
    is_public = record.access_level == AccessLevel.PUBLIC
    if not principal.is_authenticated and not is_public:
        raise AuthenticationRequiredError()
    authorize_read(record, principal)

    return FileResponse(
        open_file(record),
        filename=record.original_name,
        content_type=record.mime_type,
    )
