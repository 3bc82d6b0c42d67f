"""JSON HTTP endpoints for the file registry.

Views only decode requests and encode results; every decision is made
by ``FileRegistry``.
"""

import json
import logging
from collections.abc import Callable
from functools import wraps
from typing import Any, Final

from django.http import (
    HttpRequest,
    HttpResponse,
    HttpResponseRedirect,
    JsonResponse,
)
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods

from server.apps.files.exceptions import InvalidInputError, RegistryError
from server.apps.files.logic.registry import get_registry

logger = logging.getLogger(__name__)

CREDENTIAL_HEADER: Final = 'X-Upload-Token'

_STATUS_BY_KIND: Final = {
    'unauthorized': 401,
    'invalid_input': 400,
    'not_found': 404,
    'access_denied': 403,
    'storage_failure': 502,
    'partial_failure': 500,
    'notification_failure': 502,
}

_View = Callable[..., HttpResponse]


def _error_response(error: RegistryError) -> JsonResponse:
    return JsonResponse(
        {'error': {'kind': error.kind, 'message': error.message}},
        status=_STATUS_BY_KIND.get(error.kind, 500),
    )


def registry_errors(view: _View) -> _View:
    """Turn registry errors raised by a view into JSON error responses.

    Args:
        view: View function.

    Returns:
        Wrapped view.
    """
    @wraps(view)
    def wrapper(request: HttpRequest, *args: Any, **kwargs: Any) -> HttpResponse:
        try:
            return view(request, *args, **kwargs)
        except RegistryError as error:
            logger.info(
                '%s %s failed: %s',
                request.method,
                request.path,
                error.kind,
            )
            return _error_response(error)
    return wrapper


def _credential(request: HttpRequest) -> str | None:
    return request.headers.get(CREDENTIAL_HEADER)


def _json_body(request: HttpRequest) -> dict[str, Any]:
    try:
        payload = json.loads(request.body or b'{}')
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise InvalidInputError('Request body must be valid JSON') from exc
    if not isinstance(payload, dict):
        raise InvalidInputError('Request body must be a JSON object')
    return payload


@require_GET
def health(request: HttpRequest) -> HttpResponse:
    """Liveness check."""
    return HttpResponse('File registry is live', content_type='text/plain')


@csrf_exempt
@require_http_methods(['POST'])
@registry_errors
def upload(request: HttpRequest) -> HttpResponse:
    """Accept a multipart upload with title, description, tags and type."""
    uploaded = request.FILES.get('file')
    visibility = request.POST.get('visibility') or request.POST.get('type')
    file_record = get_registry().upload(
        title=request.POST.get('title', ''),
        description=request.POST.get('description', ''),
        tags=request.POST.get('tags', ''),
        visibility=visibility,
        content=uploaded,
        credential=_credential(request),
    )
    return JsonResponse(
        {'message': 'File uploaded', 'file_id': file_record.id},
        status=201,
    )


@require_GET
@registry_errors
def public_files(request: HttpRequest) -> HttpResponse:
    """List public files, newest first."""
    summaries = get_registry().list_public()
    return JsonResponse([summary.as_dict() for summary in summaries], safe=False)


@require_GET
@registry_errors
def search_files(request: HttpRequest) -> HttpResponse:
    """Search titles and tags with the ``q`` parameter."""
    summaries = get_registry().search(request.GET.get('q', ''))
    return JsonResponse([summary.as_dict() for summary in summaries], safe=False)


@csrf_exempt
@require_http_methods(['POST'])
@registry_errors
def request_file(request: HttpRequest) -> HttpResponse:
    """Ask the administrator for access to a private file."""
    payload = _json_body(request)
    access_request = get_registry().request_access(
        payload.get('file_id'),
        payload.get('requester'),
        payload.get('reason', ''),
    )
    return JsonResponse(
        {'message': 'Request sent successfully', 'request_id': access_request.id},
        status=201,
    )


@require_GET
@registry_errors
def download_file(request: HttpRequest, file_id: int) -> HttpResponse:
    """Redirect to the stored bytes of a public file."""
    return HttpResponseRedirect(get_registry().download(file_id))


@csrf_exempt
@require_http_methods(['DELETE'])
@registry_errors
def delete_file(request: HttpRequest, file_id: int) -> HttpResponse:
    """Delete a file; requires the upload credential."""
    registry = get_registry()
    registry.authorize(_credential(request))
    registry.delete(file_id)
    return JsonResponse({'message': 'File deleted', 'file_id': file_id})
