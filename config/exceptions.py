"""
Project-wide DRF exception handler.

Every error leaves the API as ``{"message": ..., "errors": ..., "code": ...}``
so API clients only need to read ``message`` to classify a failure
(the token refresh logic in ``apps.client`` depends on it).
"""

from rest_framework.views import exception_handler


def api_exception_handler(exc, context):
    response = exception_handler(exc, context)
    if response is None:
        return None

    data = response.data
    body = {}

    if isinstance(data, dict) and 'detail' in data:
        detail = data['detail']
        body['message'] = str(detail)
        code = data.get('code') or getattr(detail, 'code', None)
        if code:
            body['code'] = str(code)
    elif isinstance(data, dict):
        # Field validation errors
        body['message'] = 'Validation failed'
        body['errors'] = data
    elif isinstance(data, list):
        body['message'] = str(data[0]) if data else 'Request failed'
        body['errors'] = data
    else:
        body['message'] = str(data)

    response.data = body
    return response
