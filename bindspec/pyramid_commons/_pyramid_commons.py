# Copyright (c) 2013-2025 NASK. All rights reserved.

import json
import logging

from pyramid.httpexceptions import (
    HTTPException,
    HTTPBadRequest,
    HTTPServerError,
)

from bindspec.encoding_helpers import ascii_str
from bindspec.exceptions import (
    BindingError,
    BindingErrors,
    PayloadError,
)


LOGGER = logging.getLogger(__name__)



#
# Auxiliary constants

#: The maximum size (in bytes) of a JSON request body.
MAX_BODY_SIZE = 5 * 1024 * 1024

JSON_CONTENT_TYPE = 'application/json'
FORM_CONTENT_TYPE = 'application/x-www-form-urlencoded'



#
# Helper functions

def request_to_mapping(request):
    """
    Turn a Pyramid (WebOb) request into a payload mapping.

    * ``application/json`` requests: the body (at most
      :data:`MAX_BODY_SIZE` bytes) is decoded; it must be a JSON object;
    * ``application/x-www-form-urlencoded`` requests: the body's form
      fields (the URL query parameters are *not* included);
    * other requests: the URL query parameters.

    For form fields and query parameters, only the first value of each
    key is taken (later duplicates are discarded).

    Raises:
        :exc:`~bindspec.exceptions.PayloadError`.
    """
    content_type = request.content_type
    if content_type == JSON_CONTENT_TYPE:
        return _json_body_to_mapping(request)
    if content_type == FORM_CONTENT_TYPE:
        return _first_values(request.POST)
    return _first_values(request.GET)


def apply_request(schema, request):
    """
    Apply the given :class:`~bindspec.schema.Schema` to the payload
    obtained from the given request (see: :func:`request_to_mapping`).

    Returns:
        The resultant :class:`~bindspec.schema.SchemaRun`.

    Raises:
        :exc:`~bindspec.exceptions.PayloadError`,
        :exc:`~bindspec.exceptions.BindingErrors` (or other exceptions
        raised by :meth:`~bindspec.schema.Schema.apply`).
    """
    return schema.apply(request_to_mapping(request))


def exc_to_http_exc(exc):
    """
    Takes any :exc:`~exceptions.Exception` instance, returns a
    :exc:`pyramid.httpexceptions.HTTPException` instance.
    """
    if isinstance(exc, HTTPException):
        code = getattr(exc, 'code', None)
        if isinstance(code, int) and 200 <= code < 500:
            LOGGER.debug(
                'HTTPException: %r ("%s", code: %s)',
                exc, ascii_str(exc), code)
        else:
            LOGGER.error(
                'HTTPException: %r ("%s", code: %r)',
                exc, ascii_str(exc), code,
                exc_info=True)
        http_exc = exc
    elif isinstance(exc, BindingErrors):
        LOGGER.debug(
            'Request data not valid: %r (public message: "%s")',
            exc, ascii_str(exc.public_message))
        http_exc = HTTPBadRequest(exc.public_message)
    elif isinstance(exc, PayloadError):
        LOGGER.debug(
            'Request payload not valid: %r (public message: "%s")',
            exc, ascii_str(exc.public_message))
        http_exc = HTTPBadRequest(exc.public_message)
    else:
        if isinstance(exc, BindingError):
            LOGGER.error(
                '%r (public message: "%s")',
                exc, ascii_str(exc.public_message),
                exc_info=True)
        else:
            LOGGER.error(
                'Non-HTTPException/BindingError exception: %r',
                exc,
                exc_info=True)
        http_exc = HTTPServerError()
    return http_exc



#
# Non-public helpers

def _json_body_to_mapping(request):
    body = request.body_file.read(MAX_BODY_SIZE + 1)
    if len(body) > MAX_BODY_SIZE:
        raise PayloadError(public_message='request body too large (more than {} bytes)'.format(
            MAX_BODY_SIZE))
    try:
        data = json.loads(body)
    except ValueError as exc:
        raise PayloadError(
            public_message='failed to decode request body: {}'.format(ascii_str(exc))) from exc
    if not isinstance(data, dict):
        raise PayloadError(public_message='request body is not a JSON object')
    return data


def _first_values(params):
    mapping = {}
    for key, value in params.items():
        mapping.setdefault(key, value)
    return mapping
