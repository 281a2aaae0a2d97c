# Copyright (c) 2013-2025 NASK. All rights reserved.

"""
Glue between Pyramid (WebOb) requests and the binding engine.
"""


from bindspec.pyramid_commons._pyramid_commons import (
    MAX_BODY_SIZE,

    apply_request,
    exc_to_http_exc,
    request_to_mapping,
)


__all__ = [
    'MAX_BODY_SIZE',

    'apply_request',
    'exc_to_http_exc',
    'request_to_mapping',
]
