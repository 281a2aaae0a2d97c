# Copyright (c) 2013-2025 NASK. All rights reserved.

import json
import unittest
from unittest.mock import (
    ANY,
    call,
    patch,
)

from pyramid.httpexceptions import (
    HTTPBadRequest,
    HTTPForbidden,
    HTTPServerError,
)
from pyramid.request import Request

from bindspec.exceptions import (
    BindingError,
    BindingErrors,
    FieldError,
    PayloadError,
    ValidationError,
)
from bindspec.pyramid_commons import (
    MAX_BODY_SIZE,
    apply_request,
    exc_to_http_exc,
    request_to_mapping,
)
from bindspec.schema import (
    Schema,
    ValueField,
)
from bindspec.validators import (
    Min,
    Required,
)


def json_request(body):
    if not isinstance(body, bytes):
        body = json.dumps(body).encode('utf-8')
    return Request.blank('/?ignored=1', method='POST',
                         content_type='application/json', body=body)


class Test_request_to_mapping(unittest.TestCase):

    def test_json(self):
        request = json_request({'name': 'John', 'tags': ['a'], 'age': 30})
        self.assertEqual(request_to_mapping(request),
                         {'name': 'John', 'tags': ['a'], 'age': 30})

    def test_json_not_an_object(self):
        with self.assertRaises(PayloadError) as cm:
            request_to_mapping(json_request([1, 2]))
        self.assertEqual(cm.exception.public_message, 'request body is not a JSON object')

    def test_json_malformed(self):
        with self.assertRaises(PayloadError) as cm:
            request_to_mapping(json_request(b'{"name": '))
        self.assertTrue(cm.exception.public_message.startswith('failed to decode request body: '))

    def test_json_body_too_large(self):
        body = b'{"a": "' + b'x' * MAX_BODY_SIZE + b'"}'
        with self.assertRaises(PayloadError) as cm:
            request_to_mapping(json_request(body))
        self.assertEqual(
            cm.exception.public_message,
            'request body too large (more than {} bytes)'.format(MAX_BODY_SIZE))

    def test_form(self):
        request = Request.blank('/?c=3', POST=[('a', '1'), ('b', '2'), ('a', '5')])
        self.assertEqual(request_to_mapping(request), {'a': '1', 'b': '2'})

    def test_query(self):
        request = Request.blank('/?a=1&b=x&a=2')
        self.assertEqual(request_to_mapping(request), {'a': '1', 'b': 'x'})

    def test_query_bracketed_keys(self):
        request = Request.blank('/?users%5B1%5D%5Bname%5D=John')
        self.assertEqual(request_to_mapping(request), {'users[1][name]': 'John'})


class Test_apply_request(unittest.TestCase):

    def setUp(self):
        self.schema = Schema(
            ValueField('name', str, validators=[Required()]),
            ValueField('age', int, validators=[Min(18)]))

    def test_json(self):
        run = apply_request(self.schema, json_request({'name': 'John', 'age': 30}))
        self.assertEqual(run.values, {'name': 'John', 'age': 30})

    def test_query(self):
        run = apply_request(self.schema, Request.blank('/?name=John&age=30'))
        self.assertEqual(run.values, {'name': 'John', 'age': 30})

    def test_errors(self):
        with self.assertRaises(BindingErrors) as cm:
            apply_request(self.schema, Request.blank('/', POST={'age': '3'}))
        self.assertEqual(str(cm.exception),
                         'name: field is required; age: value must be at least 18')


@patch('bindspec.pyramid_commons._pyramid_commons.LOGGER')
class Test_exc_to_http_exc(unittest.TestCase):

    def test_http_exc_4xx(self, LOGGER):
        exc = HTTPForbidden()
        http_exc = exc_to_http_exc(exc)
        self.assertIs(http_exc, exc)
        self.assertEqual(LOGGER.mock_calls, [call.debug(ANY, exc, ANY, 403)])

    def test_http_exc_5xx(self, LOGGER):
        exc = HTTPServerError()
        http_exc = exc_to_http_exc(exc)
        self.assertIs(http_exc, exc)
        self.assertEqual(LOGGER.mock_calls, [call.error(ANY, exc, ANY, 500, exc_info=True)])

    def test_binding_errors(self, LOGGER):
        exc = BindingErrors([
            FieldError('age', None, ValidationError(public_message='too small')),
        ])
        http_exc = exc_to_http_exc(exc)
        self.assertIsInstance(http_exc, HTTPBadRequest)
        self.assertEqual(http_exc.detail, 'age: too small')
        self.assertEqual(LOGGER.mock_calls, [call.debug(ANY, exc, 'age: too small')])

    def test_payload_error(self, LOGGER):
        exc = PayloadError(public_message='request body is not a JSON object')
        http_exc = exc_to_http_exc(exc)
        self.assertIsInstance(http_exc, HTTPBadRequest)
        self.assertEqual(http_exc.detail, 'request body is not a JSON object')
        self.assertEqual(LOGGER.mock_calls, [
            call.debug(ANY, exc, 'request body is not a JSON object'),
        ])

    def test_other_binding_error(self, LOGGER):
        exc = BindingError(public_message='spam')
        http_exc = exc_to_http_exc(exc)
        self.assertIsInstance(http_exc, HTTPServerError)
        self.assertEqual(LOGGER.mock_calls, [call.error(ANY, exc, 'spam', exc_info=True)])

    def test_other_error(self, LOGGER):
        exc = ZeroDivisionError()
        http_exc = exc_to_http_exc(exc)
        self.assertIsInstance(http_exc, HTTPServerError)
        self.assertEqual(LOGGER.mock_calls, [call.error(ANY, exc, exc_info=True)])
