# Copyright (c) 2013-2025 NASK. All rights reserved.

import collections.abc as collections_abc
import unittest.mock as mock

from bindspec.exceptions import BindingErrors


class TestCaseMixin(object):

    def assertEqualIncludingTypes(self, first, second, msg=None):
        self.assertEqual(first, second, msg=msg)
        if first is not mock.ANY and second is not mock.ANY:
            self.assertIs(type(first), type(second),
                          'type of {!a} ({}) is not type of {!a} ({})'
                          .format(first, type(first), second, type(second)))
        if (isinstance(first, collections_abc.Sequence)
              and not isinstance(first, (bytes, bytearray, str))):
            for val1, val2 in zip(first, second):
                self.assertEqualIncludingTypes(val1, val2)
        elif isinstance(first, collections_abc.Mapping):
            for key in first:
                self.assertEqualIncludingTypes(first[key], second[key])

    def assertBindingErrors(self, schema, data, expected_messages):
        """
        Check that applying `schema` to `data` raises `BindingErrors`
        containing exactly the given `'<field>: <message>'` strings (in
        the given order); return the exception.
        """
        with self.assertRaises(BindingErrors) as cm:
            schema.apply(data)
        self.assertEqual([str(e) for e in cm.exception], list(expected_messages))
        return cm.exception
