# Copyright (c) 2013-2025 NASK. All rights reserved.

import unittest

from unittest_expander import (
    expand,
    foreach,
    param,
)

from bindspec.exceptions import (
    BindingConfigError,
    FieldValueError,
)
from bindspec.transformers import (
    Capitalize,
    CustomTransformer,
    SanitizeEmail,
    TitleCase,
    ToLower,
    ToUpper,
    TrimSpace,
    apply_transformers,
)


@expand
class TestTransformers(unittest.TestCase):

    @foreach([
        param(ToUpper(), 'abc Def', 'ABC DEF'),
        param(ToLower(), 'ABC Def', 'abc def'),
        param(TrimSpace(), ' \t abc \n', 'abc'),
        param(TrimSpace(), '', ''),
        param(TitleCase(), 'hello WORLD', 'Hello World'),
        param(Capitalize(), 'hELLO World', 'Hello world'),
        param(Capitalize(), 'x', 'X'),
        param(SanitizeEmail(), ' John.Smith@Example.COM\n', 'john.smith@example.com'),
        param(CustomTransformer(len), 'abc', 3),
    ])
    def test(self, transformer, value, expected):
        self.assertEqual(transformer(value), expected)

    @foreach([ToUpper(), ToLower(), TrimSpace(), TitleCase(), Capitalize(), SanitizeEmail()])
    def test_str_required(self, transformer):
        with self.assertRaises(FieldValueError) as cm:
            transformer(42)
        self.assertEqual(
            str(cm.exception),
            '{} transformer requires a str value, not int'.format(type(transformer).__name__))

    def test_custom_not_callable(self):
        with self.assertRaises(BindingConfigError):
            CustomTransformer('upper')


class Test_apply_transformers(unittest.TestCase):

    def test_order(self):
        self.assertEqual(
            apply_transformers([TrimSpace(), str.title, lambda s: s + '!'], '  ala ma kota '),
            'Ala Ma Kota!')

    def test_first_failure_aborts(self):
        calls = []

        def failing(value):
            raise ValueError('nope')

        def recording(value):
            calls.append(value)
            return value

        with self.assertRaises(ValueError):
            apply_transformers([recording, failing, recording], 'x')
        self.assertEqual(calls, ['x'])
