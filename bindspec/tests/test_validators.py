# Copyright (c) 2013-2025 NASK. All rights reserved.

import unittest

from unittest_expander import (
    expand,
    foreach,
    param,
)

from bindspec.exceptions import (
    BindingConfigError,
    BindingErrors,
    ValidationError,
)
from bindspec.nullable import (
    NullInt,
    NullString,
)
from bindspec.schema import (
    Schema,
    SliceField,
    ValueField,
)
from bindspec.validators import (
    URL,
    Each,
    Email,
    FieldEquals,
    HasKeys,
    In,
    Max,
    MaxLength,
    Min,
    MinLength,
    NotEmpty,
    Required,
    Unique,
    UniqueBy,
    Validator,
    ValidatorFunc,
    When,
    WithMapKeys,
)


def check_even(value, field_name):
    if value % 2:
        raise ValueError('{} is odd'.format(value))


@expand
class TestValidators__ok(unittest.TestCase):

    @foreach([
        param(NotEmpty(), 'x'),
        param(NotEmpty(), 0),
        param(NotEmpty(), False),
        param(NotEmpty(), [0]),
        param(Min(18), 18),
        param(Min(18), 18.5),
        param(Min(0.5), 1),
        param(Max(120), 120),
        param(Max(1.5), -3),
        param(MinLength(2), 'ab'),
        param(MinLength(2), {'a': 1, 'b': 2}),
        param(MinLength(2), 42),
        param(MaxLength(2), ''),
        param(MaxLength(2), (1, 2)),
        param(Email(), 'john.smith+tag@mail.example.org'),
        param(Email(), ''),
        param(URL(), 'http://example.com'),
        param(URL(), 'https://example.com/a?b=c'),
        param(URL(), ''),
        param(In('a', 'b'), 'b'),
        param(In(1, 2), 2),
        param(Each(Min(0)), [0, 1, 2]),
        param(Each(Min(0)), []),
        param(Unique(), ['a', 'b']),
        param(Unique(), [[1], [2]]),
        param(Unique(), {'a': 1, 'b': 2}),
        param(UniqueBy(len), ['a', 'bb']),
        param(HasKeys('a'), {'a': None}),
        param(WithMapKeys(), {}),
        param(ValidatorFunc(check_even), 4),
        param(ValidatorFunc(check_even, value_type=int), 6),
    ])
    def test(self, validator, value):
        validator.validate(value, 'field')

    @foreach([
        Min(1),
        Max(1),
        MinLength(1),
        MaxLength(1),
        Email(),
        URL(),
        In('a'),
        Each(Min(1)),
        Unique(),
        UniqueBy(len),
        HasKeys('a'),
        ValidatorFunc(check_even, value_type=int),
    ])
    def test_none_accepted(self, validator):
        validator.validate(None, 'field')


@expand
class TestValidators__errors(unittest.TestCase):

    @foreach([
        param(NotEmpty(), None, 'field is required'),
        param(NotEmpty(), '', 'value cannot be empty'),
        param(NotEmpty(), [], 'value cannot be empty'),
        param(NotEmpty(), {}, 'value cannot be empty'),
        param(NotEmpty(), NullString(), 'field is required'),
        param(Min(18), 17, 'value must be at least 18'),
        param(Min(18), NullInt(3), 'value must be at least 18'),
        param(Min(0.5), 0.25, 'value must be at least 0.5'),
        param(Min(1), 'abc', 'value must be a numeric type'),
        param(Min(1), True, 'value must be a numeric type'),
        param(Max(120), 121, 'value must be at most 120'),
        param(MinLength(3), 'ab', 'must be at least 3 characters long'),
        param(MinLength(3), [1], 'must have at least 3 items'),
        param(MaxLength(1), 'ab', 'must be at most 1 characters long'),
        param(MaxLength(1), {'a': 1, 'b': 2}, 'must have at most 1 items'),
        param(Email(), 'john@example', 'invalid email format'),
        param(Email(), 'john example.com', 'invalid email format'),
        param(Email(), 42, 'email validation requires a str value, not int'),
        param(URL(), 'example.com', 'invalid URL format'),
        param(URL(), 'http://', 'invalid URL format'),
        param(URL(), 'mailto:john@example.com', 'invalid URL format'),
        param(In('admin', 'user'), 'root', 'value must be one of: admin, user'),
        param(Each(MinLength(2)), ['ab', 'c'], 'must be at least 2 characters long'),
        param(Each(Min(0)), 'abc', 'each validator can only be applied to sequences'),
        param(Unique(), [1, 2, 1], 'duplicate value found: 1'),
        param(Unique(), [[1], [1]], 'duplicate value found: [1]'),
        param(Unique(), {'a': 'x', 'b': 'x'}, 'duplicate value found: x'),
        param(Unique(), 'aa',
              'unique validator can only be applied to sequences or mappings'),
        param(UniqueBy(lambda d: d['id']), [{'id': 1}, {'id': 1}], 'duplicate key found: 1'),
        param(HasKeys('host', 'port'), {'host': 'h'}, 'key port not found in map'),
        param(HasKeys('host'), ['host'], 'expected map for map field'),
        param(ValidatorFunc(check_even), 3, '3 is odd'),
        param(ValidatorFunc(check_even, value_type=int), '4', 'expected type int, got str'),
    ])
    def test(self, validator, value, expected_message):
        with self.assertRaises(Exception) as cm:
            validator.validate(value, 'field')
        self.assertEqual(str(cm.exception), expected_message)

    def test_message_override(self):
        validator = Min(18, message='too young')
        with self.assertRaises(ValidationError) as cm:
            validator.validate(3, 'age')
        self.assertEqual(cm.exception.public_message, 'too young')
        self.assertIsInstance(cm.exception.__cause__, ValidationError)

    def test_with_message_returns_copy(self):
        original = MinLength(3)
        overridden = original.with_message('too short')
        self.assertIsNot(overridden, original)
        self.assertIsNone(original.message)
        with self.assertRaises(ValidationError) as cm:
            overridden.validate('ab', 'name')
        self.assertEqual(str(cm.exception), 'too short')
        with self.assertRaises(ValidationError) as cm:
            original.validate('ab', 'name')
        self.assertEqual(str(cm.exception), 'must be at least 3 characters long')

    def test_message_override_of_plain_exception(self):
        with self.assertRaises(ValidationError) as cm:
            ValidatorFunc(check_even, message='must be even').validate(3, 'n')
        self.assertEqual(str(cm.exception), 'must be even')


@expand
class TestValidators__config_errors(unittest.TestCase):

    @foreach([
        param(lambda: Min('1')).label('min_bound_str'),
        param(lambda: Max(None)).label('max_bound_none'),
        param(lambda: Min(True)).label('min_bound_bool'),
        param(lambda: MinLength(1.5)).label('min_length_float'),
        param(lambda: MaxLength('2')).label('max_length_str'),
        param(lambda: UniqueBy('id')).label('unique_by_key_not_callable'),
        param(lambda: ValidatorFunc(None)).label('func_not_callable'),
        param(lambda: When(True, Required())).label('condition_not_callable'),
    ])
    def test(self, make_validator):
        with self.assertRaises(BindingConfigError):
            make_validator()

    def test_when_outside_run(self):
        with self.assertRaises(BindingConfigError):
            When(FieldEquals('a', 1), Required()).validate('x', 'b')

    def test_unimplemented_check(self):
        with self.assertRaises(NotImplementedError):
            Validator().validate(1, 'x')


class TestRequired(unittest.TestCase):

    def _schema(self, *validators):
        return Schema(ValueField('name', str, validators=list(validators)))

    def test_present(self):
        self._schema(Required()).apply({'name': 'x'})

    def test_absent(self):
        with self.assertRaises(BindingErrors) as cm:
            self._schema(Required()).apply({})
        self.assertEqual(str(cm.exception), 'name: field is required')

    def test_absent_with_message(self):
        with self.assertRaises(BindingErrors) as cm:
            self._schema(Required(message='name please')).apply({})
        self.assertEqual(str(cm.exception), 'name: name please')

    def test_not_empty_does_not_check_presence(self):
        with self.assertRaises(BindingErrors) as cm:
            self._schema(NotEmpty()).apply({})
        self.assertEqual(str(cm.exception), 'name: field is required')
        with self.assertRaises(BindingErrors) as cm:
            Schema(SliceField('tags', str, validators=[NotEmpty()])).apply({'tags': []})
        self.assertEqual(str(cm.exception), 'tags: value cannot be empty')

    def test_outside_run_behaves_as_not_empty(self):
        Required().validate('x', 'name')
        with self.assertRaises(ValidationError):
            Required().validate('', 'name')


class TestWhen(unittest.TestCase):

    def setUp(self):
        self.schema = Schema(
            ValueField('kind', str),
            ValueField('company', str, validators=[
                When(FieldEquals('kind', 'business'), Required(), MinLength(2)),
            ]))

    def test_condition_met(self):
        with self.assertRaises(BindingErrors) as cm:
            self.schema.apply({'kind': 'business'})
        self.assertEqual(str(cm.exception), 'company: field is required')
        with self.assertRaises(BindingErrors) as cm:
            self.schema.apply({'kind': 'business', 'company': 'X'})
        self.assertEqual(str(cm.exception), 'company: must be at least 2 characters long')
        self.schema.apply({'kind': 'business', 'company': 'XY'})

    def test_condition_not_met(self):
        self.schema.apply({'kind': 'person'})
        self.schema.apply({})

    def test_custom_condition(self):
        schema = Schema(
            ValueField('a', int),
            ValueField('b', int, validators=[
                When(lambda run: run.get_field_value('a') == 1, Min(10), message='b too small'),
            ]))
        schema.apply({'a': 2, 'b': 1})
        with self.assertRaises(BindingErrors) as cm:
            schema.apply({'a': 1, 'b': 1})
        self.assertEqual(str(cm.exception), 'b: b too small')
