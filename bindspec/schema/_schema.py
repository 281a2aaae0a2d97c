# Copyright (c) 2013-2025 NASK. All rights reserved.

import json
import logging

from pyramid.decorator import reify

from bindspec.class_helpers import is_mapping
from bindspec.encoding_helpers import ascii_str
from bindspec.exceptions import (
    BindingConfigError,
    BindingErrors,
    FieldError,
    PayloadError,
)
from bindspec.schema.fields import Field


LOGGER = logging.getLogger(__name__)



#
# Per-run state

class FieldRunState(object):

    """
    The state of one field within one run:

    * `was_present` -- whether the field's key was present in the
      payload (or the field's default was applied);
    * `was_assigned` -- whether a value was actually bound (it is false
      if, e.g., the payload contained :obj:`None` or an empty string);
    * `value` -- the bound value (:obj:`None` if not assigned).
    """

    __slots__ = ('was_present', 'was_assigned', 'value')

    def __init__(self):
        self.was_present = False
        self.was_assigned = False
        self.value = None

    def __repr__(self):
        return ('<FieldRunState: was_present={0.was_present!r}, '
                'was_assigned={0.was_assigned!r}, value={0.value!r}>'.format(self))


class SchemaRun(object):

    """
    The state of one :meth:`Schema.apply` call: the set of present keys
    and the per-field :class:`FieldRunState` objects.

    (An instance is created by :meth:`Schema.apply` -- you do not need
    to instantiate this class yourself.)
    """

    def __init__(self, schema, data):
        self.schema = schema
        self._present_keys = set(data)
        self._field_states = {}

    @property
    def strict_bool(self):
        return self.schema.strict_bool


    #
    # public query/bookkeeping methods

    def is_field_present(self, name):
        return name in self._present_keys

    def set_field_present(self, name):
        self._present_keys.add(name)

    def get_field_value(self, name):
        """
        Get the value bound (in this run) by the first field whose name
        is `name`; :obj:`None` if the value was not assigned or there
        is no such field.
        """
        field = self._first_field_by_name.get(name)
        if field is None:
            return None
        return self.current_value(field)

    def was_assigned(self, name):
        field = self._first_field_by_name.get(name)
        return field is not None and self.field_state(field).was_assigned

    @property
    def values(self):
        """A new `{<field name>: <assigned value>}` dict."""
        return {
            name: self.field_state(field).value
            for name, field in self._first_field_by_name.items()
            if self.field_state(field).was_assigned}


    #
    # methods used by fields

    def field_state(self, field):
        try:
            return self._field_states[field]
        except KeyError:
            state = self._field_states[field] = FieldRunState()
            return state

    def mark_present(self, field):
        self.field_state(field).was_present = True
        self.set_field_present(field.name)

    def mark_assigned(self, field, value):
        state = self.field_state(field)
        state.was_assigned = True
        state.value = value

    def current_value(self, field):
        state = self.field_state(field)
        return state.value if state.was_assigned else None


    #
    # non-public internals

    @reify
    def _first_field_by_name(self):
        first_field_by_name = {}
        for field in self.schema.fields:
            first_field_by_name.setdefault(field.name, field)
        return first_field_by_name



#
# The schema class

class Schema(object):

    """
    An ordered collection of fields plus the two-phase (*assign*, then
    *validate*) binding protocol.

    >>> from bindspec.refs import Var
    >>> from bindspec.schema.fields import ValueField
    >>> from bindspec.validators import Min, Required
    >>> age = Var()
    >>> schema = Schema(
    ...     ValueField('age', int, target=age, validators=[Required(), Min(18)]))
    >>> run = schema.apply({'age': '42'})
    >>> age.value, run.values
    (42, {'age': 42})
    >>> schema.apply({'age': 10})             # doctest: +IGNORE_EXCEPTION_DETAIL
    Traceback (most recent call last):
      ...
    bindspec.exceptions.BindingErrors: age: value must be at least 18

    Options (class-level attributes, which -- as for fields -- can be
    overridden per instance with constructor keyword arguments; child
    schemas created for nested fields inherit them):

    * `skip_validators` (default: :obj:`False`) -- omit the *validate*
      phase;
    * `validate_after_assign_errors` (default: :obj:`True`) -- run the
      *validate* phase even if the *assign* phase produced errors;
    * `strict_bool` (default: :obj:`False`) -- see:
      :func:`bindspec.conversion.convert_value`.
    """

    skip_validators = False
    validate_after_assign_errors = True
    strict_bool = False

    OPTION_NAMES = ('skip_validators', 'validate_after_assign_errors', 'strict_bool')

    def __init__(self, *fields, **kwargs):
        self._fields = []
        self._set_options(kwargs)
        self.add(*fields)

    def __repr__(self):
        return '<{} with fields: {}>'.format(
            self.__class__.__qualname__,
            ', '.join(ascii_str(field.name) for field in self._fields))

    @property
    def fields(self):
        return tuple(self._fields)

    @property
    def options(self):
        return {name: getattr(self, name) for name in self.OPTION_NAMES}


    #
    # public methods

    def add(self, *fields):
        """Append the given fields (returns the schema)."""
        for field in fields:
            if not isinstance(field, Field):
                raise BindingConfigError('{!a} is not a Field instance'.format(field))
        self._fields.extend(fields)
        return self

    def make_child_schema(self, *fields):
        """Create a new schema with the same options."""
        return self.__class__(*fields, **self.options)

    def apply(self, data):
        """
        Bind the given payload.

        Args:
            `data`:
                A string-keyed mapping (e.g., a decoded JSON object).

        Returns:
            A :class:`SchemaRun` instance (the state of this call).

        Raises:
            :exc:`~bindspec.exceptions.BindingErrors` (its
            `error_info_seq` contains the assign errors followed by the
            validate errors, each in the fields' order; its `run`
            attribute is the :class:`SchemaRun` instance).

            :exc:`~bindspec.exceptions.BindingConfigError` if the
            schema (or any of its fields) is not configured properly.
        """
        if not is_mapping(data):
            raise BindingConfigError('{!a} is not a mapping'.format(data))
        run = SchemaRun(self, data)
        error_info_seq = self._collect_errors(lambda field: field.assign(data, run))
        assign_error_count = len(error_info_seq)
        if not self.skip_validators and (self.validate_after_assign_errors
                                         or not assign_error_count):
            error_info_seq.extend(self._collect_errors(lambda field: field.validate(run)))
        if error_info_seq:
            LOGGER.debug('%a: %d assign error(s), %d validate error(s)',
                         self, assign_error_count, len(error_info_seq) - assign_error_count)
            raise BindingErrors(error_info_seq, run=run)
        return run

    def apply_json(self, json_data):
        """
        Decode the given JSON document (:class:`str` or :class:`bytes`)
        and :meth:`apply` the resultant object.

        Raises:
            :exc:`~bindspec.exceptions.PayloadError` if the document is
            not valid JSON or is not a JSON object.

            Other exceptions -- as :meth:`apply`.
        """
        try:
            data = json.loads(json_data)
        except (ValueError, TypeError) as exc:
            raise PayloadError(public_message='invalid JSON: {}'.format(ascii_str(exc))) from exc
        if not isinstance(data, dict):
            raise PayloadError(public_message='JSON payload is not an object')
        return self.apply(data)


    #
    # non-public internals

    def _set_options(self, options):
        cls = self.__class__
        for name, value in options.items():
            if name not in self.OPTION_NAMES:
                raise TypeError(
                    '{}.__init__() got an unexpected keyword argument {!a}'
                    .format(cls.__qualname__, name))
            setattr(self, name, value)

    def _collect_errors(self, action):
        error_info_seq = []
        for field in self._fields:
            try:
                action(field)
            except BindingConfigError:
                raise
            except Exception as exc:
                error_info_seq.append(FieldError(field.name, field.description, exc))
        return error_info_seq
