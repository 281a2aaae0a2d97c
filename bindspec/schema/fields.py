# Copyright (c) 2013-2025 NASK. All rights reserved.

"""
Field classes -- each describes how one payload key is bound to a
caller-owned target (see: :mod:`bindspec.refs`).

.. note::

   Field instances keep *no* run-scoped state: everything that depends
   on a particular :meth:`~bindspec.schema.Schema.apply` call is kept
   by the :class:`~bindspec.schema.SchemaRun` object passed to the
   :meth:`Field.assign` and :meth:`Field.validate` methods.
"""

import copy
import re

from pyramid.decorator import reify

from bindspec.class_helpers import (
    is_mapping,
    is_seq,
)
from bindspec.conversion import (
    convert_sequence,
    convert_value,
)
from bindspec.encoding_helpers import ascii_str
from bindspec.exceptions import (
    BindingConfigError,
    BindingErrors,
    FieldValueError,
    LengthMismatchError,
    ShapeError,
    error_message,
)
from bindspec.refs import Ref
from bindspec.transformers import apply_transformers
from bindspec.validators import Validator


class _NoValue(object):

    def __repr__(self):
        return 'NO_VALUE'

    def __bool__(self):
        return False


#: The marker of a lack of value (e.g., of a lack of a default value,
#: or of the *abstain* result of a converter).
NO_VALUE = _NoValue()



#
# Capability mix-ins

class AcceptsValidatorsMixin(object):

    """
    Provides the :attr:`validators` sequence (it can be specified with
    the `validators` constructor keyword argument and/or extended with
    :meth:`add_validators`).
    """

    validators = ()

    def add_validators(self, *validators):
        for validator in validators:
            if not isinstance(validator, Validator):
                raise BindingConfigError('{!a} is not a Validator instance'.format(validator))
        self.validators = tuple(self.validators) + validators
        return self

    def _set_public_attrs(self, validators=(), **kwargs):
        super(AcceptsValidatorsMixin, self)._set_public_attrs(**kwargs)
        self.add_validators(*validators)


class AcceptsDefaultMixin(object):

    """
    Provides the :attr:`default` value -- written to the target when
    the field's key is *absent* (it can be specified with the `default`
    constructor keyword argument or with :meth:`set_default`).
    """

    default = NO_VALUE

    def set_default(self, default):
        self.default = default
        return self

    @property
    def has_default(self):
        return self.default is not NO_VALUE

    def assign_absent(self, run):
        if self.has_default:
            run.mark_present(self)
            self.write(copy.deepcopy(self.default), run)

    def _set_public_attrs(self, default=NO_VALUE, **kwargs):
        super(AcceptsDefaultMixin, self)._set_public_attrs(**kwargs)
        if default is not NO_VALUE:
            self.set_default(default)


class AcceptsTransformersMixin(object):

    """
    Provides the :attr:`transformers` sequence (it can be specified
    with the `transformers` constructor keyword argument and/or
    extended with :meth:`add_transformers`); any one-argument callable
    can be a transformer.
    """

    transformers = ()

    def add_transformers(self, *transformers):
        for transformer in transformers:
            if not callable(transformer):
                raise BindingConfigError('{!a} is not callable'.format(transformer))
        self.transformers = tuple(self.transformers) + transformers
        return self

    def transformed(self, value):
        return apply_transformers(self.transformers, value)

    def _set_public_attrs(self, transformers=(), **kwargs):
        super(AcceptsTransformersMixin, self)._set_public_attrs(**kwargs)
        self.add_transformers(*transformers)



#
# The base field class

class Field(object):

    """
    The base class for all field classes.

    Constructors of all field classes accept the `name` positional
    argument (the payload key) and the following keyword-only ones:

    * `description` (default: :obj:`None`):
          A human-readable description (propagated into errors).
    * `validators` (default: empty):
          A sequence of :class:`~bindspec.validators.Validator`
          instances.
    * `transformers`, `default` -- only for field classes that accept
      them (see the capability mix-ins).
    * **any** keyword arguments whose names are the names of class-level
      attributes (so that they are overridden per instance).

    Any other keyword argument causes :exc:`TypeError`.
    """

    description = None
    validators = ()

    #: Whether an empty string is treated as *unset* (rather than
    #: passed to conversion).
    empty_str_is_unset = False

    def __init__(self, name, **kwargs):
        if not isinstance(name, str):
            raise BindingConfigError('field name {!a} is not a str'.format(name))
        self.name = name
        self._init_kwargs = kwargs
        self._set_public_attrs(**kwargs)

    def __repr__(self):
        return '{}({!r}{})'.format(
            self.__class__.__qualname__,
            self.name,
            ''.join(
                ', {}={!r}'.format(key, value)
                for key, value in sorted(self._init_kwargs.items())))


    #
    # overridable methods

    def assign(self, data, run):
        """
        The method called by the *assign* phase.

        Args:
            `data`:
                The payload mapping.
            `run`:
                The current :class:`~bindspec.schema.SchemaRun`.

        Raises:
            Any :exc:`~exceptions.Exception` (to be collected by the
            schema as this field's error).
        """
        if self.name not in data:
            self.assign_absent(run)
            return
        run.mark_present(self)
        raw_value = data[self.name]
        if raw_value is None:
            return
        if self.empty_str_is_unset and isinstance(raw_value, str) and not raw_value:
            self.reset_target(run)
            return
        value = self.bind(raw_value, run)
        if value is not NO_VALUE:
            self.write(value, run)

    def validate(self, run):
        """
        The method called by the *validate* phase: apply the validators
        (in order) to the value bound in the given run (:obj:`None` if
        none).
        """
        value = run.current_value(self)
        for validator in self.validators:
            validator.validate_in_run(value, self.name, run)

    def assign_absent(self, run):
        """Called when the key is absent (the default does nothing)."""

    def reset_target(self, run):
        """Called on an empty string if :attr:`empty_str_is_unset`."""

    def bind(self, raw_value, run):
        """
        Get the value to be written, given the raw one (never
        :obj:`None`); returning :data:`NO_VALUE` means that nothing is
        written.
        """
        raise NotImplementedError

    def write(self, value, run):
        run.mark_assigned(self, value)

    def transformed(self, value):
        return value


    #
    # non-public internals

    def _set_public_attrs(self, **per_instance_attrs):
        self._set_per_instance_attrs(per_instance_attrs)

    def _set_per_instance_attrs(self, per_instance_attrs):
        # per-instance customizations of class-level attributes
        cls = self.__class__
        for attr_name, obj in per_instance_attrs.items():
            if not hasattr(cls, attr_name):
                raise TypeError(
                    '{}.__init__() got an unexpected keyword argument {!a}'
                    .format(cls.__qualname__, attr_name))
            setattr(self, attr_name, obj)


class _TargetedField(Field):

    """
    The base for fields that write values to a target (which may be
    omitted -- then values are available only via the run).
    """

    def __init__(self, name, target=None, **kwargs):
        if target is not None and not isinstance(target, Ref):
            raise BindingConfigError('{!a} is not a Ref instance'.format(target))
        self.target = target
        super(_TargetedField, self).__init__(name, **kwargs)

    def write(self, value, run):
        if self.target is not None:
            self.target.set(value)
        super(_TargetedField, self).write(value, run)

    def set_target_value(self, value):
        if self.target is not None:
            self.target.set(value)


class _NestedObjectFieldMixin(object):

    """
    For fields binding nested objects: each of them is created with
    :attr:`factory` and configured with :attr:`sub_schema` -- a
    callable taking a fresh child schema and the fresh object.
    """

    factory = None
    sub_schema = None

    def _check_nested_config(self):
        if not callable(self.factory):
            raise BindingConfigError('{}: factory {!a} is not callable'.format(
                self.__class__.__qualname__, self.factory))
        if not callable(self.sub_schema):
            raise BindingConfigError('{}: sub_schema {!a} is not callable'.format(
                self.__class__.__qualname__, self.sub_schema))

    def bind_object(self, raw_value, run):
        if not is_mapping(raw_value):
            raise ShapeError()
        obj = self.factory()
        child_schema = run.schema.make_child_schema()
        self.sub_schema(child_schema, obj)
        child_schema.apply(raw_value)
        return obj

    def bind_object_with_prefix(self, prefix, raw_value, run):
        try:
            return self.bind_object(raw_value, run)
        except (BindingErrors, FieldValueError) as exc:
            raise FieldValueError(public_message='{}{}'.format(
                prefix, error_message(exc))) from exc



#
# Scalar fields

class ValueField(AcceptsDefaultMixin,
                 AcceptsTransformersMixin,
                 AcceptsValidatorsMixin,
                 _TargetedField):

    """
    A single scalar value of the given `value_type`.

    An empty string resets the target to :attr:`zero_value` (if not
    specified: ``value_type()`` or -- if that fails -- :obj:`None`).
    """

    zero_value = NO_VALUE
    empty_str_is_unset = True

    def __init__(self, name, value_type, target=None, **kwargs):
        self.value_type = _verified_type(value_type)
        super(ValueField, self).__init__(name, target=target, **kwargs)

    def bind(self, raw_value, run):
        value = convert_value(raw_value, self.value_type, strict_bool=run.strict_bool)
        return self.transformed(value)

    def reset_target(self, run):
        self.set_target_value(self.get_zero_value())

    def get_zero_value(self):
        if self.zero_value is not NO_VALUE:
            return self.zero_value
        try:
            return self.value_type()
        except (TypeError, ValueError):
            return None


class OptionalField(AcceptsDefaultMixin,
                    AcceptsTransformersMixin,
                    AcceptsValidatorsMixin,
                    _NestedObjectFieldMixin,
                    _TargetedField):

    """
    A nullable value: either a scalar one (if `value_type` is given) or
    a nested object (if `factory` and `sub_schema` are given).

    An empty string resets the target to :obj:`None`.
    """

    empty_str_is_unset = True

    def __init__(self, name, value_type=None, target=None, **kwargs):
        self.value_type = value_type
        super(OptionalField, self).__init__(name, target=target, **kwargs)
        if (value_type is None) == (self.factory is None):
            raise BindingConfigError(
                'OptionalField {!a}: exactly one of value_type and '
                'factory needs to be specified'.format(name))
        if value_type is None:
            self._check_nested_config()
        else:
            _verified_type(value_type)

    def bind(self, raw_value, run):
        if self.value_type is None:
            value = self.bind_object(raw_value, run)
        else:
            value = convert_value(raw_value, self.value_type, strict_bool=run.strict_bool)
        return self.transformed(value)

    def reset_target(self, run):
        self.set_target_value(None)



#
# Sequence fields

class ArrayField(AcceptsDefaultMixin,
                 AcceptsTransformersMixin,
                 AcceptsValidatorsMixin,
                 _TargetedField):

    """
    A fixed-length sequence of items of `item_type` (bound as a
    :class:`tuple`).
    """

    def __init__(self, name, item_type, length, target=None, **kwargs):
        if isinstance(length, bool) or not isinstance(length, int) or length < 0:
            raise BindingConfigError('{!a} is not a valid array length'.format(length))
        self.item_type = _verified_type(item_type)
        self.length = length
        super(ArrayField, self).__init__(name, target=target, **kwargs)

    def bind(self, raw_value, run):
        _verify_is_seq(raw_value)
        if len(raw_value) != self.length:
            raise LengthMismatchError(expected=self.length, got=len(raw_value))
        items = convert_sequence(raw_value, self.item_type, strict_bool=run.strict_bool)
        return self.transformed(tuple(items))


class SliceField(AcceptsDefaultMixin,
                 AcceptsTransformersMixin,
                 AcceptsValidatorsMixin,
                 _TargetedField):

    """A sequence of items of `item_type` (bound as a :class:`list`)."""

    def __init__(self, name, item_type, target=None, **kwargs):
        self.item_type = _verified_type(item_type)
        super(SliceField, self).__init__(name, target=target, **kwargs)

    def bind(self, raw_value, run):
        items = convert_sequence(raw_value, self.item_type, strict_bool=run.strict_bool)
        return self.transformed(items)


class SliceOfField(AcceptsDefaultMixin,
                   AcceptsValidatorsMixin,
                   _NestedObjectFieldMixin,
                   _TargetedField):

    """
    A sequence of nested objects (bound as a :class:`list`); the first
    failing element is reported (``"element <index>: ..."``).
    """

    def __init__(self, name, factory, sub_schema, target=None, **kwargs):
        super(SliceOfField, self).__init__(
            name, target=target, factory=factory, sub_schema=sub_schema, **kwargs)
        self._check_nested_config()

    def bind(self, raw_value, run):
        _verify_is_seq(raw_value)
        return [
            self.bind_object_with_prefix('element {}: '.format(i), item, run)
            for i, item in enumerate(raw_value)]



#
# Mapping fields

class MapField(AcceptsDefaultMixin,
               AcceptsValidatorsMixin,
               _TargetedField):

    """
    A mapping whose keys are converted to `key_type` and values to
    `value_type`.

    If `pair_schema` is given, it is called -- for each key/value pair
    -- with a fresh child schema, the (converted) key and value; the
    child schema is then applied to the whole mapping.
    """

    pair_schema = None
    empty_str_is_unset = True

    def __init__(self, name, key_type=str, value_type=object, target=None, **kwargs):
        self.key_type = _verified_type(key_type)
        self.value_type = _verified_type(value_type)
        super(MapField, self).__init__(name, target=target, **kwargs)
        if self.pair_schema is not None and not callable(self.pair_schema):
            raise BindingConfigError('{!a} is not callable'.format(self.pair_schema))

    def bind(self, raw_value, run):
        if not is_mapping(raw_value):
            raise ShapeError()
        result = {}
        for raw_key, raw_item in raw_value.items():
            key_prefix = 'key {}: '.format(ascii_str(raw_key))
            try:
                key = convert_value(raw_key, self.key_type, strict_bool=run.strict_bool)
                item = convert_value(raw_item, self.value_type, strict_bool=run.strict_bool)
                if self.pair_schema is not None:
                    child_schema = run.schema.make_child_schema()
                    self.pair_schema(child_schema, key, item)
                    child_schema.apply(raw_value)
            except (BindingErrors, FieldValueError) as exc:
                raise FieldValueError(public_message=key_prefix + error_message(exc)) from exc
            result[key] = item
        return result


class NestedMapField(AcceptsDefaultMixin,
                     AcceptsValidatorsMixin,
                     _NestedObjectFieldMixin,
                     _TargetedField):

    """
    A mapping whose every value is a nested object (bound via its own
    child schema); keys are converted to `key_type`.
    """

    def __init__(self, name, factory, sub_schema, key_type=str, target=None, **kwargs):
        self.key_type = _verified_type(key_type)
        super(NestedMapField, self).__init__(
            name, target=target, factory=factory, sub_schema=sub_schema, **kwargs)
        self._check_nested_config()

    def bind(self, raw_value, run):
        if not is_mapping(raw_value):
            raise ShapeError()
        return _bind_keyed_objects(self, raw_value.items(), run)


class HTTPMapField(AcceptsDefaultMixin,
                   AcceptsValidatorsMixin,
                   _NestedObjectFieldMixin,
                   _TargetedField):

    r"""
    A mapping reassembled from *bracketed* form keys:
    ``<name>[<identifier>][<subfield>]`` (identifiers consist of
    characters from the ``[0-9A-Za-z_-]`` set, subfield names -- from
    ``[A-Za-z_-]``).  Each *identifier* becomes a key (converted to
    `key_type`) and its ``{<subfield>: <value>}`` mapping is bound to a
    nested object.

    If a value is a list (as for multi-value form data), only its first
    item is taken into account.

    >>> HTTPMapField('users', dict, lambda s, o: None).group_bracketed_items({
    ...     'users[1][name]': 'John',
    ...     'users[1][age]': ['30', '31'],
    ...     'users[x-2][name]': 'Mary',
    ...     'users': 'ignored',
    ...     'other[1][name]': 'ignored',
    ... }) == {'1': {'name': 'John', 'age': '30'}, 'x-2': {'name': 'Mary'}}
    True
    """

    def __init__(self, name, factory, sub_schema, key_type=str, target=None, **kwargs):
        self.key_type = _verified_type(key_type)
        super(HTTPMapField, self).__init__(
            name, target=target, factory=factory, sub_schema=sub_schema, **kwargs)
        self._check_nested_config()

    @reify
    def bracketed_key_regex(self):
        return re.compile(
            r'\A{}\[([0-9A-Za-z_-]+)\]\[([A-Za-z_-]+)\]\Z'.format(re.escape(self.name)))

    def group_bracketed_items(self, data):
        groups = {}
        for key, value in data.items():
            match = self.bracketed_key_regex.search(key) if isinstance(key, str) else None
            if match is None:
                continue
            identifier, subfield = match.groups()
            if is_seq(value):
                value = value[0] if value else ''
            groups.setdefault(identifier, {})[subfield] = value
        return groups

    def assign(self, data, run):
        groups = self.group_bracketed_items(data)
        if not groups:
            self.assign_absent(run)
            return
        run.mark_present(self)
        self.write(_bind_keyed_objects(self, groups.items(), run), run)



#
# Nested object fields

class StructField(AcceptsDefaultMixin,
                  AcceptsValidatorsMixin,
                  _NestedObjectFieldMixin,
                  _TargetedField):

    """
    A single nested object (written to the target only if its child
    schema succeeded).
    """

    def __init__(self, name, factory, sub_schema, target=None, **kwargs):
        super(StructField, self).__init__(
            name, target=target, factory=factory, sub_schema=sub_schema, **kwargs)
        self._check_nested_config()

    def bind(self, raw_value, run):
        return self.bind_object(raw_value, run)


class UnionField(AcceptsValidatorsMixin, _TargetedField):

    """
    A polymorphic value: the raw mapping is passed to `resolver` (a
    callable that -- typically, by applying its own schema -- returns
    the resolved value, or raises an exception).

    If `base_type` is given, a resolved value that is not its instance
    is a configuration error.
    """

    base_type = None

    def __init__(self, name, resolver, target=None, **kwargs):
        if not callable(resolver):
            raise BindingConfigError('union resolver {!a} is not callable'.format(resolver))
        self.resolver = resolver
        super(UnionField, self).__init__(name, target=target, **kwargs)

    def bind(self, raw_value, run):
        if not is_mapping(raw_value):
            raise ShapeError()
        value = self.resolver(raw_value)
        if self.base_type is not None and not isinstance(value, self.base_type):
            raise BindingConfigError(
                'union field {!a}: resolved value {!a} is not an instance of {}'.format(
                    self.name, value, self.base_type.__qualname__))
        return value



#
# Converted/transformed value fields

class ConvertField(AcceptsDefaultMixin,
                   AcceptsTransformersMixin,
                   AcceptsValidatorsMixin,
                   _TargetedField):

    """
    The raw value is converted to `from_type`, then passed to
    `converter` which returns the actual value -- or :obj:`None`, which
    means *abstain* (nothing is written, the field is not assigned).

    An empty string is treated as *unset* (nothing is written).
    """

    empty_str_is_unset = True

    def __init__(self, name, from_type, converter, target=None, **kwargs):
        if not callable(converter):
            raise BindingConfigError('converter {!a} is not callable'.format(converter))
        self.from_type = _verified_type(from_type)
        self.converter = converter
        super(ConvertField, self).__init__(name, target=target, **kwargs)

    def bind(self, raw_value, run):
        value = convert_value(raw_value, self.from_type, strict_bool=run.strict_bool)
        converted = self.converter(value)
        if converted is None:
            return NO_VALUE
        return self.transformed(converted)


class ConvertOptionalField(ConvertField):

    """
    As :class:`ConvertField`, but the target is nullable: an empty
    string resets it to :obj:`None`.
    """

    def reset_target(self, run):
        self.set_target_value(None)


class TransformField(AcceptsValidatorsMixin, _TargetedField):

    """
    The raw value is converted to `from_type`, then mapped with
    `transform`; failures of these two steps are reported with the
    ``"type conversion failed: "`` and ``"transform failed: "``
    prefixes.
    """

    def __init__(self, name, from_type, transform, target=None, **kwargs):
        if not callable(transform):
            raise BindingConfigError('transform {!a} is not callable'.format(transform))
        self.from_type = _verified_type(from_type)
        self.transform = transform
        super(TransformField, self).__init__(name, target=target, **kwargs)

    def bind(self, raw_value, run):
        try:
            value = convert_value(raw_value, self.from_type, strict_bool=run.strict_bool)
        except BindingConfigError:
            raise
        except Exception as exc:
            raise FieldValueError(
                public_message='type conversion failed: ' + error_message(exc)) from exc
        try:
            return self.transform(value)
        except BindingConfigError:
            raise
        except Exception as exc:
            raise FieldValueError(
                public_message='transform failed: ' + error_message(exc)) from exc


class ValueWithoutAssignField(AcceptsValidatorsMixin, Field):

    """
    Converts (to `value_type`) and validates the key's value, but
    writes it nowhere (the value is available only via the run).

    Useful, especially, inside `pair_schema` callbacks of
    :class:`MapField`.
    """

    def __init__(self, name, value_type=object, **kwargs):
        self.value_type = _verified_type(value_type)
        super(ValueWithoutAssignField, self).__init__(name, **kwargs)

    def bind(self, raw_value, run):
        return convert_value(raw_value, self.value_type, strict_bool=run.strict_bool)


class ValueFromField(AcceptsValidatorsMixin, Field):

    """
    Validates a caller-given `value` (not taken from the payload) --
    as if it was present under the field's name.

    If `value_type` is given, the value is first converted to it
    (failures are reported with the ``"type conversion failed: "``
    prefix).
    """

    value_type = None

    def __init__(self, name, value, **kwargs):
        self.value = value
        super(ValueFromField, self).__init__(name, **kwargs)

    def assign(self, data, run):
        run.mark_present(self)
        if self.value is None:
            return
        value = self.value
        if self.value_type is not None:
            try:
                value = convert_value(value, self.value_type, strict_bool=run.strict_bool)
            except BindingConfigError:
                raise
            except Exception as exc:
                raise FieldValueError(
                    public_message='type conversion failed: ' + error_message(exc)) from exc
        self.write(value, run)



#
# Non-public helpers

def _verified_type(tp):
    if not isinstance(tp, type):
        raise BindingConfigError('{!a} is not a type'.format(tp))
    return tp


def _verify_is_seq(raw_value):
    if not is_seq(raw_value):
        raise ShapeError(public_message='expected sequence, got {}'.format(
            ascii_str(type(raw_value).__qualname__)))


def _bind_keyed_objects(field, raw_items, run):
    result = {}
    for raw_key, raw_item in raw_items:
        prefix = 'key {}: '.format(ascii_str(raw_key))
        try:
            key = convert_value(raw_key, field.key_type, strict_bool=run.strict_bool)
        except FieldValueError as exc:
            raise FieldValueError(public_message=prefix + error_message(exc)) from exc
        result[key] = field.bind_object_with_prefix(prefix, raw_item, run)
    return result
