# Copyright (c) 2013-2025 NASK. All rights reserved.

"""
The binding engine: :class:`Schema` (an ordered collection of fields
plus the two-phase *assign*/*validate* protocol), :class:`SchemaRun`
(the state of one :meth:`Schema.apply` call) and the field classes.
"""


from bindspec.schema._schema import (
    FieldRunState,
    Schema,
    SchemaRun,
)
from bindspec.schema.fields import (
    NO_VALUE,

    AcceptsDefaultMixin,
    AcceptsTransformersMixin,
    AcceptsValidatorsMixin,

    Field,
    ValueField,
    OptionalField,
    ArrayField,
    SliceField,
    SliceOfField,
    MapField,
    NestedMapField,
    HTTPMapField,
    StructField,
    UnionField,
    ConvertField,
    ConvertOptionalField,
    TransformField,
    ValueWithoutAssignField,
    ValueFromField,
)


__all__ = [
    'FieldRunState',
    'Schema',
    'SchemaRun',

    'NO_VALUE',

    'AcceptsDefaultMixin',
    'AcceptsTransformersMixin',
    'AcceptsValidatorsMixin',

    'Field',
    'ValueField',
    'OptionalField',
    'ArrayField',
    'SliceField',
    'SliceOfField',
    'MapField',
    'NestedMapField',
    'HTTPMapField',
    'StructField',
    'UnionField',
    'ConvertField',
    'ConvertOptionalField',
    'TransformField',
    'ValueWithoutAssignField',
    'ValueFromField',
]
