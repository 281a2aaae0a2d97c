# Copyright (c) 2013-2025 NASK. All rights reserved.

"""
References to caller-owned *targets* -- i.e., the places that fields
write their bound values to.

>>> class Person(object):
...     name = None
...
>>> p = Person()
>>> name_ref = ref(p, 'name')
>>> name_ref.set('John')
>>> p.name, name_ref.get()
('John', 'John')

>>> d = {}
>>> ref(d, 'age').set(25)
>>> d
{'age': 25}

>>> v = Var(0)
>>> v.set(42)
>>> v.value, v.get()
(42, 42)
"""

from bindspec.class_helpers import is_mapping


class Ref(object):

    """The base class of target references."""

    def get(self):
        raise NotImplementedError

    def set(self, value):
        raise NotImplementedError


class Var(Ref):

    """
    A standalone box holding a single value (the simplest target).
    """

    def __init__(self, value=None):
        self.value = value

    def get(self):
        return self.value

    def set(self, value):
        self.value = value

    def __repr__(self):
        return 'Var({!r})'.format(self.value)


class AttrRef(Ref):

    """A reference to an attribute of an object."""

    def __init__(self, obj, attr_name):
        self.obj = obj
        self.attr_name = attr_name

    def get(self):
        return getattr(self.obj, self.attr_name, None)

    def set(self, value):
        setattr(self.obj, self.attr_name, value)

    def __repr__(self):
        return 'AttrRef({!r}, {!r})'.format(self.obj, self.attr_name)


class ItemRef(Ref):

    """A reference to an item of a (mutable) mapping."""

    def __init__(self, mapping, key):
        self.mapping = mapping
        self.key = key

    def get(self):
        return self.mapping.get(self.key)

    def set(self, value):
        self.mapping[self.key] = value

    def __repr__(self):
        return 'ItemRef({!r}, {!r})'.format(self.mapping, self.key)


def ref(container, name):
    """
    Make an :class:`ItemRef` (if `container` is a mapping) or an
    :class:`AttrRef` (otherwise).
    """
    if is_mapping(container):
        return ItemRef(container, name)
    return AttrRef(container, name)
