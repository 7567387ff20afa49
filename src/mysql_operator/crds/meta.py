# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""Delegation of the shared resource header onto the resource classes."""

from lightkube.models import meta_v1

HEADER_FIELDS = ("name", "namespace", "labels", "annotations", "resourceVersion", "generation")


class HeaderField:
    """Expose an ``ObjectMeta`` attribute directly on the resource holding it."""

    def __set_name__(self, owner, name):
        self._attr = name

    def __get__(self, obj, objtype=None):
        if obj is None:
            return self
        if obj.metadata is None:
            return None
        return getattr(obj.metadata, self._attr)

    def __set__(self, obj, value):
        if obj.metadata is None:
            obj.metadata = meta_v1.ObjectMeta()
        setattr(obj.metadata, self._attr, value)


def delegate_metadata(cls):
    """Class decorator adding a ``HeaderField`` for every header attribute."""
    for attr in HEADER_FIELDS:
        field = HeaderField()
        field.__set_name__(cls, attr)
        setattr(cls, attr, field)
    return cls
