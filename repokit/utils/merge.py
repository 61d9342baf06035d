"""
Partial updates: copy field values onto an existing entity, never touching its identity.
"""

import inspect
from typing import Any, ClassVar, List, Mapping, Type, Union, get_origin

import sqlalchemy as sa

IDENTITY_FIELD = "id"


def _is_class_var(annotation: Any) -> bool:
    if isinstance(annotation, str):
        return annotation.startswith(("ClassVar", "typing.ClassVar"))
    return annotation is ClassVar or get_origin(annotation) is ClassVar


def _relationships(entity_type: Type[Any]) -> frozenset:
    mapper = sa.inspect(entity_type, raiseerr=False)
    if mapper is None:
        return frozenset()
    return frozenset(mapper.relationships.keys())


def writable_fields(entity_type: Type[Any]) -> List[str]:
    """
    Public instance fields declared directly on ``entity_type`` that can be assigned.

    Inherited fields, class variables and mapped relationships are left out; own
    properties count when they have a setter.
    """
    relationships = _relationships(entity_type)
    names = [
        name
        for name, annotation in inspect.get_annotations(entity_type).items()
        if not name.startswith("_") and not _is_class_var(annotation) and name not in relationships
    ]
    for name, attribute in vars(entity_type).items():
        if isinstance(attribute, property) and attribute.fset is not None and not name.startswith("_") and name not in names:
            names.append(name)
    return names


def merge(target: Any, source: Union[Any, Mapping[str, Any]]) -> None:
    """
    Merge ``source`` into ``target`` in place.

    ``source`` is either an entity of the same type, whose every writable field is copied,
    or a mapping of field name to value (names matched case-insensitively; unknown keys
    are ignored). The ``id`` field is never written.
    """
    fields = [name for name in writable_fields(type(target)) if name.lower() != IDENTITY_FIELD]

    if isinstance(source, Mapping):
        by_name = {name.lower(): name for name in fields}
        for key, value in source.items():
            name = by_name.get(str(key).lower())
            if name is None:
                continue
            setattr(target, name, value)
        return

    for name in fields:
        setattr(target, name, getattr(source, name))
