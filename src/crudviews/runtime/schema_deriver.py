"""
Schema deriver - derives the Out/Post/Patch schema triple from an entity.

Each field is classified as readable and writable (both), read-only or
write-only:

- Out (responses) gets both + read-only fields
- Post (create and PUT bodies) gets both + write-only fields
- Patch (PATCH bodies) gets the Post properties with nothing required

``required`` of Out and Post is the entity-level required set restricted to
the schema's own properties.
"""

from collections.abc import Iterable
from typing import Any

from crudviews.config import DEFAULT_READ_ONLY
from crudviews.errors import AmbiguousVisibilityError
from crudviews.runtime.fields import extract_fields
from crudviews.specs.entity import Entity, FieldDescriptor
from crudviews.specs.views import SchemaTriple, SchemaVariant, Visibility, get_schema_name


def classify_field(
    name: str,
    read_only: Iterable[str] = (),
    write_only: Iterable[str] = (),
    default_read_only: Iterable[str] = DEFAULT_READ_ONLY,
) -> Visibility:
    """
    Classify a single field.

    Read-only wins: a name in the default read-only set stays read-only even
    when listed in ``write_only``. A name in both explicit sets is rejected
    by ``derive_schemas`` before this runs.
    """
    if name in read_only or name in default_read_only:
        return Visibility.READ_ONLY
    if name in write_only:
        return Visibility.WRITE_ONLY
    return Visibility.BOTH


def _object_schema(
    schema_id: str,
    title: str,
    fields: list[FieldDescriptor],
    required: list[str],
) -> dict[str, Any]:
    return {
        "$id": schema_id,
        "title": title,
        "type": "object",
        "properties": {f.name: f.property_schema() for f in fields},
        "required": required,
    }


def derive_schemas(
    entity: Entity,
    exclude: Iterable[str] = (),
    read_only: Iterable[str] = (),
    write_only: Iterable[str] = (),
    default_read_only: Iterable[str] = DEFAULT_READ_ONLY,
) -> SchemaTriple:
    """
    Derive the schema triple for an entity.

    Pure: nothing is registered. Names in ``read_only``/``write_only`` that
    are not fields of the entity are ignored.

    Args:
        entity: Entity exposing the ordered field map
        exclude: Fields removed from all three schemas
        read_only: Fields only readable (Out)
        write_only: Fields only writable (Post/Patch)
        default_read_only: Fields always read-only, even when in ``write_only``

    Raises:
        AmbiguousVisibilityError: a field is in both ``read_only`` and ``write_only``
    """
    read_only = set(read_only)
    write_only = set(write_only)
    default_read_only = set(default_read_only)

    fields = extract_fields(entity, exclude)
    names = {f.name for f in fields}

    conflicts = read_only & write_only & names
    if conflicts:
        raise AmbiguousVisibilityError(entity.name, conflicts)

    out_fields: list[FieldDescriptor] = []
    in_fields: list[FieldDescriptor] = []
    for descriptor in fields:
        visibility = classify_field(descriptor.name, read_only, write_only, default_read_only)
        if visibility != Visibility.WRITE_ONLY:
            out_fields.append(descriptor)
        if visibility != Visibility.READ_ONLY:
            in_fields.append(descriptor)

    return SchemaTriple(
        out=_object_schema(
            get_schema_name(entity.name, SchemaVariant.OUT),
            entity.name,
            out_fields,
            [f.name for f in out_fields if f.required],
        ),
        post=_object_schema(
            get_schema_name(entity.name, SchemaVariant.POST),
            entity.name,
            in_fields,
            [f.name for f in in_fields if f.required],
        ),
        patch=_object_schema(
            get_schema_name(entity.name, SchemaVariant.PATCH),
            entity.name,
            in_fields,
            [],
        ),
    )
