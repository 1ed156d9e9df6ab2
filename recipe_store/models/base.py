"""
Base Model Components and Mixins

Common behaviour shared by the stored entities (User, Recipe, Like).

## DateTimeMixin

Registers a ``field_validator('*', mode='before')`` that only touches fields
annotated as ``datetime``. Strings are parsed from ISO format (``Z`` accepted)
and every value is normalized to UTC, so entities never hold naive or
non-UTC timestamps.

## RecordMixin

The record codec. ``to_dynamodb_item`` and ``from_dynamodb_item`` convert
between an entity and its raw table item:

- attribute names on disk are camelCase (``createdAt``, ``likeCount``)
- ``PK``/``SK`` and ``recordType`` are derived on encode and checked on decode
- attributes the entity does not define are kept in ``extensions`` and written
  back untouched, so records survive a read-modify-write by older or newer
  code
- integral Decimals become ints, floats become Decimals

Decoding never fills in a missing required attribute; the item is reported as
malformed instead.
"""

import logging
from datetime import datetime
from typing import Any, ClassVar, Dict, FrozenSet

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from ..exceptions import InvalidIdentifierError, MalformedRecordError
from ..keys import PARTITION_KEY, RECORD_TYPE_ATTR, SORT_KEY, RecordType, key_for_record
from ..utils import from_dynamodb_number, to_dynamodb_value, to_utc

logger = logging.getLogger(__name__)

# Attributes managed by the codec itself, never carried in extensions
STRUCTURAL_ATTRIBUTES = frozenset({PARTITION_KEY, SORT_KEY, RECORD_TYPE_ATTR})


class DateTimeMixin(BaseModel):
    """
    Mixin providing consistent UTC datetime validation.

    Applies to every field annotated ``datetime`` or ``Optional[datetime]``
    and leaves other fields unchanged.
    """

    @field_validator('*', mode='before')
    @classmethod
    def validate_datetime_fields(cls, v, info):
        from typing import get_args, get_origin

        field_info = cls.model_fields.get(info.field_name) if info.field_name else None
        field_annotation = getattr(field_info, 'annotation', None)

        if field_annotation is None:
            return v

        origin = get_origin(field_annotation)
        if origin is not None:
            args = get_args(field_annotation)
            if not any(arg is datetime for arg in args if arg is not type(None)):
                return v
        elif field_annotation is not datetime:
            return v

        if v is None:
            return v

        if isinstance(v, str):
            try:
                v = datetime.fromisoformat(v.replace('Z', '+00:00'))
            except ValueError as e:
                raise ValueError(f"Invalid datetime format: {v}. Expected ISO format.") from e

        if isinstance(v, datetime):
            return to_utc(v)

        raise ValueError(f"Invalid datetime type: {type(v)}. Expected datetime object or ISO string.")


class RecordMixin(BaseModel):
    """
    Mixin providing the table item codec for a stored entity.

    Subclasses set ``RECORD_TYPE`` and declare their attributes in snake_case;
    the camelCase alias is what lands in the table.
    """

    RECORD_TYPE: ClassVar[RecordType]

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
    )

    extensions: Dict[str, Any] = Field(
        default_factory=dict,
        description="Stored attributes this entity does not define, preserved verbatim"
    )

    @field_validator('extensions')
    @classmethod
    def validate_extensions(cls, v: Dict[str, Any]) -> Dict[str, Any]:
        clashes = sorted(set(v) & cls.reserved_attributes())
        if clashes:
            raise ValueError(f"Extension attributes collide with reserved names: {clashes}")
        return v

    @classmethod
    def defined_attributes(cls) -> FrozenSet[str]:
        """On-disk names of the attributes this entity defines."""
        return frozenset(
            field.alias or name
            for name, field in cls.model_fields.items()
            if name != 'extensions'
        )

    @classmethod
    def reserved_attributes(cls) -> FrozenSet[str]:
        """Names an extension attribute may never use."""
        return cls.defined_attributes() | STRUCTURAL_ATTRIBUTES | {'extensions'}

    @property
    def key(self):
        """The ``ItemKey`` this entity is stored under."""
        return key_for_record(self.RECORD_TYPE, self.model_dump(by_alias=True, include=self._key_fields()))

    @classmethod
    def _key_fields(cls):
        return {'username', 'id', 'recipe_id'} & set(cls.model_fields)

    def to_dynamodb_item(self) -> Dict[str, Any]:
        """
        Convert the entity to a raw table item.

        Extensions are written first so a defined attribute always wins.
        ``None`` values are omitted.

        Returns:
            Item ready for ``put_item`` or a transactional Put
        """
        item = {k: v for k, v in self.extensions.items() if k not in self.reserved_attributes()}
        item.update(self.model_dump(by_alias=True, exclude_none=True, exclude={'extensions'}))
        item = to_dynamodb_value(item)

        key = key_for_record(self.RECORD_TYPE, item)
        item[PARTITION_KEY] = key.pk
        item[SORT_KEY] = key.sk
        item[RECORD_TYPE_ATTR] = self.RECORD_TYPE.value
        return item

    @classmethod
    def from_dynamodb_item(cls, item: Dict[str, Any]):
        """
        Create an entity from a raw table item.

        Args:
            item: Item as returned by boto3 (numbers as Decimal)

        Returns:
            Entity instance

        Raises:
            MalformedRecordError: If the record type does not match, a required
                attribute is missing or invalid, or the stored key disagrees with
                the key derived from the logical attributes
        """
        item_key = {k: item.get(k) for k in (PARTITION_KEY, SORT_KEY)}

        record_type = item.get(RECORD_TYPE_ATTR)
        if record_type != cls.RECORD_TYPE.value:
            raise MalformedRecordError(
                f"Expected recordType {cls.RECORD_TYPE.value!r}, found {record_type!r}", item_key
            )

        defined = cls.defined_attributes()
        data = {k: from_dynamodb_number(v) for k, v in item.items() if k in defined}
        data['extensions'] = {
            k: v for k, v in item.items()
            if k not in defined and k not in STRUCTURAL_ATTRIBUTES
        }

        try:
            entity = cls.model_validate(data)
            derived = entity.key
        except (PydanticValidationError, InvalidIdentifierError) as e:
            logger.error(f"Failed to decode {cls.__name__} at {item_key}: {e}")
            raise MalformedRecordError(f"Failed to decode {cls.__name__}: {e}", item_key, e) from e

        if derived.as_dict() != item_key:
            raise MalformedRecordError(
                f"Stored key {item_key} does not match derived key {derived.as_dict()}", item_key
            )
        return entity

    def to_api_dict(self) -> Dict[str, Any]:
        """JSON-ready representation with extensions flattened in."""
        data = dict(self.extensions)
        data.update(self.model_dump(mode='json', by_alias=True, exclude={'extensions'}))
        return data
