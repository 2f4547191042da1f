"""
Cache Value Schemas

Per-call structural validators for cached values, built on pydantic.
The same schema parses cache hits and validates freshly computed values,
but the two failures are reported with different exceptions.
"""

from typing import Any, Generic, Optional, TypeVar, Union

from pydantic import TypeAdapter, ValidationError

from .exceptions import CacheShapeMismatchError, ComputedValueInvalidError

T = TypeVar("T")


class CacheSchema(Generic[T]):
    """
    Validator and codec for one cached value type.

    Accepts anything pydantic can validate: builtins, typing generics,
    dataclasses, TypedDicts and BaseModel subclasses. Validation is strict
    by default, so a blob or computed value of the wrong type is rejected
    rather than coerced (``"5"`` is not an ``int``).

    Example:
        schema = CacheSchema(list[RecipePreview])
    """

    def __init__(
        self, value_type: Any, name: Optional[str] = None, strict: bool = True
    ):
        self.value_type = value_type
        self.strict = strict
        self.name = name or getattr(value_type, "__name__", repr(value_type))
        self._adapter: TypeAdapter = TypeAdapter(value_type)

    @classmethod
    def coerce(cls, schema: Union["CacheSchema[T]", Any]) -> "CacheSchema[T]":
        """Wrap a bare type in a schema; pass schemas through."""
        return schema if isinstance(schema, CacheSchema) else cls(schema)

    def parse_cached(self, key: str, raw: Union[bytes, str]) -> T:
        """
        Decode a stored blob into the expected type.

        Raises:
            CacheShapeMismatchError: If the blob is not valid JSON or does not
                match the schema (e.g. left over from an older deploy)
        """
        try:
            return self._adapter.validate_json(raw, strict=self.strict)
        except ValidationError as e:
            raise CacheShapeMismatchError(
                key, f"{e.error_count()} validation error(s) against {self.name}"
            ) from e

    def validate_computed(self, key: str, value: Any) -> T:
        """
        Validate a freshly computed value before it is cached.

        Raises:
            ComputedValueInvalidError: If the value violates the schema
        """
        try:
            return self._adapter.validate_python(value, strict=self.strict)
        except ValidationError as e:
            raise ComputedValueInvalidError(
                key, e.errors(include_url=False, include_context=False)
            ) from e

    def dump(self, value: T) -> bytes:
        """Serialize a validated value to JSON bytes."""
        return self._adapter.dump_json(value)

    def __repr__(self) -> str:
        return f"CacheSchema({self.name})"
