"""JSON codec for typed request and response bodies.

The codec turns Pydantic models into request bytes and response bytes
back into Pydantic models (or lists of them). It is the only place that
touches JSON; every failure surfaces as
:class:`~hubuum_client.exceptions.CodecError` so callers can wrap it into
the right API or auth error without inspecting Pydantic internals.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, TypeVar, Union

from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from hubuum_client.exceptions import CodecError

T = TypeVar("T")

Payload = Union[BaseModel, dict[str, Any]]


@lru_cache(maxsize=None)
def _adapter(target: Any) -> TypeAdapter:
    return TypeAdapter(target)


class JsonCodec:
    """Encode and decode JSON bodies with Pydantic.

    Example::

        codec = JsonCodec()
        body = codec.encode(ClassPost(name="router", namespace_id=1, description="x"))
        classes = codec.decode(response.body, list[Class])
    """

    content_type = "application/json"

    def encode(self, payload: Payload) -> bytes:
        """Serialise *payload* to JSON bytes.

        Pydantic models are dumped with unset fields omitted, so a patch
        model only sends the fields the caller actually set. Dicts go
        through the same serialiser, so datetimes are ISO-8601 either way.

        Raises:
            CodecError: If the payload is not JSON-serialisable.
        """
        if isinstance(payload, BaseModel):
            try:
                return payload.model_dump_json(exclude_unset=True).encode("utf-8")
            except (PydanticValidationError, TypeError, ValueError) as exc:
                raise CodecError(f"Cannot encode {type(payload).__name__}: {exc}") from exc
        try:
            return _adapter(dict[str, Any]).dump_json(payload)
        except (TypeError, ValueError) as exc:
            raise CodecError(f"Cannot encode payload: {exc}") from exc

    def decode(self, body: bytes, target: type[T]) -> T:
        """Deserialise *body* into *target* (a model class or e.g. ``list[Model]``).

        Raises:
            CodecError: If the body is empty, not JSON, or does not match
                the target shape.
        """
        if not body:
            raise CodecError(f"Cannot decode empty body as {_type_name(target)}")
        try:
            return _adapter(target).validate_json(body)
        except PydanticValidationError as exc:
            raise CodecError(
                f"Cannot decode response as {_type_name(target)}: {exc}"
            ) from exc


def _type_name(target: Any) -> str:
    if isinstance(target, type):
        return target.__name__
    return str(target)
