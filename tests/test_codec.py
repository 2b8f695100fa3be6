"""Tests for hubuum_client.codec."""

from __future__ import annotations

import json
from datetime import datetime

import pytest
from pydantic import BaseModel

from hubuum_client.codec import JsonCodec
from hubuum_client.exceptions import CodecError
from hubuum_client.resources import Class, ClassPatch, ClassPost

from conftest import class_json


@pytest.fixture
def codec() -> JsonCodec:
    return JsonCodec()


class TestEncode:
    def test_model_omits_unset_fields(self, codec: JsonCodec) -> None:
        body = codec.encode(ClassPatch(description="new"))
        assert json.loads(body) == {"description": "new"}

    def test_model_keeps_explicit_none(self, codec: JsonCodec) -> None:
        body = codec.encode(ClassPatch(json_schema=None))
        assert json.loads(body) == {"json_schema": None}

    def test_post_model(self, codec: JsonCodec) -> None:
        body = codec.encode(ClassPost(name="router", description="", namespace_id=1))
        assert json.loads(body) == {"name": "router", "description": "", "namespace_id": 1}

    def test_dict(self, codec: JsonCodec) -> None:
        body = codec.encode({"name": "router", "when": datetime(2024, 1, 1)})
        assert json.loads(body) == {"name": "router", "when": "2024-01-01T00:00:00"}

    def test_dict_and_model_encode_alike(self, codec: JsonCodec) -> None:
        class Stamped(BaseModel):
            created_at: datetime

        when = datetime(2024, 1, 2, 3, 4, 5)
        from_dict = codec.encode({"created_at": when})
        assert from_dict == codec.encode(Stamped(created_at=when))
        assert from_dict == b'{"created_at":"2024-01-02T03:04:05"}'

    def test_dict_with_arbitrary_object(self, codec: JsonCodec) -> None:
        with pytest.raises(CodecError, match="Cannot encode payload"):
            codec.encode({"thing": object()})

    def test_unencodable_dict(self, codec: JsonCodec) -> None:
        payload: dict = {}
        payload["self"] = payload
        with pytest.raises(CodecError):
            codec.encode(payload)


class TestDecode:
    def test_single_model(self, codec: JsonCodec) -> None:
        cls = codec.decode(json.dumps(class_json(1)).encode(), Class)
        assert isinstance(cls, Class)
        assert cls.name == "router"

    def test_list_of_models(self, codec: JsonCodec) -> None:
        body = json.dumps([class_json(1), class_json(2, "switch")]).encode()
        items = codec.decode(body, list[Class])
        assert [c.id for c in items] == [1, 2]

    def test_empty_body(self, codec: JsonCodec) -> None:
        with pytest.raises(CodecError, match="empty body"):
            codec.decode(b"", Class)

    def test_invalid_json(self, codec: JsonCodec) -> None:
        with pytest.raises(CodecError):
            codec.decode(b"<html>", Class)

    def test_wrong_shape(self, codec: JsonCodec) -> None:
        with pytest.raises(CodecError, match="Class"):
            codec.decode(b'{"id": "one"}', Class)
