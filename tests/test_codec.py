from dataclasses import dataclass

import pytest
from pydantic import BaseModel, Field

from api_http_protocol.codec import coerce_payload, decode_payload, encode_payload
from api_http_protocol.ports.validation import IValidatable
from api_http_protocol.primitives.exceptions import (
    BusinessError,
    DecodeError,
    EncodeError,
    PayloadValidationError,
)
from api_http_protocol.validation import validate_payload


class Item(BaseModel):
    id: int
    name: str = Field(alias="itemName")


class Stock(BaseModel):
    qty: int = Field(ge=1)


@dataclass
class Transfer:
    amount: int

    def validate(self) -> None:
        if self.amount <= 0:
            raise ValueError("amount must be positive")


@dataclass
class Guarded:
    def validate(self) -> None:
        raise BusinessError("403", "forbidden")


# --- Encoding ---


def test_encode_payload_is_compact_json() -> None:
    assert encode_payload({"x": 1}) == b'{"x":1}'
    assert encode_payload([1, "a"]) == b'[1,"a"]'


def test_encode_payload_passthrough_and_empty() -> None:
    assert encode_payload(None) == b""
    assert encode_payload(b"\x00raw") == b"\x00raw"
    assert encode_payload("text") == b"text"


def test_encode_payload_uses_aliases() -> None:
    item = Item(id=1, itemName="pen")

    assert encode_payload(item) == b'{"id":1,"itemName":"pen"}'
    assert encode_payload({"item": item}) == b'{"item":{"id":1,"itemName":"pen"}}'


def test_encode_payload_rejects_unserializable() -> None:
    with pytest.raises(EncodeError, match="object"):
        encode_payload(object())


# --- Decoding ---


def test_decode_payload_into_model() -> None:
    item = decode_payload(b'{"id": 3, "itemName": "cup"}', Item)

    assert item == Item(id=3, itemName="cup")


def test_decode_payload_without_type_gives_plain_json() -> None:
    assert decode_payload(b'{"a": [1, 2]}') == {"a": [1, 2]}
    assert decode_payload(b"") is None


def test_decode_payload_malformed_is_decode_error() -> None:
    with pytest.raises(DecodeError):
        decode_payload(b"{not json", Item)
    with pytest.raises(DecodeError):
        decode_payload(b"{not json")


def test_decode_payload_shape_mismatch_is_decode_error() -> None:
    with pytest.raises(DecodeError) as exc:
        decode_payload(b'{"id": "abc"}', Item)

    assert "'id'" in str(exc.value)
    assert "itemName" in str(exc.value)


def test_decode_payload_failed_constraint_is_validation_error() -> None:
    with pytest.raises(PayloadValidationError) as exc:
        decode_payload(b'{"qty": 0}', Stock)

    assert list(exc.value.errors) == ["qty"]


def test_coerce_payload_converts_query_strings() -> None:
    assert coerce_payload({"amount": "5"}, Transfer) == Transfer(amount=5)
    assert coerce_payload({"a": "1"}) == {"a": "1"}

    with pytest.raises(DecodeError):
        coerce_payload({}, Transfer)
    with pytest.raises(PayloadValidationError):
        coerce_payload({"qty": "-1"}, Stock)


# --- Validate capability ---


def test_validate_payload_wraps_plain_errors() -> None:
    validate_payload(Transfer(amount=5))

    with pytest.raises(PayloadValidationError) as exc:
        validate_payload(Transfer(amount=0))

    assert exc.value.errors == {"__root__": ["amount must be positive"]}


def test_validate_payload_keeps_package_errors() -> None:
    with pytest.raises(BusinessError):
        validate_payload(Guarded())


def test_validate_payload_ignores_models_and_plain_values() -> None:
    validate_payload(Item(id=1, itemName="pen"))
    validate_payload({"x": 1})
    validate_payload(None)


def test_validate_capability_is_recognized_structurally() -> None:
    assert isinstance(Transfer(amount=1), IValidatable)
    assert not isinstance({"amount": 1}, IValidatable)
