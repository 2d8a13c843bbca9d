"""Business envelopes wrapping payloads on the wire.

Two layouts are supported:

* flat — ``{"code": "0", "message": "success", "data": ...}``
* nested — ``{"_head": {...}, "_param": ...}`` for requests and
  ``{"_head": {...}, "_data": {"_ret", "_errCode", "_errStr", "_data"}}``
  for responses.
"""

from __future__ import annotations

import time
import uuid
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from .constants import BUSINESS_CODE_SUCCESS, BUSINESS_MESSAGE_SUCCESS
from .primitives.exceptions import BusinessError

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    """Flat ``code``/``message``/``data`` envelope."""

    code: str = BUSINESS_CODE_SUCCESS
    message: str = BUSINESS_MESSAGE_SUCCESS
    data: T | None = None

    @property
    def is_success(self) -> bool:
        return self.code == BUSINESS_CODE_SUCCESS

    def raise_for_code(self) -> None:
        """Raise :class:`BusinessError` unless the code signals success."""
        if self.is_success:
            return
        message = self.message or f"{self.data}"
        raise BusinessError(self.code, message)


# ── Nested layout ────────────────────────────────────────────────────

NESTED_VERSION = "0.01"
NESTED_GROUP_NO = "1"
MSG_TYPE_REQUEST = "request"
MSG_TYPE_RESPONSE = "response"


class Head(BaseModel):
    """Routing and tracing header of the nested layout."""

    model_config = ConfigDict(populate_by_name=True)

    version: str = Field(NESTED_VERSION, alias="_version")
    msg_type: str = Field(MSG_TYPE_REQUEST, alias="_msgType")
    timestamps: str = Field("", alias="_timestamps")
    invoke_id: str = Field("", alias="_invokeId")
    caller_service_id: str = Field("", alias="_callerServiceId")
    group_no: str = Field(NESTED_GROUP_NO, alias="_groupNo")
    interface: str = Field("", alias="_interface")
    remark: str = Field("", alias="_remark")

    def stamped(self) -> Head:
        """Copy with a fresh timestamp and invoke id, set per call."""
        return self.model_copy(
            update={
                "timestamps": str(int(time.time())),
                "invoke_id": uuid.uuid4().hex,
            }
        )

    def as_response(self) -> Head:
        """Answer head: same invoke id and routing, fresh timestamp."""
        return self.model_copy(
            update={
                "msg_type": MSG_TYPE_RESPONSE,
                "timestamps": str(int(time.time())),
                "remark": MSG_TYPE_RESPONSE,
            }
        )


def interface_from_path(api_path: str) -> str:
    """``/efence/admin/update`` → ``efence.admin.update``."""
    return api_path.replace("/", ".").strip(".")


class NestedRequest(BaseModel, Generic[T]):
    model_config = ConfigDict(populate_by_name=True)

    head: Head = Field(default_factory=Head, alias="_head")
    param: T | None = Field(None, alias="_param")


class NestedData(BaseModel, Generic[T]):
    model_config = ConfigDict(populate_by_name=True)

    ret: str = Field(BUSINESS_CODE_SUCCESS, alias="_ret")
    err_code: str = Field(BUSINESS_CODE_SUCCESS, alias="_errCode")
    err_str: str = Field(BUSINESS_MESSAGE_SUCCESS, alias="_errStr")
    data: T | None = Field(None, alias="_data")


class NestedResponse(BaseModel, Generic[T]):
    model_config = ConfigDict(populate_by_name=True)

    head: Head = Field(default_factory=Head, alias="_head")
    data: NestedData[T] = Field(default_factory=NestedData, alias="_data")

    def raise_for_code(self) -> None:
        if self.data.err_code != BUSINESS_CODE_SUCCESS:
            raise BusinessError(self.data.err_code, self.data.err_str)


def envelope_of(wrapper: Any, payload_type: Any) -> Any:
    """Parametrize a generic envelope with *payload_type* (``Any`` if unset)."""
    return wrapper[payload_type if payload_type is not None else Any]
