"""ResultEnvelope: the universal service contract.

INVARIANT: All service operations return a ResultEnvelope. Exactly one of
``payload`` / ``error_message`` is populated, selected by ``result_code``.
The CLI and any transport host consume this type; callers branch on
``result_code``, never on exceptions.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any, Self

from pydantic import BaseModel, model_validator
from pydantic.alias_generators import to_camel


class ResultCode(StrEnum):
    OK = "OK"
    ERROR = "Error"


class ResultEnvelope(BaseModel):
    """Uniform return shape of every service operation.

    Attributes:
        result_code: ``OK`` or ``Error``.
        payload: A document or a list of documents (``OK`` only).
        error_message: Why the operation failed (``Error`` only).

    Serializes with camelCase keys (``resultCode``, ``errorMessage``).
    """

    model_config = {
        "frozen": True,
        "alias_generator": to_camel,
        "populate_by_name": True,
    }

    result_code: ResultCode
    payload: Any = None
    error_message: str | None = None

    @model_validator(mode="after")
    def _exactly_one_side(self) -> Self:
        if self.result_code is ResultCode.OK:
            if self.payload is None or self.error_message is not None:
                msg = "OK envelopes carry a payload and no error message"
                raise ValueError(msg)
        elif self.error_message is None or self.payload is not None:
            msg = "Error envelopes carry an error message and no payload"
            raise ValueError(msg)
        return self

    @classmethod
    def success(cls, payload: Any) -> ResultEnvelope:
        return cls(result_code=ResultCode.OK, payload=payload)

    @classmethod
    def failure(cls, message: str) -> ResultEnvelope:
        return cls(result_code=ResultCode.ERROR, error_message=message)

    @property
    def ok(self) -> bool:
        """Whether the operation succeeded."""
        return self.result_code is ResultCode.OK

    def to_wire(self) -> dict[str, Any]:
        """camelCase mapping with the absent side omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
