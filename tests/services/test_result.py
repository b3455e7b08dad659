"""Tests for ResultEnvelope: the universal service contract."""

from __future__ import annotations

import pydantic
import pytest

from kblog.services.result import ResultCode, ResultEnvelope


class TestResultEnvelope:
    def test_success(self) -> None:
        envelope = ResultEnvelope.success({"id": "0"})
        assert envelope.ok is True
        assert envelope.result_code is ResultCode.OK
        assert envelope.payload == {"id": "0"}
        assert envelope.error_message is None

    def test_success_with_empty_list(self) -> None:
        assert ResultEnvelope.success([]).payload == []

    def test_failure(self) -> None:
        envelope = ResultEnvelope.failure("boom")
        assert envelope.ok is False
        assert envelope.result_code == "Error"
        assert envelope.payload is None
        assert envelope.error_message == "boom"

    @pytest.mark.parametrize(
        "fields",
        [
            {"result_code": "OK"},
            {"result_code": "OK", "payload": [], "error_message": "x"},
            {"result_code": "Error"},
            {"result_code": "Error", "payload": {}, "error_message": "x"},
        ],
    )
    def test_exactly_one_side(self, fields: dict[str, object]) -> None:
        with pytest.raises(pydantic.ValidationError):
            ResultEnvelope(**fields)

    def test_frozen(self) -> None:
        envelope = ResultEnvelope.success([])
        with pytest.raises(pydantic.ValidationError):
            envelope.payload = [1]  # type: ignore[misc]

    def test_wire_form_is_camel_case(self) -> None:
        assert ResultEnvelope.success({"id": "1"}).to_wire() == {
            "resultCode": "OK",
            "payload": {"id": "1"},
        }
        assert ResultEnvelope.failure("nope").to_wire() == {
            "resultCode": "Error",
            "errorMessage": "nope",
        }

    def test_accepts_camel_case_input(self) -> None:
        envelope = ResultEnvelope.model_validate({"resultCode": "Error", "errorMessage": "x"})
        assert envelope.error_message == "x"
