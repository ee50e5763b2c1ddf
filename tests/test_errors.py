"""Unit tests for inkwell.engine.errors and inkwell.engine.results."""

import json

import pytest

from inkwell.engine.errors import (
    InkwellAuthorizationError,
    InkwellConfigError,
    InkwellError,
    InkwellNotFoundError,
    InkwellStorageError,
    InkwellValidationError,
)
from inkwell.engine.results import OperationResult


class TestInkwellError:
    """Base error class tests."""

    def test_basic_creation(self):
        err = InkwellError("something broke")
        assert err.message == "something broke"
        assert str(err) == "something broke"
        assert err.error_type == "InkwellError"
        assert err.resource is None

    def test_to_dict(self):
        err = InkwellError("fail", resource="about.md", operation="save", attempt=2)
        d = err.to_dict()
        assert d["error_type"] == "InkwellError"
        assert d["resource"] == "about.md"
        assert d["operation"] == "save"
        assert d["context"] == {"attempt": "2"}
        assert "timestamp" in d

    def test_to_json(self):
        parsed = json.loads(InkwellError("fail").to_json())
        assert parsed["message"] == "fail"

    def test_repr(self):
        r = repr(InkwellError("fail", resource="about.md", operation="load"))
        assert "InkwellError: fail" in r
        assert "resource=about.md" in r
        assert "operation=load" in r


class TestSubclasses:

    @pytest.mark.parametrize("cls", [
        InkwellValidationError,
        InkwellNotFoundError,
        InkwellAuthorizationError,
        InkwellStorageError,
        InkwellConfigError,
    ])
    def test_inherits_base(self, cls):
        err = cls("x")
        assert isinstance(err, InkwellError)
        assert err.error_type == cls.__name__

    def test_validation_field(self):
        assert InkwellValidationError("bad", field="name").to_dict()["field"] == "name"

    def test_not_found_version(self):
        err = InkwellNotFoundError("gone", version=3)
        assert err.version == "3"
        assert err.to_dict()["version"] == "3"

    def test_storage_path(self, tmp_path):
        err = InkwellStorageError("disk", path=tmp_path)
        assert err.to_dict()["path"] == str(tmp_path)


class TestOperationResult:

    def test_success(self):
        result = OperationResult.success(5)
        assert result.ok
        assert bool(result) is True
        assert result.value == 5
        assert result.message is None
        assert result.unwrap() == 5

    def test_failure(self):
        result = OperationResult.failure(InkwellNotFoundError("about.md does not exist."))
        assert not result.ok
        assert bool(result) is False
        assert result.message == "about.md does not exist."
        assert result.error_type == "InkwellNotFoundError"
        with pytest.raises(InkwellNotFoundError):
            result.unwrap()
