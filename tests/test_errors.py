"""Unit tests for flagguard.engine.errors — Error hierarchy & serialization."""

import json

from flagguard.engine.context import ExecutionContext, set_execution_context
from flagguard.engine.errors import (
    FlagGuardAttributeError,
    FlagGuardConfigError,
    FlagGuardError,
    FlagGuardTypeMismatchError,
    FlagGuardValidationError,
)
from flagguard.validators.base import ValidationIssue


class TestFlagGuardError:
    def test_basic_creation(self):
        err = FlagGuardError("something broke")
        assert err.message == "something broke"
        assert str(err) == "something broke"
        assert err.error_type == "FlagGuardError"
        assert err.execution_id is None
        assert err.record_type is None

    def test_execution_id_from_context(self):
        ctx = ExecutionContext(user_id=1)
        set_execution_context(ctx)
        assert FlagGuardError("fail").execution_id == ctx.execution_id

    def test_explicit_execution_id_wins(self):
        set_execution_context(ExecutionContext())
        assert FlagGuardError("fail", execution_id="exec_1").execution_id == "exec_1"

    def test_to_dict(self):
        err = FlagGuardError("fail", record_type="Poll", attribute="is_promoted", table="polls")
        d = err.to_dict()
        assert d["error_type"] == "FlagGuardError"
        assert d["record_type"] == "Poll"
        assert d["attribute"] == "is_promoted"
        assert d["context"] == {"table": "polls"}
        assert "timestamp" in d

    def test_to_json(self):
        parsed = json.loads(FlagGuardError("fail").to_json())
        assert parsed["message"] == "fail"

    def test_repr(self):
        r = repr(FlagGuardError("fail", record_type="Poll", attribute="x"))
        assert "FlagGuardError: fail" in r
        assert "record_type=Poll" in r


class TestSubclasses:
    def test_hierarchy(self):
        for cls in (
            FlagGuardTypeMismatchError,
            FlagGuardAttributeError,
            FlagGuardConfigError,
            FlagGuardValidationError,
        ):
            assert issubclass(cls, FlagGuardError)

    def test_type_mismatch_fields(self):
        err = FlagGuardTypeMismatchError("bad", given_type="dict", missing=["record_type"])
        d = err.to_dict()
        assert d["given_type"] == "dict"
        assert d["missing"] == ["record_type"]

    def test_config_path(self):
        assert FlagGuardConfigError("bad", config_path="x.yaml").config_path == "x.yaml"

    def test_validation_error_serializes_issues(self):
        issue = ValidationIssue("Poll", "is_promoted", "duplicate", code="duplicate_guarded_value")
        err = FlagGuardValidationError("rejected", validation_errors=[issue])
        d = err.to_dict()
        assert err.validation_errors == [issue]
        assert d["validation_errors"][0]["code"] == "duplicate_guarded_value"
        json.loads(err.to_json())
