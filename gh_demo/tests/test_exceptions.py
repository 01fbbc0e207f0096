"""Tests for layered errors and the batch error collector."""

import pytest

from gh_demo.libs.exceptions import (
    ErrorCollector,
    ErrorLayer,
    ItemError,
    LayeredError,
    NotFoundError,
    PartialFailureError,
    api_error,
    as_layered_error,
    config_error,
    context_error,
    file_error,
    is_context_error,
    is_layer,
    is_operation,
    is_project_permission_error,
    project_error,
    project_permission_error,
    validation_error,
    with_context_safe,
    wrap_with_operation,
)


class TestLayeredError:
    def test_str_without_cause(self):
        err = validation_error("validate_issue", "issue title cannot be empty")
        assert str(err) == "[validation:validate_issue] issue title cannot be empty"

    def test_str_with_cause(self):
        err = api_error("create_issue", "failed to create GitHub issue", RuntimeError("boom"))
        assert str(err) == "[api:create_issue] failed to create GitHub issue: boom"
        assert err.unwrap() is err.__cause__
        assert isinstance(err.unwrap(), RuntimeError)

    def test_with_context_chains(self):
        err = file_error("read_issues", "failed to read issues file").with_context("path", "/tmp/x").with_context(
            "attempt", 2
        )
        assert err.context == {"path": "/tmp/x", "attempt": "2"}

    def test_layer_accepts_string(self):
        assert LayeredError("config", "load_settings", "bad").layer == ErrorLayer.CONFIG

    def test_unknown_layer_rejected(self):
        with pytest.raises(ValueError):
            LayeredError("network", "op", "bad")

    def test_project_permission_error(self):
        err = project_permission_error("add_to_project", "no access")
        assert err.layer == ErrorLayer.PROJECT
        assert err.context["type"] == "permission"
        assert is_project_permission_error(err)
        assert not is_project_permission_error(project_error("add_to_project", "no access"))
        assert not is_project_permission_error(None)

    @pytest.mark.parametrize(
        "cancelled, expected",
        [
            (True, "operation was cancelled (interrupted by user)"),
            (False, "operation timed out (deadline exceeded)"),
        ],
    )
    def test_context_error_message(self, cancelled, expected):
        err = context_error("create_issue", cancelled=cancelled)
        assert err.layer == ErrorLayer.CONTEXT
        assert err.message == expected


class TestNotFoundError:
    def test_message_and_context(self):
        err = NotFoundError("get_label_id", "label", "bug")
        assert str(err) == "[validation:get_label_id] label 'bug' not found"
        assert err.context["kind"] == "label"
        assert err.context["name"] == "bug"
        assert is_layer(err, ErrorLayer.VALIDATION)

    def test_is_layered_error(self):
        assert isinstance(NotFoundError("get_user_id", "user", "ghost"), LayeredError)


class TestHelpers:
    def test_wrap_with_operation_none(self):
        assert wrap_with_operation(None, ErrorLayer.API, "op", "msg") is None

    def test_wrap_with_operation(self):
        inner = validation_error("validate_label", "label name cannot be empty")
        outer = wrap_with_operation(inner, ErrorLayer.API, "delete_label", "failed to delete label")
        assert outer is not None
        assert outer.cause is inner
        assert str(outer) == (
            "[api:delete_label] failed to delete label: [validation:validate_label] label name cannot be empty"
        )

    def test_with_context_safe_ignores_other_errors(self):
        err = ValueError("plain")
        assert with_context_safe(err, "key", "value") is err
        assert with_context_safe(None, "key", "value") is None

    def test_with_context_safe_layered(self):
        err = config_error("load_settings", "bad")
        assert with_context_safe(err, "path", "/x") is err
        assert err.context["path"] == "/x"

    def test_as_layered_error_walks_causes(self):
        layered = context_error("list_issues", cancelled=True)
        try:
            try:
                raise layered
            except LayeredError as ex:
                raise RuntimeError("outer") from ex
        except RuntimeError as outer:
            assert as_layered_error(outer) is layered
            assert is_context_error(outer)
            assert is_operation(outer, "list_issues")

    def test_as_layered_error_plain(self):
        assert as_layered_error(ValueError("x")) is None
        assert not is_context_error(None)


class TestItemError:
    def test_format(self):
        cause = api_error("create_issue", "failed to create GitHub issue", RuntimeError("boom"))
        err = ItemError("Issue", 0, "Demo", cause)
        assert str(err) == "Issue 1 (Demo): [api:create_issue] failed to create GitHub issue: boom"
        assert err.__cause__ is cause
        assert is_layer(err, ErrorLayer.API)


class TestErrorCollector:
    def test_no_errors(self):
        collector = ErrorCollector("create_issues")
        collector.add(None)
        assert not collector.has_errors()
        assert len(collector) == 0
        assert collector.result() is None

    def test_single_error_returned_unchanged(self):
        collector = ErrorCollector("create_issues")
        err = api_error("create_issue", "failed")
        collector.add(err)
        assert collector.has_errors()
        assert collector.result() is err

    def test_multiple_errors_combined(self):
        collector = ErrorCollector("create_issues")
        first = api_error("create_issue", "first failed")
        second = validation_error("validate_issue", "issue title cannot be empty")
        collector.add(first)
        collector.add(None)
        collector.add(second)

        result = collector.result()
        assert isinstance(result, PartialFailureError)
        assert result.errors == [str(first), str(second)]
        assert str(result) == (
            "some items failed to create:\n"
            "  - [api:create_issue] first failed\n"
            "  - [validation:validate_issue] issue title cannot be empty"
        )

    def test_errors_is_a_copy(self):
        collector = ErrorCollector("op")
        collector.add(ValueError("x"))
        collector.errors.clear()
        assert len(collector) == 1
