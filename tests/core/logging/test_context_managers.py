"""Tests for core.logging.context_managers module."""

import logging

import pytest

from core.errors.exceptions import TransportError
from core.logging.context import clear_log_context, get_log_context, set_log_context
from core.logging.context_managers import LogContext, OperationContext, log_operation


class TestLogContextManager:
    def setup_method(self):
        clear_log_context()

    def teardown_method(self):
        clear_log_context()

    def test_sets_and_restores(self):
        set_log_context(request_id="outer")

        with LogContext(request_id="inner", session_id="s1"):
            ctx = get_log_context()
            assert ctx["request_id"] == "inner"
            assert ctx["session_id"] == "s1"

        ctx = get_log_context()
        assert ctx["request_id"] == "outer"
        assert ctx["session_id"] == ""

    def test_none_values_keep_current(self):
        set_log_context(principal="ann")

        with LogContext(session_id="s1"):
            assert get_log_context()["principal"] == "ann"

    def test_restores_on_exception(self):
        with pytest.raises(ValueError):
            with LogContext(principal="bob"):
                raise ValueError("boom")

        assert get_log_context()["principal"] == ""


class TestOperationContext:
    def test_logs_completion_with_duration(self, caplog):
        logger = logging.getLogger("test.operation")

        with caplog.at_level(logging.DEBUG, logger="test.operation"):
            with OperationContext(logger, "list_users", http_method="GET") as op:
                op.add_context(http_status=200)

        record = caplog.records[-1]
        assert record.getMessage() == "Completed: list_users"
        assert record.http_status == 200
        assert record.http_method == "GET"
        assert record.duration_ms >= 0

    def test_logs_failure_with_category(self, caplog):
        logger = logging.getLogger("test.operation")

        with caplog.at_level(logging.DEBUG, logger="test.operation"):
            with pytest.raises(TransportError):
                with log_operation(logger, "get_user"):
                    raise TransportError("HTTP 503", status_code=503)

        record = caplog.records[-1]
        assert record.levelno == logging.ERROR
        assert record.getMessage() == "Failed: get_user"
        assert record.error_category == "transient"

    def test_operation_bound_while_active(self):
        clear_log_context()
        logger = logging.getLogger("test.operation")

        with OperationContext(logger, "register"):
            assert get_log_context()["operation"] == "register"

        assert get_log_context()["operation"] == ""

    def test_operation_unbound_after_failure(self):
        clear_log_context()

        with pytest.raises(ValueError):
            with log_operation(logging.getLogger("test.operation"), "get_group"):
                raise ValueError("boom")

        assert get_log_context()["operation"] == ""
