"""Tests for structured reclaimer logging."""

import logging

from reclaimer.models import ActionKind
from reclaimer.utils.command import CommandError
from reclaimer.utils.logging import (
    ACTION_TYPES,
    ActionType,
    LogLevel,
    ReclaimerLogger,
    action_type_for,
)


class TestReclaimerLogger:
    """Tests for ReclaimerLogger entries."""

    def test_probe_entries(self):
        reclaimer_logger = ReclaimerLogger()
        reclaimer_logger.log_probe("Docker", True, "3 running containers")
        reclaimer_logger.log_probe("Minikube", False)

        available, unavailable = reclaimer_logger.get_log_entries()
        assert available.action == ActionType.PROBE
        assert available.level == LogLevel.INFO
        assert available.details == {"detail": "3 running containers"}
        assert unavailable.level == LogLevel.DEBUG
        assert unavailable.message == "unavailable"

    def test_skip_is_warning(self, caplog):
        reclaimer_logger = ReclaimerLogger()
        with caplog.at_level(logging.WARNING, logger="reclaimer.utils.logging"):
            reclaimer_logger.log_system_skipped("Kubernetes (kubectl)", "cannot connect")
        assert "[SKIP] Kubernetes (kubectl)" in caplog.text
        assert "cannot connect" in caplog.text

    def test_error_entry_includes_returncode(self):
        reclaimer_logger = ReclaimerLogger()
        error = CommandError(["kubectl", "delete"], 1, "forbidden")
        reclaimer_logger.log_error("orchestrator", "web", error, action=ActionType.DELETE)

        entry = reclaimer_logger.get_log_entries()[0]
        assert entry.level == LogLevel.ERROR
        assert entry.action == ActionType.DELETE
        assert entry.error_info["error_type"] == "CommandError"
        assert entry.error_info["returncode"] == 1
        assert entry.to_dict()["error"]["error_message"].endswith("forbidden")

    def test_error_without_returncode(self):
        reclaimer_logger = ReclaimerLogger()
        reclaimer_logger.log_error("local_cluster", "*", OSError("busy"))
        entry = reclaimer_logger.get_log_entries()[0]
        assert entry.action == ActionType.ERROR
        assert "returncode" not in entry.error_info

    def test_dry_run_prefix(self, caplog):
        reclaimer_logger = ReclaimerLogger(dry_run=True)
        with caplog.at_level(logging.INFO, logger="reclaimer.utils.logging"):
            reclaimer_logger.log_action_planned(
                ActionType.DELETE, "orchestrator", "web", "delete namespace web"
            )
        assert "[DRY RUN] [DELETE] orchestrator web: Would delete namespace web" in caplog.text

    def test_action_complete_message(self):
        reclaimer_logger = ReclaimerLogger()
        reclaimer_logger.log_action_complete(ActionType.PRUNE, "container_engine", "*", "reclaimed 1GB")
        reclaimer_logger.log_action_complete(ActionType.PRUNE, "container_engine", "*")
        messages = [e.message for e in reclaimer_logger.get_log_entries()]
        assert messages == ["Completed: reclaimed 1GB", "Completed"]

    def test_entries_are_copied(self):
        reclaimer_logger = ReclaimerLogger()
        reclaimer_logger.log_probe("Docker", True)
        reclaimer_logger.get_log_entries().clear()
        assert len(reclaimer_logger.get_log_entries()) == 1

    def test_execution_banners(self, caplog):
        reclaimer_logger = ReclaimerLogger()
        with caplog.at_level(logging.INFO, logger="reclaimer.utils.logging"):
            reclaimer_logger.log_execution_start("REGULAR", ["Docker"])
            reclaimer_logger.log_execution_complete(5, 4, 1)
        assert "Level: REGULAR" in caplog.text
        assert "Total actions failed: 1" in caplog.text


def test_every_action_kind_has_a_log_category():
    assert set(ACTION_TYPES) == set(ActionKind)
    assert action_type_for(ActionKind.STOP_CONTAINER) == ActionType.STOP
    assert action_type_for(ActionKind.REPORT_UNUSED_PVCS) == ActionType.REPORT
