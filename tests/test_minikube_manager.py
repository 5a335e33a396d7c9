"""Tests for the local-cluster manager."""

import json

import pytest

from reclaimer.cleanup.minikube_manager import CACHE_DIRECTORIES, MinikubeManager
from reclaimer.models import ClusterState


class TestClusterState:
    """Tests for status parsing."""

    @pytest.mark.parametrize(
        "stdout,expected",
        [
            (json.dumps({"Name": "minikube", "Host": "Running"}), ClusterState.RUNNING),
            (json.dumps({"Name": "minikube", "Host": "Stopped"}), ClusterState.STOPPED),
            (json.dumps({"Name": "minikube", "Host": "Paused"}), ClusterState.STOPPED),
            (json.dumps({"Name": "minikube", "Host": "Nonexistent"}), ClusterState.ABSENT),
            (json.dumps([{"Host": "Running"}, {"Host": "Stopped"}]), ClusterState.RUNNING),
            ("", ClusterState.ABSENT),
            ('* Profile "minikube" not found.', ClusterState.ABSENT),
            ("[]", ClusterState.ABSENT),
        ],
    )
    def test_state_from_status_output(self, mock_runner, make_result, stdout, expected):
        mock_runner.run.return_value = make_result(stdout=stdout, returncode=7)
        assert MinikubeManager(mock_runner).cluster_state() == expected

    def test_status_ignores_exit_code(self, mock_runner):
        MinikubeManager(mock_runner, status_timeout=20).cluster_state()
        args, kwargs = mock_runner.run.call_args
        assert args[0] == ["minikube", "status", "--output=json"]
        assert kwargs == {"timeout": 20, "check": False}


class TestClusterActions:
    """Tests for cluster cleanup commands."""

    def test_prune_node_engine(self, mock_runner):
        MinikubeManager(mock_runner).prune_node_engine()
        mock_runner.run.assert_called_once_with(
            ["minikube", "ssh", "--", "docker system prune --force --volumes"]
        )

    def test_delete_image_cache(self, mock_runner, make_result):
        mock_runner.run.side_effect = [make_result(stdout="alpine:3\nbusybox\n"), make_result()]
        detail = MinikubeManager(mock_runner).delete_image_cache()
        assert detail == "removed 2 cached images"
        assert mock_runner.run.call_args_list[1].args[0] == [
            "minikube",
            "cache",
            "delete",
            "alpine:3",
            "busybox",
        ]

    def test_delete_image_cache_when_empty(self, mock_runner):
        detail = MinikubeManager(mock_runner).delete_image_cache()
        assert detail == "image cache already empty"
        assert mock_runner.run.call_count == 1

    def test_delete_cluster(self, mock_runner):
        assert MinikubeManager(mock_runner).delete_cluster() == "deleted local cluster"
        mock_runner.run.assert_called_once_with(["minikube", "delete"])


class TestCacheDirectories:
    """Tests for on-disk cache removal."""

    def test_removes_cache_and_logs(self, mock_runner, tmp_path):
        for name in CACHE_DIRECTORIES:
            (tmp_path / name / "nested").mkdir(parents=True)
            (tmp_path / name / "nested" / "blob").write_text("x")
        (tmp_path / "profiles").mkdir()

        detail = MinikubeManager(mock_runner, minikube_dir=str(tmp_path)).remove_cache_directories()

        assert detail.startswith("removed ")
        assert not (tmp_path / "cache").exists()
        assert not (tmp_path / "logs").exists()
        assert (tmp_path / "profiles").exists()
        mock_runner.run.assert_not_called()

    def test_nothing_to_remove(self, mock_runner, tmp_path):
        manager = MinikubeManager(mock_runner, minikube_dir=str(tmp_path))
        assert manager.remove_cache_directories() == "no cache directories present"

    def test_has_home_directory(self, mock_runner, tmp_path):
        assert MinikubeManager(mock_runner, minikube_dir=str(tmp_path)).has_home_directory()
        missing = tmp_path / "missing"
        assert not MinikubeManager(mock_runner, minikube_dir=str(missing)).has_home_directory()
