"""Unit tests for the build and run commands."""

from wsbox.cli.main import app
from wsbox.core.engine import BuildStage


def invoke(runner, workspace, *args):
    return runner.invoke(app, [*args, "--workspace", str(workspace)])


class TestBuildCommand:
    def test_fresh_workspace(self, runner, workspace, cli_engine, state):
        result = invoke(runner, workspace, "build")

        assert result.exit_code == 0, result.stdout
        stages = [request.target_stage for request in cli_engine.builds]
        assert stages == [BuildStage.BASE, BuildStage.WORKSPACE]
        assert state.load_fingerprint() is not None
        assert "Built" in result.stdout

    def test_always_rebuilds(self, runner, workspace, cli_engine):
        invoke(runner, workspace, "build")
        result = invoke(runner, workspace, "build")

        assert result.exit_code == 0
        workspace_builds = [
            r for r in cli_engine.builds if r.target_stage is BuildStage.WORKSPACE
        ]
        assert len(workspace_builds) == 2

    def test_install_and_no_cache(self, runner, workspace, cli_engine):
        result = invoke(
            runner, workspace, "build", "--install", "python@3.12.8,nodejs", "--no-cache"
        )

        assert result.exit_code == 0
        request = cli_engine.builds[-1]
        assert request.build_args["INSTALL_TOOLS"] == "python@3.12.8,nodejs"
        assert not request.use_cache

    def test_rebuild_base(self, runner, workspace, cli_engine):
        cli_engine.add_image("wsbox-base")

        invoke(runner, workspace, "build")
        assert cli_engine.builds[0].target_stage is BuildStage.WORKSPACE

        invoke(runner, workspace, "build", "--rebuild-base")
        assert cli_engine.builds[1].target_stage is BuildStage.BASE

    def test_failure_keeps_fingerprint_absent(self, runner, workspace, cli_engine, state):
        cli_engine.add_image("wsbox-base")
        cli_engine.fail_builds = True

        result = invoke(runner, workspace, "build")

        assert result.exit_code == 1
        assert "Failed to build" in result.stdout
        assert state.load_fingerprint() is None

    def test_invalid_settings(self, runner, workspace, cli_engine, monkeypatch):
        monkeypatch.setenv("WSBOX_CLEANUP_DAYS", "soon")

        result = invoke(runner, workspace, "build")

        assert result.exit_code == 1
        assert cli_engine.builds == []


class TestRunCommand:
    def test_install_requires_build(self, runner, workspace, cli_engine):
        result = invoke(runner, workspace, "run", "--install", "python@3.12.8")

        assert result.exit_code == 1
        assert "--install requires --build" in result.stdout
        assert cli_engine.builds == []
        assert cli_engine.list_calls == 0

    def test_shell_and_command_conflict(self, runner, workspace, cli_engine):
        result = invoke(runner, workspace, "run", "--shell", "--command", "ls")

        assert result.exit_code == 1
        assert cli_engine.list_calls == 0

    def test_second_run_reuses_image(self, runner, workspace, cli_engine):
        first = invoke(runner, workspace, "run")
        builds = len(cli_engine.builds)
        second = invoke(runner, workspace, "run")

        assert first.exit_code == 0
        assert second.exit_code == 0
        assert len(cli_engine.builds) == builds
        assert "up to date" in second.stdout

    def test_rebuild_base_rebuilds_current_workspace(self, runner, workspace, cli_engine):
        invoke(runner, workspace, "run")
        builds = len(cli_engine.builds)

        result = invoke(runner, workspace, "run", "--rebuild-base")

        assert result.exit_code == 0
        stages = [request.target_stage for request in cli_engine.builds[builds:]]
        assert stages == [BuildStage.BASE, BuildStage.WORKSPACE]
        assert "up to date" not in result.stdout

    def test_install_with_build_on_current_image(self, runner, workspace, cli_engine):
        invoke(runner, workspace, "run")

        result = invoke(runner, workspace, "run", "--build", "--install", "python@3.12.8")

        assert result.exit_code == 0
        assert cli_engine.builds[-1].build_args["INSTALL_TOOLS"] == "python@3.12.8"

    def test_command_mode(self, runner, workspace, cli_engine, state):
        result = invoke(runner, workspace, "run", "-c", "make test", "-d")

        assert result.exit_code == 0
        assert cli_engine.last_run["image"] == state.load_image_name()
        assert cli_engine.last_run["command"] == ["bash", "-lc", "make test"]
        assert cli_engine.last_run["interactive"] is False
        assert cli_engine.last_run["mount_engine_socket"] is True

    def test_shell_mode(self, runner, workspace, cli_engine):
        result = invoke(runner, workspace, "run", "--shell")

        assert result.exit_code == 0
        assert cli_engine.last_run["command"] == ["bash", "-l"]
        assert cli_engine.last_run["interactive"] is True

    def test_container_exit_code_propagates(self, runner, workspace, cli_engine, monkeypatch):
        monkeypatch.setattr(cli_engine, "run_container", lambda *a, **kw: 7)

        result = invoke(runner, workspace, "run", "-c", "false")

        assert result.exit_code == 7
