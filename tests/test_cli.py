import dataclasses
import json

import click
import pytest
from typer.testing import CliRunner

from mdrcp.artifacts.platforms import exe_filename
from mdrcp.cli import app, execute, version_banner
from mdrcp.errors import EXIT_FAILURE, EXIT_OK, SelfUpdateError
from mdrcp.types import DeployCommand, FinishUpdateCommand, RunOptions, SummaryFormat

runner = CliRunner()


@pytest.fixture
def cli_env(home_dir, monkeypatch):
    """Process environment for invoking the real entrypoint"""
    monkeypatch.setenv("HOME", str(home_dir))
    monkeypatch.delenv("MD_TARGET_DIR", raising=False)
    return home_dir


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert "mdrcp v" in result.output
    assert "mdrcp v" in click.unstyle(version_banner())


def test_help_lists_options():
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    for option in ("--target", "--summary", "--debug", "--tauri"):
        assert option in result.output
    assert "finish-update" not in result.output


def test_unknown_option_is_usage_error():
    result = runner.invoke(app, ["--bogus"])
    assert result.exit_code == 2


def test_deploy_success(cargo_project, make_artifacts, cli_env, monkeypatch):
    project = cargo_project("single-package")
    make_artifacts(project, ["demo"])
    monkeypatch.chdir(project)

    result = runner.invoke(app, [])

    assert result.exit_code == 0
    assert "mdrcp v" in result.output
    assert "Deployed 1 executable(s) to" in result.output
    assert (cli_env / ".local" / "bin" / exe_filename("demo")).exists()


def test_deploy_json_summary(cargo_project, make_artifacts, cli_env, monkeypatch, tmp_path):
    project = cargo_project("workspace")
    make_artifacts(project, ["a", "c"])
    monkeypatch.chdir(project)

    result = runner.invoke(
        app, ["--summary", "json", "--target", str(tmp_path / "out")]
    )

    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data["status"] == "ok"
    assert data["copied_count"] == 2
    assert data["override_used"] is True


def test_deploy_env_variable_target(cargo_project, make_artifacts, cli_env, monkeypatch, tmp_path):
    project = cargo_project("single-package")
    make_artifacts(project, ["demo"])
    monkeypatch.chdir(project)
    monkeypatch.setenv("MD_TARGET_DIR", str(tmp_path / "env-bin"))

    result = runner.invoke(app, ["-q"])

    assert result.exit_code == 0
    assert result.output == ""
    assert (tmp_path / "env-bin" / exe_filename("demo")).exists()


def test_deploy_failure_prints_error_block(tmp_path, cli_env, monkeypatch):
    empty = tmp_path / "empty"
    empty.mkdir()
    monkeypatch.chdir(empty)

    result = runner.invoke(app, ["--debug"])

    assert result.exit_code == 1
    assert "Error: No Cargo.toml found." in result.output
    assert "Usage: mdrcp [OPTIONS]" in result.output
    assert "copy debug executables to" in result.output
    assert "More info: mdrcp --help" in result.output


def test_deploy_nothing_built(cargo_project, cli_env, monkeypatch):
    monkeypatch.chdir(cargo_project("single-package"))

    result = runner.invoke(app, [])

    assert result.exit_code == 1
    assert "Have you run 'cargo build --release'?" in result.output


def test_finish_update_command(tmp_path):
    source = tmp_path / "new"
    source.write_text("new build")
    dest = tmp_path / "installed"
    dest.write_text("old build")

    result = runner.invoke(app, ["finish-update", str(source), str(dest)])

    assert result.exit_code == 0
    assert dest.read_text() == "new build"


def test_execute_deploy(cargo_project, make_artifacts, run_context, tmp_path):
    project = cargo_project("single-package")
    make_artifacts(project, ["demo"])
    options = RunOptions(target_override=tmp_path / "out", summary=SummaryFormat.JSON)

    code = execute(DeployCommand(options), project, run_context)

    assert code == EXIT_OK
    assert json.loads(run_context.stdout.getvalue())["copied_count"] == 1


def test_execute_deploy_failure(tmp_path, run_context):
    project = tmp_path / "not-rust"
    project.mkdir()

    code = execute(DeployCommand(), project, run_context)

    assert code == EXIT_FAILURE
    assert "No Cargo.toml found" in run_context.stderr.getvalue()


def test_execute_deploy_removes_stale_updater(cargo_project, make_artifacts, run_context, tmp_path):
    project = cargo_project("single-package")
    make_artifacts(project, ["demo"])
    stale = run_context.temp_dir / "mdrcp_updater.exe"
    stale.write_text("leftover")

    execute(DeployCommand(RunOptions(target_override=tmp_path / "out")), project, run_context)

    assert not stale.exists()


def test_execute_finish_update_failure(tmp_path, run_context, monkeypatch):
    def never(source, dest):
        raise SelfUpdateError(f"Failed to finish update of {dest} after 10 attempts: busy")

    monkeypatch.setattr("mdrcp.cli.finish_update", never)

    code = execute(FinishUpdateCommand(tmp_path / "a", tmp_path / "b"), context=run_context)

    assert code == EXIT_FAILURE
    assert "after 10 attempts" in run_context.stderr.getvalue()


def test_execute_rejects_unknown_command(run_context):
    with pytest.raises(TypeError):
        execute("deploy", context=run_context)


def test_execute_deploy_with_spawned_self_update(cargo_project, make_artifacts, run_context, tmp_path):
    project = cargo_project("single-package")
    make_artifacts(project, ["demo"])
    out_dir = tmp_path / "out"
    out_dir.mkdir()
    running = out_dir / exe_filename("demo")
    running.write_text("running demo")
    context = dataclasses.replace(run_context, current_exe=lambda: running)

    code = execute(DeployCommand(RunOptions(target_override=out_dir)), project, context)

    assert code == EXIT_OK
    assert len(context.spawner.calls) == 1
    assert running.read_text() == "running demo"
    assert context.stderr.getvalue() == ""


def test_execute_json_mode_reports_error_as_json(tmp_path, run_context):
    project = tmp_path / "not-rust"
    project.mkdir()

    code = execute(DeployCommand(RunOptions(summary=SummaryFormat.JSON)), project, run_context)

    assert code == EXIT_FAILURE
    assert run_context.stdout.getvalue() == ""
    error = json.loads(run_context.stderr.getvalue())
    assert error["error"] == "ManifestNotFoundError"
    assert error["message"].startswith("No Cargo.toml found.")


def test_partial_failure_keeps_stderr_free_of_log_records(
    cargo_project, make_artifacts, cli_env, monkeypatch, tmp_path
):
    project = cargo_project("workspace")
    make_artifacts(project, ["a", "c"])
    out_dir = tmp_path / "out"
    (out_dir / exe_filename("c")).mkdir(parents=True)
    monkeypatch.chdir(project)

    result = runner.invoke(app, ["--summary", "json", "--target", str(out_dir)])

    assert result.exit_code == 1
    assert '"level"' not in result.output
    assert "copy_failed" not in result.output
    assert '"status": "partial"' in result.output
