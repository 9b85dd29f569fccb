import io
import logging
import platform
import shutil
from pathlib import Path

import pytest

from mdrcp.artifacts.platforms import exe_filename
from mdrcp.deploy.runner import RunContext
from mdrcp.logging import APP_LOGGER
from mdrcp.types import Environment

FIXTURES = Path(__file__).parent.parent / "fixtures_data" / "cargo"


class FakeSpawner:
    """Records updater launches instead of starting processes"""

    def __init__(self, error: OSError = None):
        self.calls = []
        self.error = error

    def __call__(self, args):
        self.calls.append(list(args))
        if self.error:
            raise self.error


def build_artifacts(base_dir: Path, names, profile: str = "release") -> Path:
    """Create fake executables as an external `cargo build` would."""
    profile_dir = base_dir / "target" / profile
    profile_dir.mkdir(parents=True, exist_ok=True)
    for name in names:
        exe = profile_dir / exe_filename(name)
        exe.write_text(f"built {name}")
        exe.chmod(0o755)
    return profile_dir


@pytest.fixture(autouse=True)
def reset_app_logger():
    """Drop handlers installed by CLI invocations"""
    yield
    app_logger = logging.getLogger(APP_LOGGER)
    for handler in list(app_logger.handlers):
        app_logger.removeHandler(handler)
    app_logger.setLevel(logging.NOTSET)
    app_logger.propagate = True


@pytest.fixture
def cargo_project(tmp_path):
    """Copy a fixture Cargo project into a temporary directory"""

    def _copy(name: str) -> Path:
        dest = tmp_path / "project"
        shutil.copytree(FIXTURES / name, dest)
        return dest

    return _copy


@pytest.fixture
def home_dir(tmp_path) -> Path:
    home = tmp_path / "home"
    home.mkdir()
    return home


@pytest.fixture
def env(home_dir) -> Environment:
    return Environment(home=str(home_dir), target_override=None, system=platform.system())


@pytest.fixture
def spawner() -> FakeSpawner:
    return FakeSpawner()


@pytest.fixture
def run_context(tmp_path, env, spawner) -> RunContext:
    """Run context with captured output and no real current executable"""
    temp_dir = tmp_path / "tmp"
    temp_dir.mkdir()
    return RunContext(
        stdout=io.StringIO(),
        stderr=io.StringIO(),
        current_exe=lambda: None,
        env=env,
        spawner=spawner,
        temp_dir=temp_dir,
    )


@pytest.fixture
def make_artifacts():
    return build_artifacts


@pytest.fixture
def failing_spawner() -> FakeSpawner:
    return FakeSpawner(error=OSError(8, "Exec format error"))
