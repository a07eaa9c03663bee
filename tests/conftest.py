import logging
import sys
from pathlib import Path
from types import SimpleNamespace

import pytest

from xdgstart.autostart.executor import SpawnError
from xdgstart.core import paths


@pytest.fixture(autouse=True)
def _reset_xdgstart_logger(monkeypatch):
    monkeypatch.setattr(sys, "excepthook", sys.excepthook)
    yield
    logger = logging.getLogger("xdgstart")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


def write_desktop(directory: Path, name: str, body: str) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / name
    path.write_text(body, encoding="utf-8")
    return path


class FakeSpawn:
    def __init__(self, fail_on=()):
        self.calls: list[str] = []
        self.fail_on = set(fail_on)

    def __call__(self, command: str):
        self.calls.append(command)
        if command in self.fail_on:
            raise SpawnError(command, "fork failed")
        return SimpleNamespace(pid=4242)


@pytest.fixture
def fake_spawn():
    return FakeSpawn()


@pytest.fixture
def xdg_env(tmp_path, monkeypatch):
    """Isolated XDG layout: one system root and one user config home."""
    home = tmp_path / "home"
    system = tmp_path / "etc-xdg"
    user = home / ".config"
    for d in (home, system, user):
        d.mkdir(parents=True)

    monkeypatch.setattr(paths, "DEFAULT_SYSTEM_CONFIG_DIR", str(system))
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_CONFIG_DIRS", str(system))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(user))
    monkeypatch.setenv("XDGSTART_CONFIG_DIR", str(tmp_path / "xdgstart-config"))
    monkeypatch.setenv("XDGSTART_LOGS_DIR", str(tmp_path / "logs"))

    return SimpleNamespace(
        home=home,
        system=system,
        user=user,
        system_autostart=system / "autostart",
        user_autostart=user / "autostart",
        logs=tmp_path / "logs",
        config_dir=tmp_path / "xdgstart-config",
    )
