import pytest

from conftest import write_desktop
from xdgstart.autostart.aggregator import AutostartAggregator
from xdgstart.autostart.descriptor import parse_file
from xdgstart.autostart.overrides import disable_entry, enable_entry, is_overridden


def test_disable_writes_hidden_override_with_exec(xdg_env):
    write_desktop(xdg_env.system_autostart, "tracker.desktop", "[Desktop Entry]\nExec=tracker-miner -d\n")

    target = disable_entry("tracker", [str(xdg_env.system)], str(xdg_env.user))

    assert target == xdg_env.user_autostart / "tracker.desktop"
    d = parse_file(target)
    assert d.hidden is True
    assert d.exec == "tracker-miner -d"
    assert is_overridden("tracker", str(xdg_env.user))


def test_override_suppresses_system_entry(xdg_env):
    write_desktop(xdg_env.system_autostart, "tracker.desktop", "Exec=tracker-miner -d\n")
    disable_entry("tracker.desktop", [str(xdg_env.system)], str(xdg_env.user))

    agg = AutostartAggregator()
    agg.handle_dir(xdg_env.system_autostart)
    agg.handle_dir(xdg_env.user_autostart)

    assert agg.resolve() == []


def test_disable_unknown_entry_raises(xdg_env):
    with pytest.raises(FileNotFoundError):
        disable_entry("ghost", [str(xdg_env.system)], str(xdg_env.user))


def test_disable_entry_without_exec_raises(xdg_env):
    write_desktop(xdg_env.system_autostart, "broken.desktop", "[Desktop Entry]\nName=Broken\n")
    with pytest.raises(ValueError):
        disable_entry("broken", [str(xdg_env.system)], str(xdg_env.user))


def test_enable_removes_override(xdg_env):
    write_desktop(xdg_env.system_autostart, "a.desktop", "Exec=a\n")
    disable_entry("a", [str(xdg_env.system)], str(xdg_env.user))

    assert enable_entry("a", str(xdg_env.user)) is True
    assert not (xdg_env.user_autostart / "a.desktop").exists()
    assert is_overridden("a", str(xdg_env.user)) is False


def test_enable_leaves_regular_user_entry_alone(xdg_env):
    path = write_desktop(xdg_env.user_autostart, "mine.desktop", "Exec=mine\n")

    assert enable_entry("mine", str(xdg_env.user)) is False
    assert path.exists()


def test_enable_without_override(xdg_env):
    assert enable_entry("nothing", str(xdg_env.user)) is False


def test_disable_refuses_to_replace_user_entry(xdg_env):
    write_desktop(xdg_env.system_autostart, "app.desktop", "Exec=app\n")
    mine = write_desktop(xdg_env.user_autostart, "app.desktop", "Exec=app --my-custom-flags\n")

    with pytest.raises(FileExistsError):
        disable_entry("app", [str(xdg_env.system)], str(xdg_env.user))

    assert mine.read_text(encoding="utf-8") == "Exec=app --my-custom-flags\n"


def test_disable_rewrites_existing_override(xdg_env):
    write_desktop(xdg_env.system_autostart, "app.desktop", "Exec=app --new\n")
    write_desktop(xdg_env.user_autostart, "app.desktop", "Hidden=true\n")

    target = disable_entry("app", [str(xdg_env.system)], str(xdg_env.user))

    assert parse_file(target).exec == "app --new"


def test_enable_removes_override_without_exec(xdg_env):
    path = write_desktop(xdg_env.user_autostart, "bar.desktop", "[Desktop Entry]\nHidden=true\n")

    assert is_overridden("bar", str(xdg_env.user)) is True
    assert enable_entry("bar", str(xdg_env.user)) is True
    assert not path.exists()
