import json
import logging

from conftest import write_desktop
from xdgstart.autostart import RunResult, run_autostart
from xdgstart.core.logging import init_logger


def test_both_scopes_are_merged_before_launch(xdg_env, fake_spawn):
    write_desktop(xdg_env.system_autostart, "nm-applet.desktop", "Exec=nm-applet\n")
    write_desktop(xdg_env.system_autostart, "blueman.desktop", "Exec=blueman-applet\n")
    write_desktop(xdg_env.user_autostart, "blueman.desktop", "Exec=blueman-applet\nHidden=true\n")
    write_desktop(xdg_env.user_autostart, "mine.desktop", "Exec=mine --start\n")

    result = run_autostart(system=True, user=True, spawn=fake_spawn)

    assert sorted(fake_spawn.calls) == ["mine --start", "nm-applet"]
    assert result.exit_code == 0


def test_user_scope_only_ignores_system(xdg_env, fake_spawn):
    write_desktop(xdg_env.system_autostart, "sys.desktop", "Exec=sys-app\n")
    write_desktop(xdg_env.user_autostart, "usr.desktop", "Exec=usr-app\n")

    result = run_autostart(system=False, user=True, spawn=fake_spawn)

    assert fake_spawn.calls == ["usr-app"]
    assert result.system_missing is False


def test_missing_user_directory_sets_flag(xdg_env, fake_spawn):
    write_desktop(xdg_env.system_autostart, "sys.desktop", "Exec=sys-app\n")

    result = run_autostart(system=True, user=True, spawn=fake_spawn)

    assert result.user_missing is True
    assert result.system_missing is False
    assert result.exit_code == 1
    # the other scope still ran
    assert fake_spawn.calls == ["sys-app"]


def test_missing_system_directories_sets_flag(xdg_env, fake_spawn):
    write_desktop(xdg_env.user_autostart, "usr.desktop", "Exec=usr-app\n")

    result = run_autostart(system=True, user=True, spawn=fake_spawn)

    assert result.system_missing is True
    assert result.user_missing is False
    assert result.exit_code == 1
    assert fake_spawn.calls == ["usr-app"]


def test_system_found_if_any_candidate_exists(tmp_path, xdg_env, monkeypatch, fake_spawn):
    # first candidate exists, the default root does not
    extra = tmp_path / "extra-xdg"
    write_desktop(extra / "autostart", "e.desktop", "Exec=extra-app\n")
    monkeypatch.setenv("XDG_CONFIG_DIRS", str(extra))

    result = run_autostart(system=True, user=False, spawn=fake_spawn)

    assert result.system_missing is False
    assert fake_spawn.calls == ["extra-app"]


def test_exit_code_is_or_of_flags():
    assert RunResult().exit_code == 0
    assert RunResult(user_missing=True).exit_code == 1
    assert RunResult(system_missing=True).exit_code == 1
    assert RunResult(user_missing=True, system_missing=True).exit_code == 1


def test_json_log_records_carry_scope(xdg_env, fake_spawn):
    write_desktop(xdg_env.user_autostart, "off.desktop", "Exec=off\nHidden=true\n")
    init_logger(xdg_env.logs, console=False)

    run_autostart(system=False, user=True, spawn=fake_spawn)
    for handler in logging.getLogger("xdgstart").handlers:
        handler.flush()

    records = [json.loads(line) for line in (xdg_env.logs / "xdgstart.jsonl").read_text().splitlines()]
    disabled = [r for r in records if r["msg"].endswith("disabled")]
    assert disabled
    assert disabled[0]["scope"] == "user"
    assert disabled[0]["meta"] == {"reasons": ["Hidden"]}
