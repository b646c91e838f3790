from types import SimpleNamespace

from launchagent_toolkit import launchctl
from launchagent_toolkit.types import AgentStatus


def _result(returncode: int = 0, stdout: bytes = b"", stderr: bytes = b"") -> SimpleNamespace:
    return SimpleNamespace(returncode=returncode, stdout=stdout, stderr=stderr)


def _fake_runner(monkeypatch, results: list[SimpleNamespace]) -> list[list[str]]:
    calls: list[list[str]] = []

    def fake_run(cmd, capture_output=False, check=False):
        _ = (capture_output, check)
        calls.append(list(cmd))
        return results.pop(0)

    monkeypatch.setattr(launchctl.subprocess, "run", fake_run)
    monkeypatch.setattr(launchctl.os, "getuid", lambda: 501)
    return calls


def test_check_agent_status_running(monkeypatch) -> None:
    out = b"gui/501/com.user.a = {\n\tstate = running\n}"
    calls = _fake_runner(monkeypatch, [_result(stdout=out)])

    assert launchctl.check_agent_status("com.user.a") == AgentStatus.RUNNING
    assert calls == [["/bin/launchctl", "print", "gui/501/com.user.a"]]


def test_check_agent_status_stopped_variants(monkeypatch) -> None:
    _fake_runner(
        monkeypatch,
        [
            _result(stdout=b"\tstate = stopped\n"),
            _result(stdout=b"No such service\n"),
            _result(returncode=113, stderr=b"Could not find service \"com.user.a\" in domain"),
        ],
    )

    assert launchctl.check_agent_status("com.user.a") == AgentStatus.STOPPED
    assert launchctl.check_agent_status("com.user.a") == AgentStatus.STOPPED
    assert launchctl.check_agent_status("com.user.a") == AgentStatus.STOPPED


def test_check_agent_status_error_on_unrecognized_output(monkeypatch) -> None:
    _fake_runner(monkeypatch, [_result(returncode=1, stdout=b"something odd")])
    assert launchctl.check_agent_status("com.user.a") == AgentStatus.ERROR


def test_check_agent_status_unknown_when_launchctl_missing(monkeypatch) -> None:
    def fake_run(cmd, capture_output=False, check=False):
        raise FileNotFoundError(cmd[0])

    monkeypatch.setattr(launchctl.subprocess, "run", fake_run)
    assert launchctl.check_agent_status("com.user.a") == AgentStatus.UNKNOWN


def test_check_agent_enabled(monkeypatch) -> None:
    out = (
        b'disabled services = {\n'
        b'\t"com.user.off" => disabled\n'
        b'\t"com.user.old" => true\n'
        b'\t"com.user.on" => enabled\n'
        b'}\n'
    )
    calls = _fake_runner(monkeypatch, [_result(stdout=out) for _ in range(4)])

    assert launchctl.check_agent_enabled("com.user.off") is False
    assert launchctl.check_agent_enabled("com.user.old") is False
    assert launchctl.check_agent_enabled("com.user.on") is True
    assert launchctl.check_agent_enabled("com.user.unlisted") is True
    assert calls[0] == ["/bin/launchctl", "print-disabled", "gui/501"]


def test_check_agent_enabled_false_when_command_fails(monkeypatch) -> None:
    _fake_runner(monkeypatch, [_result(returncode=1)])
    assert launchctl.check_agent_enabled("com.user.a") is False


def test_reload_agent_unloads_then_loads(monkeypatch) -> None:
    calls = _fake_runner(monkeypatch, [_result(), _result()])

    assert launchctl.reload_agent("/tmp/a.plist") == ""
    assert calls == [
        ["/bin/launchctl", "unload", "/tmp/a.plist"],
        ["/bin/launchctl", "load", "/tmp/a.plist"],
    ]


def test_reload_agent_tolerates_not_loaded_service(monkeypatch) -> None:
    calls = _fake_runner(
        monkeypatch,
        [_result(returncode=1, stderr=b"Could not find specified service\n"), _result()],
    )

    assert launchctl.reload_agent("/tmp/a.plist") == ""
    assert len(calls) == 2


def test_reload_agent_reports_unload_failure(monkeypatch) -> None:
    calls = _fake_runner(monkeypatch, [_result(returncode=5, stderr=b"Input/output error\n")])

    assert launchctl.reload_agent("/tmp/a.plist") == "Unload failed: Input/output error"
    assert len(calls) == 1


def test_reload_agent_reports_load_failure(monkeypatch) -> None:
    _fake_runner(monkeypatch, [_result(), _result(returncode=1, stderr=b"Load failed: 5\n")])
    assert launchctl.reload_agent("/tmp/a.plist") == "Load failed: Load failed: 5"


def test_reload_agent_reports_missing_launchctl(monkeypatch) -> None:
    def fake_run(cmd, capture_output=False, check=False):
        raise FileNotFoundError(cmd[0])

    monkeypatch.setattr(launchctl.subprocess, "run", fake_run)
    assert launchctl.reload_agent("/tmp/a.plist").startswith("Failed to run launchctl unload:")


def test_verbose_echoes_command(monkeypatch, capsys) -> None:
    _fake_runner(monkeypatch, [_result(), _result()])

    launchctl.reload_agent("/tmp/a.plist", verbose=True)

    out = capsys.readouterr().out
    assert "+ /bin/launchctl unload /tmp/a.plist" in out
    assert "+ /bin/launchctl load /tmp/a.plist" in out
