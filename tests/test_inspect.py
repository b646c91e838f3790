from launchagent_toolkit.document import Document
from launchagent_toolkit.edit_session import EditSession
from launchagent_toolkit.fields import find_field
from launchagent_toolkit.inspect import (
    display_value,
    format_document,
    print_agents,
    print_document,
)
from launchagent_toolkit.types import AgentStatus, LaunchAgent, MultipleSessions, SingleSession


def test_display_value_per_kind() -> None:
    assert display_value(find_field("Label"), None) == "-"
    assert display_value(find_field("StartInterval"), 600) == "600"
    assert display_value(find_field("RunAtLoad"), False) == "false"
    assert display_value(find_field("ProgramArguments"), ["/bin/sh", "-c"]) == "/bin/sh, -c"
    assert display_value(find_field("ProgramArguments"), []) == "(empty)"
    assert display_value(find_field("EnvironmentVariables"), {"A": "1"}) == "A=1"
    assert display_value(find_field("EnvironmentVariables"), {}) == "(empty)"
    session_field = find_field("LimitLoadToSessionType")
    assert display_value(session_field, SingleSession("Aqua")) == "Aqua"
    assert display_value(session_field, MultipleSessions(("Aqua", "System"))) == "Aqua, System"


def test_format_document_lists_fields_in_form_order() -> None:
    lines = format_document(Document(label="com.user.a", start_interval=5))

    assert len(lines) == 18
    assert lines[0].startswith("  Label")
    assert lines[0].endswith(": com.user.a")
    assert lines[3].startswith("  Start Interval")
    assert lines[3].endswith(": 5")
    assert lines[1].endswith(": -")


def test_format_document_marks_cursor_and_edit_state() -> None:
    session = EditSession()
    session.move_next()
    lines = format_document(Document(), session)
    assert lines[1].startswith("> Program")
    assert lines[0].startswith("  Label")

    session.start_edit(Document())
    lines = format_document(Document(), session)
    assert lines[1].startswith("* Program")


def test_print_document_header(capsys) -> None:
    print_document(Document(label="com.user.a"), path="/tmp/com.user.a.plist")
    out = capsys.readouterr().out.splitlines()

    assert out[0] == "LaunchAgent: /tmp/com.user.a.plist"
    assert "com.user.a" in out[1]


def test_print_agents(capsys) -> None:
    print_agents(
        [
            LaunchAgent(
                path="/x/a.plist",
                filename="a.plist",
                label="com.user.a",
                status=AgentStatus.RUNNING,
                enabled=True,
            ),
            LaunchAgent(path="/x/b.plist", filename="b.plist", label="com.user.b"),
        ]
    )
    out = capsys.readouterr().out

    assert "running" in out
    assert "enabled" in out
    assert "com.user.a (a.plist)" in out
    assert "com.user.b (b.plist)" in out
    assert "Total: 2" in out


def test_print_agents_empty(capsys) -> None:
    print_agents([])
    assert capsys.readouterr().out == "No LaunchAgents found.\n"
