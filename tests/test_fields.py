from launchagent_toolkit.document import Document
from launchagent_toolkit.fields import CATALOG, find_field, parse_text, seed_text
from launchagent_toolkit.plist_text import KEYS
from launchagent_toolkit.types import (
    KIND_BOOL,
    KIND_INT,
    KIND_SESSION_TYPE,
    KIND_STRING,
    KIND_STRING_LIST,
    KIND_STRING_MAP,
    MultipleSessions,
    SingleSession,
)


def test_catalog_covers_every_plist_key_once() -> None:
    ids = [f.id for f in CATALOG]
    assert len(ids) == len(set(ids))
    assert set(ids) == {key for key, _attr, _kind in KEYS}
    assert ids[0] == "Label"
    assert ids[-1] == "EnvironmentVariables"


def test_catalog_accessors_bind_document_attributes() -> None:
    doc = Document()
    field = find_field("StartInterval")
    assert field is not None

    field.set(doc, 42)

    assert doc.start_interval == 42
    assert field.get(doc) == 42


def test_find_field_accepts_key_attr_and_label() -> None:
    assert find_field("POSIXSpawnType").attr == "posix_spawn_type"
    assert find_field("posix_spawn_type").id == "POSIXSpawnType"
    assert find_field("Run At Load").id == "RunAtLoad"
    assert find_field("runatload").id == "RunAtLoad"
    assert find_field("Nope") is None
    assert find_field("") is None


def test_seed_text_per_kind() -> None:
    assert seed_text(KIND_STRING, None) == ""
    assert seed_text(KIND_STRING, "com.user.a") == "com.user.a"
    assert seed_text(KIND_INT, None) == ""
    assert seed_text(KIND_INT, 600) == "600"
    assert seed_text(KIND_BOOL, None) == "false"
    assert seed_text(KIND_BOOL, True) == "true"
    assert seed_text(KIND_STRING_LIST, ["/bin/sh", "-c"]) == "/bin/sh\n-c"
    assert seed_text(KIND_STRING_MAP, {"A": "1", "B": "x=y"}) == "A=1\nB=x=y"
    assert seed_text(KIND_SESSION_TYPE, SingleSession("Aqua")) == "Aqua"
    assert seed_text(KIND_SESSION_TYPE, MultipleSessions(("Aqua", "System"))) == "Aqua\nSystem"
    assert seed_text(KIND_SESSION_TYPE, None) == ""


def test_parse_string_empty_clears() -> None:
    assert parse_text(KIND_STRING, "/tmp/out.log") == "/tmp/out.log"
    assert parse_text(KIND_STRING, "") is None


def test_parse_integer_bad_input_clears() -> None:
    assert parse_text(KIND_INT, "300") == 300
    assert parse_text(KIND_INT, "abc") is None
    assert parse_text(KIND_INT, "") is None


def test_parse_bool_only_exact_lowercase_true() -> None:
    assert parse_text(KIND_BOOL, "true") is True
    assert parse_text(KIND_BOOL, "True") is False
    assert parse_text(KIND_BOOL, "yes") is False
    assert parse_text(KIND_BOOL, "") is False


def test_parse_string_list_trims_and_drops_blank_lines() -> None:
    assert parse_text(KIND_STRING_LIST, "  /bin/sh \n\n   \n-c\n") == ["/bin/sh", "-c"]
    assert parse_text(KIND_STRING_LIST, "\n  \n") is None


def test_parse_map_drops_lines_without_separator() -> None:
    assert parse_text(KIND_STRING_MAP, "FOO=bar\nNOPE") == {"FOO": "bar"}
    assert parse_text(KIND_STRING_MAP, " A = 1 \nB=x=y") == {"A": "1", "B": "x=y"}
    assert parse_text(KIND_STRING_MAP, "NOPE\n") is None


def test_parse_session_type_arity() -> None:
    assert parse_text(KIND_SESSION_TYPE, "") is None
    assert parse_text(KIND_SESSION_TYPE, "  \n ") is None
    assert parse_text(KIND_SESSION_TYPE, "\nAqua\n") == SingleSession("Aqua")
    assert parse_text(KIND_SESSION_TYPE, "Aqua\n\nBackground") == MultipleSessions(
        ("Aqua", "Background")
    )


def test_seed_then_parse_preserves_common_values() -> None:
    doc = Document(
        label="com.user.a",
        start_interval=5,
        keep_alive=True,
        program_arguments=["/bin/echo", "hi"],
        environment_variables={"A": "1"},
        limit_load_to_session_type=MultipleSessions(("Aqua", "Background")),
    )
    for field in CATALOG:
        value = field.get(doc)
        parsed = parse_text(field.kind, field.seed(doc))
        if field.kind == KIND_BOOL and value is None:
            assert parsed is False
        else:
            assert parsed == value, field.id


def test_list_lines_split_only_on_newline() -> None:
    doc = Document(program_arguments=["a\x0cb", "c d"])
    field = find_field("ProgramArguments")

    field.commit(doc, field.seed(doc))
    assert doc.program_arguments == ["a\x0cb", "c d"]

    assert parse_text(KIND_STRING_LIST, "x\r\ny\r\n") == ["x", "y"]


def test_parse_integer_rejects_surrounding_whitespace() -> None:
    assert parse_text(KIND_INT, " 7 ") is None
    assert parse_text(KIND_INT, "-7") == -7
