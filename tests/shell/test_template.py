from __future__ import annotations

from types import SimpleNamespace

import pytest

from shtask.shell.template import Template, compile_command, quote


def test_quote_interpolates_and_quotes_arguments() -> None:
    assert quote("ls -l {} {}", "$foo", 31337) == "ls -l '$foo' 31337"


def test_quote_expands_sequences() -> None:
    args = [5, True, "-v", "this is a sentence"]
    assert quote("command {}", args) == "command 5 true -v 'this is a sentence'"
    assert quote("start-server {}", ("-host", "127.0.0.1", "-port", 6500)) == (
        "start-server -host 127.0.0.1 -port 6500"
    )


@pytest.mark.parametrize(
    ("pieces", "expected"),
    [
        (["a ", " b"], "a b"),
        (["a", "b"], "ab"),
        (["", " b"], "b"),
        (["", "b"], "b"),
        (["a ", ""], "a"),
        (["a", ""], "a"),
        (["echo ", ""], "echo"),
    ],
)
def test_empty_sequence_absorbs_one_space(pieces: list[str], expected: str) -> None:
    assert compile_command(pieces, [[]]) == expected


def test_adjacent_empty_sequences_collapse_to_single_spacing() -> None:
    assert compile_command(["", "", " a ", ""], [[], [], []]) == "a"
    assert quote("{}{} a {}", [], [], []) == "a"


def test_empty_sequence_removes_only_one_space() -> None:
    assert compile_command(["a  ", "  b"], [[]]) == "a   b"


def test_compile_command_rejects_mismatched_gaps() -> None:
    with pytest.raises(ValueError):
        compile_command(["a ", " b"], [])


def test_format_fields_positional_and_keyword() -> None:
    assert quote("cp {0} {1} && rm {0}", "a b", "c") == "cp 'a b' c && rm 'a b'"
    assert quote("git commit -m {message}", message="fix: it's done") == (
        "git commit -m 'fix: it'\"'\"'s done'"
    )


def test_doubled_braces_are_literal() -> None:
    assert quote("echo ${{HOME}} {}", "x y") == "echo ${HOME} 'x y'"
    assert quote("echo {{a,b}}") == "echo {a,b}"


def test_format_errors() -> None:
    with pytest.raises(ValueError):
        quote("echo {!r}", "x")
    with pytest.raises(ValueError):
        quote("echo {:>10}", "x")
    with pytest.raises(ValueError):
        quote("echo {} {0}", "x")
    with pytest.raises(ValueError):
        quote("echo {}", "x", "unused")
    with pytest.raises(ValueError):
        quote("echo {a.b}", a="x")
    with pytest.raises(IndexError):
        quote("echo {} {}", "x")
    with pytest.raises(KeyError):
        quote("echo {name}")


def test_explicit_template_value() -> None:
    template = Template(("tar -czf ", " ", ""), ("out.tgz", ["a b", "c"]))
    assert quote(template) == "tar -czf out.tgz 'a b' c"
    with pytest.raises(TypeError):
        quote(template, "extra")


def test_template_string_like_objects_are_supported() -> None:
    tstring = SimpleNamespace(
        strings=("echo ", ""),
        interpolations=(SimpleNamespace(value="hello world"),),
    )
    assert quote(tstring) == "echo 'hello world'"


def test_unsupported_template_type() -> None:
    with pytest.raises(TypeError):
        quote(42)
