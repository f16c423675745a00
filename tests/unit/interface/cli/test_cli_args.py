from __future__ import annotations

"""
Unit tests for CLI argument parsing and override mapping.
"""

import pytest

from allocdu.interface.cli.args import args_to_overrides, build_parser, parse_cli


def test_switches_and_targets_interleave() -> None:
    """TC-01: Options may appear anywhere; targets keep their order."""
    args = parse_cli(["first", "-a", "second", "-x", "third"])
    assert args.targets == ["first", "second", "third"]
    assert args.show_files is True
    assert args.exact_bytes is True
    assert args.summary_only is False


def test_unknown_tokens_become_targets() -> None:
    """TC-02: Unrecognized option-like tokens are treated as directory paths."""
    args = parse_cli(["-z", "real_dir", "--weird"])
    assert args.targets == ["-z", "real_dir", "--weird"]


def test_no_targets_gives_empty_list() -> None:
    """TC-03: Without positionals the target list is empty (cwd is resolved later)."""
    assert parse_cli([]).targets == []


@pytest.mark.parametrize("flag", ["-?", "-h", "--help"])
def test_help_exits_cleanly(flag: str, capsys: pytest.CaptureFixture[str]) -> None:
    """TC-04: Every help spelling prints usage and exits with status 0."""
    with pytest.raises(SystemExit) as exc:
        parse_cli([flag])
    assert exc.value.code == 0
    assert "usage: du" in capsys.readouterr().out


def test_long_option_aliases() -> None:
    """TC-05: Long spellings map onto the same destinations."""
    args = parse_cli(["--all", "--summarize", "--exact", "--track", "--dereference"])
    assert args.show_files and args.summary_only and args.exact_bytes
    assert args.track_identity and args.follow_symlinks


def test_choice_options_are_validated() -> None:
    """TC-06: argparse refuses values outside the allowed choices."""
    parser = build_parser()
    with pytest.raises(SystemExit):
        parser.parse_args(["--scope", "galaxy"])


def test_overrides_only_contain_given_switches() -> None:
    """TC-07: Absent flags never override saved preferences."""
    assert args_to_overrides(parse_cli(["dir"])) == {}

    overrides = args_to_overrides(parse_cli(["-s", "--track", "--scope", "run", "--color", "never"]))
    assert overrides == {
        "summary_only": True,
        "track_identity": True,
        "identity_scope": "run",
        "color": "never",
    }


def test_log_file_value_is_not_a_target() -> None:
    """TC-08: Option arguments are consumed by their option."""
    args = parse_cli(["--log-file", "trace.log", "data"])
    assert args.log_file == "trace.log"
    assert args.targets == ["data"]


@pytest.mark.parametrize("argv", [
    ["--sum", "dir"],
    ["--co", "dir"],
    ["--dump", "dir"],
])
def test_option_prefixes_are_targets(argv: list) -> None:
    """TC-09: Only exact option spellings are options; prefixes are directory paths."""
    args = parse_cli(argv)
    assert args.targets == argv
    assert args.summary_only is False
    assert args.color is None
    assert args.dump_config is False


def test_option_values_do_not_reorder_targets() -> None:
    """TC-10: A target equal to an option value keeps its own position."""
    assert parse_cli(["--log-file", "a", "b", "a"]).targets == ["b", "a"]
    assert parse_cli(["--color", "never", "never", "x"]).targets == ["never", "x"]
    assert parse_cli(["--scope", "run", "z", "run"]).targets == ["z", "run"]
