"""
Tests for CLI functionality.

These tests verify the command-line interface logic; the flows themselves
are patched out.
"""

from __future__ import annotations

import argparse
from io import StringIO
from pathlib import Path
from unittest.mock import patch

import pytest

from flowering_phenology.cli import (
    cmd_build,
    cmd_fetch_names,
    cmd_info,
    cmd_refresh,
    create_parser,
    main,
)
from flowering_phenology.config import Settings


def namespace(**overrides: object) -> argparse.Namespace:
    values: dict[str, object] = {
        "debug": False,
        "occurrences": None,
        "data_dir": None,
        "checklist": None,
        "no_lookup": False,
    }
    values.update(overrides)
    return argparse.Namespace(**values)


class TestCreateParser:
    """Tests for create_parser function."""

    def test_creates_parser(self) -> None:
        parser = create_parser()
        assert isinstance(parser, argparse.ArgumentParser)
        assert parser.prog == "flowering-phenology"

    def test_parser_has_version(self) -> None:
        with pytest.raises(SystemExit):
            create_parser().parse_args(["--version"])

    def test_parser_has_debug_flag(self) -> None:
        args = create_parser().parse_args(["--debug", "info"])
        assert args.debug is True

    def test_build_command_defaults(self) -> None:
        args = create_parser().parse_args(["build"])
        assert args.command == "build"
        assert args.occurrences is None
        assert args.checklist is None
        assert args.no_lookup is False

    def test_build_command_overrides(self) -> None:
        args = create_parser().parse_args(
            [
                "build",
                "--occurrences",
                "export.zip",
                "--checklist",
                "flora.csv",
                "--data-dir",
                "out",
                "--no-lookup",
            ]
        )
        assert args.occurrences == Path("export.zip")
        assert args.checklist == Path("flora.csv")
        assert args.data_dir == Path("out")
        assert args.no_lookup is True

    def test_fetch_names_command(self) -> None:
        args = create_parser().parse_args(["fetch-names", "--occurrences", "export.csv"])
        assert args.command == "fetch-names"
        assert args.occurrences == Path("export.csv")

    def test_checklist_only_on_build(self) -> None:
        with pytest.raises(SystemExit):
            create_parser().parse_args(["fetch-names", "--checklist", "flora.csv"])

    def test_refresh_and_info_commands(self) -> None:
        parser = create_parser()
        assert parser.parse_args(["refresh"]).command == "refresh"
        assert parser.parse_args(["info"]).command == "info"


class TestCmdBuild:
    """Tests for cmd_build function."""

    def test_success_returns_zero(self) -> None:
        with patch("flowering_phenology.cli.build_all") as mock_build:
            mock_build.return_value = {"species": 3, "pages": {}, "outputs": {}}
            assert cmd_build(namespace()) == 0
            mock_build.assert_called_once()

    def test_error_result_returns_one(self) -> None:
        with (
            patch("flowering_phenology.cli.build_all", return_value={"error": "no occurrences"}),
            patch("sys.stderr", new=StringIO()) as mock_stderr,
        ):
            assert cmd_build(namespace()) == 1
            assert "no occurrences" in mock_stderr.getvalue()

    def test_overrides_reach_settings(self, tmp_path: Path) -> None:
        args = namespace(
            occurrences=tmp_path / "export.zip",
            checklist=tmp_path / "flora.csv",
            data_dir=tmp_path / "data",
            no_lookup=True,
        )
        with patch("flowering_phenology.cli.build_all", return_value={}) as mock_build:
            cmd_build(args)
        settings = mock_build.call_args.kwargs["settings"]
        assert isinstance(settings, Settings)
        assert settings.occurrences_path == tmp_path / "export.zip"
        assert settings.checklist_path == tmp_path / "flora.csv"
        assert settings.data_dir == tmp_path / "data"
        assert settings.pipeline.lookup_common_names is False

    def test_lookup_enabled_by_default(self) -> None:
        with patch("flowering_phenology.cli.build_all", return_value={}) as mock_build:
            cmd_build(namespace())
        assert mock_build.call_args.kwargs["settings"].pipeline.lookup_common_names is True


class TestCmdFetchNames:
    """Tests for cmd_fetch_names function."""

    def test_passes_settings(self, tmp_path: Path) -> None:
        with patch("flowering_phenology.cli.fetch_all") as mock_fetch:
            mock_fetch.return_value = {"species": 2, "fetched": 2, "failures": []}
            assert cmd_fetch_names(namespace(occurrences=tmp_path / "x.csv")) == 0
        assert mock_fetch.call_args.kwargs["settings"].occurrences_path == tmp_path / "x.csv"


class TestCmdRefresh:
    """Tests for cmd_refresh function."""

    def test_calls_fetch_then_build(self) -> None:
        call_order: list[str] = []

        def mock_fetch(**_kwargs: object) -> dict[str, object]:
            call_order.append("fetch")
            return {}

        def mock_build(**_kwargs: object) -> dict[str, object]:
            call_order.append("build")
            return {}

        with (
            patch("flowering_phenology.cli.fetch_all", side_effect=mock_fetch),
            patch("flowering_phenology.cli.build_all", side_effect=mock_build),
            patch("sys.stdout", new=StringIO()) as mock_stdout,
        ):
            assert cmd_refresh(namespace()) == 0
        assert call_order == ["fetch", "build"]
        assert "Done." in mock_stdout.getvalue()

    def test_fetch_error_skips_build(self) -> None:
        with (
            patch("flowering_phenology.cli.fetch_all", return_value={"error": "no occurrences"}),
            patch("flowering_phenology.cli.build_all") as mock_build,
            patch("sys.stderr", new=StringIO()),
        ):
            assert cmd_refresh(namespace()) == 1
        mock_build.assert_not_called()

    def test_same_settings_for_both_flows(self) -> None:
        with (
            patch("flowering_phenology.cli.fetch_all", return_value={}) as mock_fetch,
            patch("flowering_phenology.cli.build_all", return_value={}) as mock_build,
        ):
            cmd_refresh(namespace())
        assert mock_fetch.call_args.kwargs["settings"] is mock_build.call_args.kwargs["settings"]


class TestCmdInfo:
    """Tests for cmd_info function."""

    def test_prints_app_info(self) -> None:
        with patch("sys.stdout", new=StringIO()) as mock_stdout:
            assert cmd_info(argparse.Namespace()) == 0
        output = mock_stdout.getvalue()
        assert "Application: flowering-phenology" in output
        assert "Narrow regions: Connecticut" in output
        assert "Reports:" in output


class TestMain:
    """Tests for main function."""

    def test_no_command_shows_help(self) -> None:
        with patch("sys.stdout", new=StringIO()) as mock_stdout:
            assert main([]) == 0
        assert "flowering-phenology" in mock_stdout.getvalue()

    @pytest.mark.parametrize(
        ("argv", "handler"),
        [
            (["build"], "cmd_build"),
            (["fetch-names"], "cmd_fetch_names"),
            (["refresh"], "cmd_refresh"),
            (["info"], "cmd_info"),
        ],
    )
    def test_dispatch(self, argv: list[str], handler: str) -> None:
        with patch(f"flowering_phenology.cli.{handler}", return_value=0) as mock_cmd:
            assert main(argv) == 0
            mock_cmd.assert_called_once()

    def test_missing_file_reported(self) -> None:
        with (
            patch(
                "flowering_phenology.cli.build_all",
                side_effect=FileNotFoundError("Checklist file not found: flora.csv"),
            ),
            patch("sys.stderr", new=StringIO()) as mock_stderr,
        ):
            assert main(["build"]) == 1
        assert "Checklist file not found" in mock_stderr.getvalue()

    def test_bad_input_reported(self) -> None:
        with (
            patch(
                "flowering_phenology.cli.build_all",
                side_effect=ValueError("Occurrence table is missing required columns: eventDate"),
            ),
            patch("sys.stderr", new=StringIO()) as mock_stderr,
        ):
            assert main(["build"]) == 1
        assert "eventDate" in mock_stderr.getvalue()

    def test_unknown_command_shows_help(self) -> None:
        with patch("flowering_phenology.cli.create_parser") as mock_parser:
            mock_parser.return_value.parse_args.return_value = argparse.Namespace(
                command="unknown", debug=False
            )
            assert main([]) == 1
