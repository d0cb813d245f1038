"""Tests for the subcommand handlers."""

from unittest.mock import patch

import pytest

from args import parse_args
from cli_commands import (
    orbs_except,
    run_bulk_import,
    run_collect,
    run_resolve_dependencies,
    run_sync,
)
from cli_config import ConfigError
from common.orb_files import dump_orb_sources, orb_src_file_name
from importer.models import ImportOutcome
from registry.errors import RegistryConnectionError
from resolver.models import VersionedOrb


def orb(ref, *deps):
    lines = ["version: 2.1"]
    if deps:
        lines.append("orbs:")
        lines.extend(f"  d{i}: {dep}" for i, dep in enumerate(deps))
    return VersionedOrb.from_ref(ref, "\n".join(lines) + "\n")


@pytest.fixture(autouse=True)
def no_tokens(monkeypatch):
    for name in ("CIRCLECI_TOKEN", "ORBSYNC_SRC_TOKEN", "ORBSYNC_DST_TOKEN"):
        monkeypatch.delenv(name, raising=False)


class TestCollect:
    """collect writes the list and the sources."""

    @patch("cli_commands.list_all_versioned_orbs")
    @patch("cli_commands.GraphQLClient")
    def test_writes_list_and_sources(self, mock_client, mock_list, tmp_path):
        mock_list.return_value = [orb("ns/a@1.0.0"), orb("ns/b@1.0.0")]
        list_path = tmp_path / "orbs.txt"
        src_dir = tmp_path / "orbs"
        args = parse_args(["collect", "--list", str(list_path), "--src", str(src_dir), "--token", "t"])

        run_collect(args)

        mock_client.assert_called_once_with("https://circleci.com", "t")
        _, kwargs = mock_list.call_args
        assert kwargs["include_source"] is True
        assert kwargs["slow"] is False
        assert list_path.read_text(encoding="utf-8") == "ns/a@1.0.0\nns/b@1.0.0"
        assert (src_dir / orb_src_file_name("ns/a@1.0.0")).read_text(encoding="utf-8") == "version: 2.1\n"

    @patch("cli_commands.list_all_versioned_orbs")
    @patch("cli_commands.GraphQLClient")
    def test_list_only_skips_sources(self, mock_client, mock_list, tmp_path):
        mock_list.return_value = [orb("ns/a@1.0.0")]
        src_dir = tmp_path / "orbs"
        args = parse_args([
            "collect", "--host", "https://src", "--list", str(tmp_path / "orbs.txt"),
            "--src", str(src_dir), "--list-only",
            "--must-include", "x/y, z/w", "--must-include", "q/r",
        ])

        run_collect(args)

        mock_client.assert_called_once_with("https://src", None)
        _, kwargs = mock_list.call_args
        assert kwargs["include_source"] is False
        assert kwargs["hidden_orbs"] == ["x/y", "z/w", "q/r"]
        assert not src_dir.exists()
        mock_client.return_value.close.assert_called_once()

    @patch("cli_commands.list_all_versioned_orbs")
    @patch("cli_commands.GraphQLClient")
    def test_client_is_closed_on_failure(self, mock_client, mock_list, tmp_path):
        mock_list.side_effect = RegistryConnectionError("refused")
        args = parse_args(["collect", "--list", str(tmp_path / "orbs.txt"), "--src", str(tmp_path / "orbs")])

        with pytest.raises(RegistryConnectionError):
            run_collect(args)

        mock_client.return_value.close.assert_called_once()
        assert not (tmp_path / "orbs.txt").exists()


class TestResolveDependencies:
    """resolve-dependencies writes the three reports."""

    def test_reports(self, tmp_path):
        src_dir = tmp_path / "orbs"
        dump_orb_sources([
            orb("ns/app@1.0.0", "ns/lib@1"),
            orb("ns/lib@1.4.0"),
            orb("ns/lost@1.0.0", "ns/missing@2.0.0"),
            VersionedOrb.from_ref("ns/bad@1.0.0", "orbs: [unclosed"),
        ], str(src_dir))
        paths = {name: tmp_path / f"{name}.txt" for name in ("ordered", "illegible", "unresolved")}
        args = parse_args([
            "resolve-dependencies", "--src", str(src_dir),
            "--ordered", str(paths["ordered"]),
            "--illegible", str(paths["illegible"]),
            "--unresolved", str(paths["unresolved"]),
        ])

        run_resolve_dependencies(args)

        assert paths["ordered"].read_text(encoding="utf-8") == "ns/lib@1.4.0\nns/app@1.0.0"
        assert paths["illegible"].read_text(encoding="utf-8") == "ns/bad@1.0.0"
        assert paths["unresolved"].read_text(encoding="utf-8") == '"ns/lost@1.0.0" => [ "ns/missing@2.0.0" ]'

    def test_missing_source_directory(self, tmp_path):
        args = parse_args(["resolve-dependencies", "--src", str(tmp_path / "absent")])

        with pytest.raises(OSError):
            run_resolve_dependencies(args)


class TestBulkImport:
    """bulk-import reads the list and writes the outcome."""

    def _args(self, tmp_path, *extra):
        return parse_args([
            "bulk-import", "--host", "https://dst",
            "--list", str(tmp_path / "resolved.txt"),
            "--src", str(tmp_path / "orbs"),
            "--available", str(tmp_path / "available.txt"),
            "--dropped", str(tmp_path / "dropped.txt"),
            *extra,
        ])

    def test_token_is_required(self, tmp_path):
        with pytest.raises(ConfigError):
            run_bulk_import(self._args(tmp_path))

    @patch("cli_commands.import_orbs_with_retries")
    @patch("cli_commands.OrbRegistryWriter")
    @patch("cli_commands.GraphQLClient")
    def test_imports_in_list_order(self, mock_client, mock_writer, mock_import, tmp_path, monkeypatch):
        monkeypatch.setenv("CIRCLECI_TOKEN", "env-token")
        dump_orb_sources([orb("ns/a@1.0.0"), orb("ns/b@1.0.0")], str(tmp_path / "orbs"))
        (tmp_path / "resolved.txt").write_text("ns/b@1.0.0\nns/a@1.0.0\n", encoding="utf-8")
        mock_import.return_value = ImportOutcome(available=["ns/b@1.0.0"], dropped=["ns/a@1.0.0"])

        run_bulk_import(self._args(tmp_path, "--max-attempts", "2"))

        mock_client.assert_called_once_with("https://dst", "env-token")
        args, kwargs = mock_import.call_args
        assert args[0] is mock_writer.return_value
        assert [o.ref for o in args[1]] == ["ns/b@1.0.0", "ns/a@1.0.0"]
        assert kwargs == {"max_attempts": 2, "retry_delay": None}
        assert (tmp_path / "available.txt").read_text(encoding="utf-8") == "ns/b@1.0.0"
        assert (tmp_path / "dropped.txt").read_text(encoding="utf-8") == "ns/a@1.0.0"
        mock_client.return_value.close.assert_called_once()


class TestSync:
    """sync chains collect, resolve and import."""

    def test_orbs_except(self):
        a, b, c = orb("ns/a@1.0.0"), orb("ns/b@1.0.0"), orb("ns/c@1.0.0")

        assert orbs_except([c, a, b], [VersionedOrb.from_ref("ns/a@1.0.0")]) == [c, b]

    def test_destination_token_is_required(self):
        with pytest.raises(ConfigError):
            run_sync(parse_args(["sync", "--dst-host", "https://dst"]))

    @patch("cli_commands.import_orbs_with_retries")
    @patch("cli_commands.OrbRegistryWriter")
    @patch("cli_commands.list_all_versioned_orbs")
    @patch("cli_commands.GraphQLClient")
    def test_imports_only_what_destination_lacks(self, mock_client, mock_list, mock_writer, mock_import):
        src_orbs = [orb("ns/app@1.0.0", "ns/lib@1.0.0"), orb("ns/lib@1.0.0"), orb("ns/new@0.1.0")]
        dst_orbs = [VersionedOrb.from_ref("ns/lib@1.0.0")]
        mock_list.side_effect = [src_orbs, dst_orbs]
        mock_import.return_value = ImportOutcome(available=["ns/app@1.0.0", "ns/new@0.1.0"])
        args = parse_args(["sync", "--dst-host", "https://dst", "--dst-token", "dt", "--slow"])

        outcome = run_sync(args)

        assert mock_client.call_args_list[0].args == ("https://circleci.com", None)
        assert mock_client.call_args_list[1].args == ("https://dst", "dt")
        assert mock_list.call_args_list[0].kwargs["include_source"] is True
        assert mock_list.call_args_list[1].kwargs["include_source"] is False
        assert mock_list.call_args_list[0].kwargs["slow"] is True
        mock_writer.assert_called_once_with(mock_client.return_value)
        pending = mock_import.call_args.args[1]
        assert [o.ref for o in pending] == ["ns/new@0.1.0", "ns/app@1.0.0"]
        assert outcome.available == ["ns/app@1.0.0", "ns/new@0.1.0"]
        assert mock_client.return_value.close.call_count == 2
