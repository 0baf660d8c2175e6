from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Generator, List

import pytest
from click.testing import CliRunner

from depledger.cli import cli
from depledger.constants import COPYRIGHT_NOT_PRESENT, REPORT_HEADER
from depledger.core import read_log, render_license_report
from depledger.models import load_allow_list

REGISTRY = "(registry+https://github.com/rust-lang/crates.io-index)"

ALLOW_LIST = {
    "build_only": ["cc"],
    "vendor": {
        "my-app": {
            "url": "https://git.example.com/my-app",
            "target": {
                "name": "My App",
                "version": "4.1",
                "license_url": "https://example.com/LICENSE",
            },
        },
    },
    "third_party": {
        "serde": {
            "id": "serde",
            "source": "crates.io",
            "licenses": [
                {"MIT": {"copyright": {"Lines": ["Copyright (c) 2014 Erick Tryzelaar"]}}},
            ],
        },
        "libc": {
            "id": "libc",
            "source": "crates.io",
            "licenses": [{"MIT": {"copyright": "NotPresent"}}, "BSLv1"],
        },
    },
}

PACKAGES = [
    f"serde 1.0.136 {REGISTRY}",
    f"libc 0.2.126 {REGISTRY}",
    f"cc 1.0.73 {REGISTRY}",
    "my-app 0.3.0 (path+file:///src/my-app)",
]


def write_log(path: Path, package_ids: List[str]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    lines = [
        json.dumps({"reason": "compiler-artifact", "package_id": package_id})
        for package_id in package_ids
    ]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def write_allow_list(path: Path, document: dict) -> Path:
    path.write_text(json.dumps(document, indent=2), encoding="utf-8")
    return path


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture(autouse=True)
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[Path, None, None]:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("DEPLEDGER_SETTINGS", raising=False)
    yield tmp_path
    logging.getLogger("depledger").handlers.clear()


@pytest.fixture
def log_file(tmp_path: Path) -> Path:
    return write_log(tmp_path / "cargo-build.json", PACKAGES)


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    return write_allow_list(tmp_path / "allow-list.json", ALLOW_LIST)


@pytest.mark.unit
class TestGenConfig:
    """Tests for the gen-config command."""

    def test_writes_skeleton(self, runner: CliRunner, tmp_path: Path, log_file: Path) -> None:
        """Test linked packages become third-party, the rest build-only."""
        tree_file = tmp_path / "tree.txt"
        tree_file.write_text(
            "my-app v0.3.0 (/src/my-app)\n├── serde v1.0.136\n└── libc v0.2.126\n",
            encoding="utf-8",
        )
        output = tmp_path / "out" / "allow-list.json"

        result = runner.invoke(
            cli, ["gen-config", str(log_file), str(tree_file), str(output)]
        )

        assert result.exit_code == 0
        assert f"[OK] Wrote {output} (2 third-party, 2 build-only)" in result.stdout
        assert json.loads(output.read_text(encoding="utf-8")) == {
            "build_only": ["cc", "my-app"],
            "vendor": {},
            "third_party": {
                "libc": {"id": "libc", "source": "crates.io", "licenses": []},
                "serde": {"id": "serde", "source": "crates.io", "licenses": []},
            },
        }

    def test_partially_linked_crate(self, runner: CliRunner, tmp_path: Path) -> None:
        """Test a crate with one linked version is listed as third-party only."""
        log_file = write_log(
            tmp_path / "cargo-build.json",
            [f"syn 1.0.109 {REGISTRY}", f"syn 2.0.15 {REGISTRY}"],
        )
        tree_file = tmp_path / "tree.txt"
        tree_file.write_text("my-app v0.3.0\n└── syn v2.0.15\n", encoding="utf-8")
        output = tmp_path / "allow-list.json"

        result = runner.invoke(
            cli, ["gen-config", str(log_file), str(tree_file), str(output)]
        )

        assert result.exit_code == 0
        document = json.loads(output.read_text(encoding="utf-8"))
        assert document["build_only"] == []
        assert list(document["third_party"]) == ["syn"]

    def test_output_is_loadable(self, runner: CliRunner, tmp_path: Path, log_file: Path) -> None:
        """Test the written skeleton loads as an allow-list."""
        tree_file = tmp_path / "tree.txt"
        tree_file.write_text("my-app v0.3.0\n└── serde v1.0.136\n", encoding="utf-8")
        output = tmp_path / "allow-list.json"

        runner.invoke(cli, ["gen-config", str(log_file), str(tree_file), str(output)])
        allow_list = load_allow_list(output)

        assert set(allow_list.third_party) == {"serde"}
        assert allow_list.build_only == {"cc", "libc", "my-app"}

    def test_existing_output_backed_up(
        self, runner: CliRunner, tmp_path: Path, log_file: Path
    ) -> None:
        """Test an existing allow-list is preserved as a backup."""
        tree_file = tmp_path / "tree.txt"
        tree_file.write_text("my-app v0.3.0\n", encoding="utf-8")
        output = tmp_path / "allow-list.json"
        output.write_text("{}\n", encoding="utf-8")

        result = runner.invoke(
            cli, ["gen-config", str(log_file), str(tree_file), str(output)]
        )

        assert result.exit_code == 0
        backups = list(tmp_path.glob("allow-list.json.*.backup"))
        assert len(backups) == 1
        assert backups[0].read_text(encoding="utf-8") == "{}\n"

    def test_bad_tree(self, runner: CliRunner, tmp_path: Path, log_file: Path) -> None:
        """Test a malformed tree leaves no output behind."""
        tree_file = tmp_path / "tree.txt"
        tree_file.write_text("my-app v0.3.0\n└── serde\n", encoding="utf-8")
        output = tmp_path / "allow-list.json"

        result = runner.invoke(
            cli, ["gen-config", str(log_file), str(tree_file), str(output)]
        )

        assert result.exit_code == 1
        assert "[ERROR]" in result.stderr
        assert not output.exists()


@pytest.mark.unit
class TestGenLicenses:
    """Tests for the gen-licenses command."""

    def test_prints_report(self, runner: CliRunner, log_file: Path, config_file: Path) -> None:
        """Test the report on stdout matches the rendered report."""
        expected = render_license_report(read_log(log_file), load_allow_list(config_file))

        result = runner.invoke(cli, ["gen-licenses", str(log_file), str(config_file)])

        assert result.exit_code == 0
        assert result.stdout == expected
        assert result.stdout.startswith(REPORT_HEADER)
        assert "crate: libc\n" in result.stdout
        assert "license(s): MIT AND BSL-1.0\n" in result.stdout
        assert "crate: cc\n" not in result.stdout
        assert "crate: my-app\n" not in result.stdout

    def test_unlisted_package(self, runner: CliRunner, tmp_path: Path, config_file: Path) -> None:
        """Test every unlisted package is named and nothing is printed."""
        log_file = write_log(
            tmp_path / "cargo-build.json",
            PACKAGES + [f"bar 1.0.0 {REGISTRY}", f"aho 0.7.0 {REGISTRY}"],
        )

        result = runner.invoke(cli, ["gen-licenses", str(log_file), str(config_file)])

        assert result.exit_code == 1
        assert "aho" in result.stderr
        assert "bar" in result.stderr
        assert result.stdout == ""

    def test_empty_license_list(self, runner: CliRunner, tmp_path: Path, log_file: Path) -> None:
        """Test a third-party entry without licenses fails the report."""
        document = json.loads(json.dumps(ALLOW_LIST))
        document["third_party"]["serde"]["licenses"] = []
        config_file = write_allow_list(tmp_path / "allow-list.json", document)

        result = runner.invoke(cli, ["gen-licenses", str(log_file), str(config_file)])

        assert result.exit_code == 1
        assert "No license specified for serde" in result.stderr
        assert result.stdout == ""

    def test_invalid_allow_list(self, runner: CliRunner, tmp_path: Path, log_file: Path) -> None:
        """Test an unparsable allow-list fails before the log is read."""
        config_file = tmp_path / "allow-list.json"
        config_file.write_text("{not json", encoding="utf-8")

        result = runner.invoke(cli, ["gen-licenses", str(log_file), str(config_file)])

        assert result.exit_code == 1
        assert "[ERROR]" in result.stderr


@pytest.mark.unit
class TestGenLicensesDir:
    """Tests for the gen-licenses-dir command."""

    def test_merges_logs(self, runner: CliRunner, tmp_path: Path, config_file: Path) -> None:
        """Test logs from several directories produce one report."""
        root = tmp_path / "artifacts"
        write_log(root / "x86_64" / "cargo-build.json", [f"serde 1.0.136 {REGISTRY}"])
        write_log(root / "aarch64" / "cargo-build.json", [f"serde 1.0.137 {REGISTRY}"])
        write_log(root / "aarch64" / "other.json", [f"bar 1.0.0 {REGISTRY}"])

        result = runner.invoke(cli, ["gen-licenses-dir", str(root), str(config_file)])

        assert result.exit_code == 0
        assert "crate: serde\nversion(s): 1.0.136, 1.0.137\n" in result.stdout
        assert "crate: bar" not in result.stdout

    def test_file_name_option(self, runner: CliRunner, tmp_path: Path, config_file: Path) -> None:
        """Test --file-name selects which logs are merged."""
        root = tmp_path / "artifacts"
        write_log(root / "a" / "messages.json", [f"libc 0.2.126 {REGISTRY}"])

        result = runner.invoke(
            cli,
            ["gen-licenses-dir", "--file-name", "messages.json", str(root), str(config_file)],
        )

        assert result.exit_code == 0
        assert "crate: libc\n" in result.stdout

    def test_file_name_setting(self, runner: CliRunner, tmp_path: Path, config_file: Path) -> None:
        """Test the log_file_name setting is the default name."""
        (tmp_path / "depledger.toml").write_text(
            '[depledger]\nlog_file_name = "messages.json"\n', encoding="utf-8"
        )
        root = tmp_path / "artifacts"
        write_log(root / "a" / "messages.json", [f"libc 0.2.126 {REGISTRY}"])

        result = runner.invoke(cli, ["gen-licenses-dir", str(root), str(config_file)])

        assert result.exit_code == 0
        assert "crate: libc\n" in result.stdout

    def test_conflict_across_logs(
        self, runner: CliRunner, tmp_path: Path, config_file: Path
    ) -> None:
        """Test a package with different sources in two logs fails."""
        root = tmp_path / "artifacts"
        write_log(root / "a" / "cargo-build.json", [f"libc 0.2.126 {REGISTRY}"])
        write_log(root / "b" / "cargo-build.json", ["libc 0.2.126 (path+file:///libc)"])

        result = runner.invoke(cli, ["gen-licenses-dir", str(root), str(config_file)])

        assert result.exit_code == 1
        assert "libc" in result.stderr
        assert result.stdout == ""

    def test_no_logs_found(self, runner: CliRunner, tmp_path: Path, config_file: Path) -> None:
        """Test an empty directory is an error."""
        root = tmp_path / "artifacts"
        root.mkdir()

        result = runner.invoke(cli, ["gen-licenses-dir", str(root), str(config_file)])

        assert result.exit_code == 1
        assert "No build logs named cargo-build.json found" in result.stderr


@pytest.mark.unit
class TestGenBom:
    """Tests for the gen-bom command."""

    def test_writes_bom(
        self, runner: CliRunner, tmp_path: Path, log_file: Path, config_file: Path
    ) -> None:
        """Test the BOM file describes the subject and its dependencies."""
        output = tmp_path / "bom.json"

        result = runner.invoke(
            cli, ["gen-bom", "my-app", str(log_file), str(config_file), str(output)]
        )

        assert result.exit_code == 0
        assert f"[OK] Wrote {output} (my-app 0.3.0, 2 dependencies)" in result.stdout

        document = json.loads(output.read_text(encoding="utf-8"))
        assert set(document) == {"timestamp", "subject", "dependencies"}
        assert document["subject"] == {
            "identity": "my-app",
            "url": "https://git.example.com/my-app",
            "version": "0.3.0",
            "target": {
                "name": "My App",
                "version": "4.1",
                "license_url": "https://example.com/LICENSE",
            },
        }
        assert [dep["identity"] for dep in document["dependencies"]] == ["libc", "serde"]
        assert document["dependencies"][0]["license"] == {
            "OpenSource": [
                {"spdx_short": "MIT", "copyrights": [COPYRIGHT_NOT_PRESENT]},
                {"spdx_short": "BSL-1.0", "copyrights": None},
            ]
        }

    def test_subject_not_in_log(
        self, runner: CliRunner, tmp_path: Path, log_file: Path, config_file: Path
    ) -> None:
        """Test an unknown subject fails without writing."""
        output = tmp_path / "bom.json"

        result = runner.invoke(
            cli, ["gen-bom", "other-app", str(log_file), str(config_file), str(output)]
        )

        assert result.exit_code == 1
        assert "not in build log" in result.stderr
        assert not output.exists()

    def test_subject_not_vendor(
        self, runner: CliRunner, tmp_path: Path, log_file: Path, config_file: Path
    ) -> None:
        """Test the subject must be a vendor package."""
        output = tmp_path / "bom.json"

        result = runner.invoke(
            cli, ["gen-bom", "serde", str(log_file), str(config_file), str(output)]
        )

        assert result.exit_code == 1
        assert "not in the vendor list" in result.stderr

    def test_unknown_dependency(
        self, runner: CliRunner, tmp_path: Path, config_file: Path
    ) -> None:
        """Test a dependency in no category fails the BOM."""
        log_file = write_log(
            tmp_path / "cargo-build.json", PACKAGES + [f"bar 1.0.0 {REGISTRY}"]
        )
        output = tmp_path / "bom.json"

        result = runner.invoke(
            cli, ["gen-bom", "my-app", str(log_file), str(config_file), str(output)]
        )

        assert result.exit_code == 1
        assert "bar" in result.stderr
        assert not output.exists()
