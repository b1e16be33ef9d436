"""Unit tests for preflight checks."""

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

from docpipe.config import DocpipeConfig
from docpipe.utils.preflight import PreflightCheck, PreflightChecker, PreflightResult


class TestPreflightResult:
    """Tests for PreflightResult aggregation."""

    def test_missing_required_fails(self) -> None:
        result = PreflightResult()

        result.add_check(PreflightCheck(name="metadata", available=False, message="not found"))

        assert result.success is False
        assert result.errors == ["Required: metadata (not found)"]

    def test_missing_optional_warns(self) -> None:
        result = PreflightResult()

        result.add_check(PreflightCheck(name="tags", available=False, required=False, message="x"))

        assert result.success is True
        assert result.warnings == ["Optional: tags (x)"]

    def test_to_dict(self) -> None:
        result = PreflightResult()
        result.add_check(PreflightCheck(name="npm", available=True, path="/usr/bin/npm"))

        data = result.to_dict()

        assert data["success"] is True
        assert data["checks"][0]["path"] == "/usr/bin/npm"


class TestCheckCommand:
    """Tests for check_command."""

    def test_command_on_path(self) -> None:
        checker = PreflightChecker()

        with patch("shutil.which", return_value="/usr/bin/npm"), patch(
            "subprocess.run",
            return_value=MagicMock(returncode=0, stdout="10.2.4\n", stderr=""),
        ):
            check = checker.check_command("site build command", "npm run build")

        assert check.available is True
        assert check.path == "/usr/bin/npm"
        assert check.version == "10.2.4"

    def test_command_missing(self) -> None:
        checker = PreflightChecker()

        with patch("shutil.which", return_value=None):
            check = checker.check_command("site build command", "npm run build")

        assert check.available is False
        assert "'npm' not found in PATH" in check.message

    def test_empty_command(self) -> None:
        check = PreflightChecker().check_command("site build command", "")

        assert check.available is False
        assert check.message == "empty command"

    def test_version_timeout(self) -> None:
        checker = PreflightChecker(timeout=1)

        with patch("subprocess.run", side_effect=subprocess.TimeoutExpired("npm", 1)):
            assert checker.get_command_version("npm") is None


class TestCheckAll:
    """Tests for check_all against a site."""

    def test_sample_site(self, site_config: DocpipeConfig) -> None:
        """Test every input of the sample site is found."""
        with patch("shutil.which", return_value="/usr/bin/npm"), patch(
            "subprocess.run",
            return_value=MagicMock(returncode=0, stdout="10.2.4", stderr=""),
        ):
            result = PreflightChecker().check_all(site_config)

        assert result.success is True
        assert result.warnings == []
        assert [c.name for c in result.checks] == [
            "command metadata",
            "taxonomy authors.yml",
            "taxonomy tags.yml",
            "sub-command manifest",
            "site build command",
        ]

    def test_missing_taxonomy_is_warning(self, site_config: DocpipeConfig) -> None:
        (site_config.root / "blog" / "tags.yml").unlink()

        result = PreflightChecker().check_all(site_config, skip_site=True)

        assert result.success is True
        assert len(result.warnings) == 1
        assert "tags.yml" in result.warnings[0]

    def test_missing_metadata_fails(self, tmp_path: Path) -> None:
        config = DocpipeConfig(_root=tmp_path)

        result = PreflightChecker().check_all(config, skip_site=True)

        assert result.success is False
        assert "command metadata" in result.errors[0]

    def test_skip_pages(self, tmp_path: Path) -> None:
        config = DocpipeConfig(_root=tmp_path)

        result = PreflightChecker().check_all(config, skip_pages=True, skip_site=True)

        assert result.success is True
        assert "command metadata" not in [c.name for c in result.checks]
