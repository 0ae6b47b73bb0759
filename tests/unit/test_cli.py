"""Unit tests for CLI commands."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from typer.testing import CliRunner

from conftest import FakeDirectory, FakeFactory, FakeIPAM, make_integrator

from ipam_firewall_sync.cli.main import app
from ipam_firewall_sync.models.report import RunStatus
from ipam_firewall_sync.utils.config import SyncConfig, set_config
from ipam_firewall_sync.utils.errors import CollaboratorFetchError

runner = CliRunner()


@pytest.fixture(autouse=True)
def installed_config(config: SyncConfig):
    set_config(config)
    yield config
    set_config(None)


def fake_worker(status=RunStatus.SUCCESS, error=None) -> MagicMock:
    worker = MagicMock()
    worker.work = AsyncMock(return_value=status, side_effect=error)
    worker.last_report = None
    return worker


class TestMainCLI:
    """Tests for main CLI app."""

    def test_help(self):
        """Test --help flag."""
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "run" in result.stdout

    def test_version(self):
        """Test the version command."""
        from ipam_firewall_sync import __version__

        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_missing_config_file(self, tmp_path):
        """Test a missing --config file exits with 1."""
        result = runner.invoke(app, ["--config", str(tmp_path / "absent.yaml"), "run"])
        assert result.exit_code == 1
        assert "Invalid configuration" in result.stdout


class TestRunCommand:
    """Tests for the run command."""

    def test_success(self):
        """Test a successful run exits with 0."""
        worker = fake_worker()
        with patch("ipam_firewall_sync.core.worker.SyncWorker", return_value=worker):
            result = runner.invoke(app, ["run", "--priority", "high"])

        assert result.exit_code == 0
        worker.work.assert_awaited_once()
        assert worker.work.await_args.args[0].value == "high"

    def test_already_running(self):
        """Test the already-running signal becomes exit code 7."""
        with patch(
            "ipam_firewall_sync.core.worker.SyncWorker",
            return_value=fake_worker(RunStatus.ALREADY_RUNNING),
        ):
            result = runner.invoke(app, ["run"])

        assert result.exit_code == 7

    def test_error(self):
        """Test a raised run error exits with 1."""
        with patch(
            "ipam_firewall_sync.core.worker.SyncWorker",
            return_value=fake_worker(error=CollaboratorFetchError("directory down")),
        ):
            result = runner.invoke(app, ["run"])

        assert result.exit_code == 1
        assert "directory down" in result.stdout

    def test_invalid_priority(self):
        """Test an unknown priority is rejected by the parser."""
        result = runner.invoke(app, ["run", "--priority", "urgent"])
        assert result.exit_code == 2

    def test_report_table(self, factory: FakeFactory):
        """Test --report prints the target table."""
        with patch("ipam_firewall_sync.core.worker.DriverFactory", return_value=factory):
            result = runner.invoke(app, ["run", "--report"])

        assert result.exit_code == 0
        assert "Run (low)" in result.stdout
        assert factory.firewalls["https://fw01.example.org"].called("add_address_group")


class TestIntegratorsCommand:
    """Tests for the integrators command."""

    def test_table(self):
        """Test integrators are listed."""
        factory = FakeFactory(FakeDirectory([make_integrator(name="office-lan")]))
        with patch("ipam_firewall_sync.drivers.factory.DriverFactory", return_value=factory):
            result = runner.invoke(app, ["integrators"])

        assert result.exit_code == 0
        assert "office-lan" in result.stdout
        assert factory.directory_handle.close_count == 1

    def test_json(self):
        """Test JSON output omits endpoint credentials."""
        factory = FakeFactory(FakeDirectory([make_integrator()]))
        with patch("ipam_firewall_sync.drivers.factory.DriverFactory", return_value=factory):
            result = runner.invoke(app, ["integrators", "--json"])

        assert result.exit_code == 0
        assert '"office-lan"' in result.stdout
        assert "fw-token" not in result.stdout


class TestPreviewCommand:
    """Tests for the preview command."""

    def test_preview(self, prefixes):
        """Test the desired objects and group are printed without mutations."""
        factory = FakeFactory(FakeDirectory([make_integrator()]), FakeIPAM(prefixes))
        with patch("ipam_firewall_sync.drivers.factory.DriverFactory", return_value=factory):
            result = runner.invoke(app, ["preview", "1"])

        assert result.exit_code == 0
        assert "netbox_192.168.1.0/24" in result.stdout
        assert "nsg-office" in result.stdout
        assert factory.firewalls == {}

    def test_unknown_integrator(self):
        """Test a missing integrator exits with 1."""
        factory = FakeFactory(FakeDirectory([]))
        with patch("ipam_firewall_sync.drivers.factory.DriverFactory", return_value=factory):
            result = runner.invoke(app, ["preview", "99"])

        assert result.exit_code == 1
