"""Tests for the semverstore command line."""

import os

import pytest
from click.testing import CliRunner

from semverstore import __version__
from semverstore.cli.main import cli
from semverstore.driver import VersionDriver
from tests.fakes import AlwaysConflictingStore, InMemoryVersionStore


@pytest.fixture
def store():
    return InMemoryVersionStore()


@pytest.fixture
def source_path(tmp_path):
    path = tmp_path / "source.yml"
    path.write_text("driver: s3\nbucket: versions\nkey: app/version\ninitial_version: 1.0.0\n")
    return path


@pytest.fixture
def runner(tmp_path, monkeypatch, user_config_dir):
    monkeypatch.chdir(tmp_path)
    return CliRunner()


@pytest.fixture
def fake_backend(monkeypatch, store):
    """Serve every source from the in-memory store."""
    seen = {}

    def get_driver(source, git_work_dir=None):
        seen["source"] = source
        return VersionDriver(store, source.initial)

    monkeypatch.setattr("semverstore.cli.commands.get_driver", get_driver)
    return seen


def invoke(runner, *args):
    return runner.invoke(cli, [str(arg) for arg in args])


@pytest.mark.short
class TestBumpCommand:
    def test_bump_from_initial_version(self, runner, source_path, store, fake_backend):
        result = invoke(runner, "bump", "-s", source_path, "--bump", "minor")

        assert result.exit_code == 0, result.output
        assert result.stdout == "1.1.0\n"
        assert store.text == "1.1.0"
        assert fake_backend["source"].bucket == "versions"
        assert store.closed == 1

    def test_bump_with_prerelease(self, runner, source_path, store, fake_backend):
        store.write("2.0.0")

        result = invoke(runner, "bump", "-s", source_path, "--bump", "major", "--pre", "beta")

        assert result.exit_code == 0, result.output
        assert result.stdout == "3.0.0-beta.1\n"

    def test_pre_only(self, runner, source_path, store, fake_backend):
        store.write("3.0.0-beta.1")

        result = invoke(runner, "bump", "-s", source_path, "--pre", "beta")

        assert result.stdout == "3.0.0-beta.2\n"

    def test_progress_goes_to_stderr(self, runner, source_path, store, fake_backend):
        result = invoke(runner, "bump", "-s", source_path, "--bump", "patch")

        assert "Bumped memory://version from 1.0.0 to 1.0.1" in result.stderr
        assert "Bumped" not in result.stdout

    def test_bump_requires_a_rule(self, runner, source_path, fake_backend):
        result = invoke(runner, "bump", "-s", source_path)

        assert result.exit_code == 2
        assert "Specify --bump and/or --pre" in result.output

    def test_unknown_bump_word(self, runner, source_path, fake_backend):
        result = invoke(runner, "bump", "-s", source_path, "--bump", "huge")

        assert result.exit_code == 2

    def test_final_without_prerelease(self, runner, source_path, store, fake_backend):
        store.write("1.2.3")

        result = invoke(runner, "bump", "-s", source_path, "--bump", "final")

        assert result.exit_code == 1
        assert "[ERROR]" in result.stderr
        assert "Cannot finalize version 1.2.3" in result.stderr
        assert result.stdout == ""
        assert store.text == "1.2.3"
        assert store.closed == 1

    def test_final_with_pre(self, runner, source_path, fake_backend):
        result = invoke(runner, "bump", "-s", source_path, "--bump", "final", "--pre", "rc")

        assert result.exit_code == 1
        assert "cannot be combined" in result.stderr

    def test_concurrent_modification(self, runner, source_path, monkeypatch):
        store = AlwaysConflictingStore("1.0.0")
        monkeypatch.setattr(
            "semverstore.cli.commands.get_driver",
            lambda source, git_work_dir=None: VersionDriver(store, source.initial),
        )

        result = invoke(runner, "bump", "-s", source_path, "--bump", "patch")

        assert result.exit_code == 1
        assert "12 attempts" in result.stderr
        assert "Re-run the command" in result.stderr

    def test_debug_shows_retries(self, runner, source_path, monkeypatch):
        store = AlwaysConflictingStore("1.0.0")
        monkeypatch.setattr(
            "semverstore.cli.commands.get_driver",
            lambda source, git_work_dir=None: VersionDriver(store, source.initial, max_retries=2),
        )

        result = invoke(runner, "--debug", "bump", "-s", source_path, "--bump", "patch")

        assert result.exit_code == 1
        assert "attempt 1/2" in result.stderr
        assert "Full traceback" in result.stderr


@pytest.mark.short
class TestCheckAndGet:
    def test_check_empty_store(self, runner, source_path, store, fake_backend):
        result = invoke(runner, "check", "-s", source_path)

        assert result.exit_code == 0, result.output
        assert result.stdout == "1.0.0\n"
        assert store.writes == []

    def test_check_since(self, runner, source_path, store, fake_backend):
        store.write("2.3.1")

        assert invoke(runner, "check", "-s", source_path, "--since", "2.3.0").stdout == "2.3.1\n"
        assert invoke(runner, "check", "-s", source_path, "--since", "2.3.1").stdout == "2.3.1\n"
        assert invoke(runner, "check", "-s", source_path, "--since", "2.4.0").stdout == ""

    def test_check_invalid_cursor(self, runner, source_path, fake_backend):
        result = invoke(runner, "check", "-s", source_path, "--since", "2.4")

        assert result.exit_code == 1
        assert "Invalid version format: '2.4'" in result.stderr

    def test_get_does_not_write(self, runner, source_path, store, fake_backend):
        store.write("1.4.0")

        result = invoke(runner, "get", "-s", source_path, "--bump", "minor", "--pre", "rc")

        assert result.stdout == "1.5.0-rc.1\n"
        assert store.text == "1.4.0"

    def test_get_plain(self, runner, source_path, store, fake_backend):
        store.write("1.4.0")

        assert invoke(runner, "get", "-s", source_path).stdout == "1.4.0\n"


@pytest.mark.short
class TestSetCommand:
    def test_set_argument(self, runner, source_path, store, fake_backend):
        store.write("5.0.0")

        result = invoke(runner, "set", "-s", source_path, "1.0.0-alpha.1")

        assert result.exit_code == 0, result.output
        assert result.stdout == "1.0.0-alpha.1\n"
        assert store.text == "1.0.0-alpha.1"

    def test_set_from_file(self, runner, tmp_path, source_path, store, fake_backend):
        version_file = tmp_path / "number"
        version_file.write_text("9.9.9\n")

        result = invoke(runner, "set", "-s", source_path, "--file", version_file)

        assert result.exit_code == 0, result.output
        assert store.text == "9.9.9"
        assert invoke(runner, "check", "-s", source_path).stdout == "9.9.9\n"

    def test_set_needs_exactly_one_input(self, runner, tmp_path, source_path, fake_backend):
        version_file = tmp_path / "number"
        version_file.write_text("9.9.9\n")

        assert invoke(runner, "set", "-s", source_path).exit_code == 2
        assert (
            invoke(runner, "set", "-s", source_path, "1.0.0", "--file", version_file).exit_code
            == 2
        )

    def test_set_invalid_version(self, runner, source_path, store, fake_backend):
        result = invoke(runner, "set", "-s", source_path, "one")

        assert result.exit_code == 1
        assert store.writes == []


@pytest.mark.short
class TestConfigurationErrors:
    def test_missing_fields(self, runner, tmp_path):
        path = tmp_path / "source.yml"
        path.write_text("driver: gcs\n")

        result = invoke(runner, "check", "-s", path)

        assert result.exit_code == 1
        assert "Invalid source configuration:" in result.stderr
        assert "  - bucket: required by the gcs driver" in result.stderr
        assert "  - key: required by the gcs driver" in result.stderr

    def test_unknown_driver(self, runner, tmp_path):
        path = tmp_path / "source.yml"
        path.write_text("driver: swift\nbucket: b\nkey: k\n")

        result = invoke(runner, "check", "-s", path)

        assert result.exit_code == 1
        assert "unknown driver: swift" in result.stderr

    def test_credentials_from_dotenv(self, runner, tmp_path, source_path, fake_backend, monkeypatch):
        monkeypatch.delenv("SEMVERSTORE_S3_ACCESS_KEY", raising=False)
        monkeypatch.delenv("SEMVERSTORE_S3_SECRET_KEY", raising=False)
        (tmp_path / ".env").write_text(
            "SEMVERSTORE_S3_ACCESS_KEY=AKIA\nSEMVERSTORE_S3_SECRET_KEY=secret\n"
        )

        try:
            result = invoke(runner, "check", "-s", source_path)
        finally:
            os.environ.pop("SEMVERSTORE_S3_ACCESS_KEY", None)
            os.environ.pop("SEMVERSTORE_S3_SECRET_KEY", None)

        assert result.exit_code == 0, result.output
        assert fake_backend["source"].access_key_id == "AKIA"
        assert fake_backend["source"].secret_access_key == "secret"

    def test_missing_source_file(self, runner, tmp_path):
        result = invoke(runner, "check", "-s", tmp_path / "nope.yml")

        assert result.exit_code == 2


@pytest.mark.short
def test_version_option(runner):
    result = invoke(runner, "--version")

    assert result.exit_code == 0
    assert __version__ in result.output
