"""CLI tests with typer's CliRunner and an in-memory ApodSource."""

import json
import logging

import pytest
from typer.testing import CliRunner

import cli.doctor as doctor_module
import cli.main as main_module
from cli.main import app
from core import config as config_module
from core.config import AppSettings
from core.domain.errors import NotAnImage, UpstreamError
from core.domain.models import ImageAsset, ResultSet
from core.services.query_builder import QueryBuilder

runner = CliRunner()


class FakeSource:
    """Stands in for ApodClient; records intents instead of hitting the network."""

    result_set = None
    error = None
    intents = []

    def __init__(self, settings=None, **kwargs):
        self.settings = settings or AppSettings()
        self.builder = QueryBuilder(self.settings.api_key, endpoint=self.settings.apod_endpoint)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return None

    def fetch(self, intent):
        FakeSource.intents.append(intent)
        if FakeSource.error is not None:
            raise FakeSource.error
        return FakeSource.result_set

    def fetch_image(self, record, prefer_hd=False):
        if not record.is_image:
            raise NotAnImage(record.media_type)
        url = record.hdurl if prefer_hd and record.hdurl else record.url
        return ImageAsset(source_url=url, content=url.encode("utf-8"))

    def fetch_images(self, records, prefer_hd=False, skip_non_images=False):
        return [(r, self.fetch_image(r, prefer_hd)) for r in records if r.is_image or not skip_non_images]


@pytest.fixture
def fake_source(monkeypatch):
    FakeSource.result_set = None
    FakeSource.error = None
    FakeSource.intents = []
    monkeypatch.setattr(main_module, "ApodClient", FakeSource)
    monkeypatch.setattr(doctor_module, "ApodClient", FakeSource)
    return FakeSource


class TestFetchCommand:
    """Tests for `afetch fetch`."""

    def test_today(self, fake_source, image_record):
        fake_source.result_set = ResultSet.of_single(image_record)

        result = runner.invoke(app, ["fetch"])

        assert result.exit_code == 0, result.output
        assert "Betelgeuse Imagined" in result.output
        assert fake_source.intents[0].mode.kind == "today"

    def test_range_builds_range_intent(self, fake_source, image_record, second_image_record):
        fake_source.result_set = ResultSet.of_collection([image_record, second_image_record])

        result = runner.invoke(app, ["fetch", "--start-date", "2020-01-01", "--end-date", "2020-01-02"])

        assert result.exit_code == 0, result.output
        assert fake_source.intents[0].mode.kind == "range"
        assert "APOD entries (2)" in result.output

    def test_empty_collection_message(self, fake_source):
        fake_source.result_set = ResultSet.of_collection([])

        result = runner.invoke(app, ["fetch", "--count", "3"])

        assert result.exit_code == 0, result.output
        assert "No APOD entries returned" in result.output

    def test_collection_of_one_is_listed(self, fake_source, image_record):
        fake_source.result_set = ResultSet.of_collection([image_record])

        result = runner.invoke(app, ["fetch", "--count", "1"])

        assert result.exit_code == 0, result.output
        assert "No APOD entries returned" not in result.output
        assert "APOD entries (1)" in result.output

    def test_json_output(self, fake_source, image_record, video_record):
        fake_source.result_set = ResultSet.of_collection([image_record, video_record])

        result = runner.invoke(app, ["fetch", "--count", "2", "--thumbs", "--json"])

        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert [entry["media_type"] for entry in payload] == ["image", "video"]
        assert fake_source.intents[0].include_thumbnail is True

    def test_conflicting_flags_exit_2(self, fake_source):
        result = runner.invoke(app, ["fetch", "--date", "2020-01-01", "--count", "3"])

        assert result.exit_code == 2
        assert "Invalid query" in result.output
        assert fake_source.intents == []

    def test_bad_date_format_is_rejected(self, fake_source):
        result = runner.invoke(app, ["fetch", "--date", "01/01/2020"])

        assert result.exit_code == 2
        assert fake_source.intents == []

    def test_upstream_error_exit_1(self, fake_source):
        fake_source.error = UpstreamError("Date must be between Jun 16, 1995 and today.", code=400)

        result = runner.invoke(app, ["fetch", "--date", "2020-01-01"])

        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_api_key_flag(self, fake_source, image_record):
        fake_source.result_set = ResultSet.of_single(image_record)

        result = runner.invoke(app, ["fetch", "--api-key", "secret"])

        assert result.exit_code == 0, result.output
        assert fake_source.intents[0].api_key == "secret"

    def test_show_url_masks_personal_key(self, fake_source, image_record):
        fake_source.result_set = ResultSet.of_single(image_record)

        result = runner.invoke(app, ["fetch", "--date", "2020-01-01", "--api-key", "secret", "--show-url"])

        assert result.exit_code == 0, result.output
        assert "secret" not in result.output
        assert "api_key=%2A%2A%2A" in result.output

    def test_json_stdout_stays_parseable_with_status_output(self, fake_source, image_record, tmp_path):
        """URL, export and download messages go to stderr when --json is set."""
        fake_source.result_set = ResultSet.of_single(image_record)

        result = runner.invoke(
            app,
            [
                "fetch", "--date", "2020-01-01", "--thumbs", "--json", "--show-url",
                "--export-json", str(tmp_path / "apod.json"), "--download", "--dir", str(tmp_path),
            ],
        )

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["title"] == "Betelgeuse Imagined"
        assert "api_key=DEMO_KEY" in result.stderr
        assert "Saved image:" in result.stderr

    def test_show_url_is_printed_on_one_line(self, fake_source, image_record):
        fake_source.result_set = ResultSet.of_single(image_record)

        result = runner.invoke(app, ["fetch", "--date", "2020-01-01", "--thumbs", "--show-url"])

        assert result.exit_code == 0, result.output
        url = "https://api.nasa.gov/planetary/apod?api_key=DEMO_KEY&date=2020-01-01&thumbs=True"
        assert len(url) > 80
        assert url in result.output.splitlines()

    def test_export_json(self, fake_source, image_record, tmp_path):
        fake_source.result_set = ResultSet.of_single(image_record)
        target = tmp_path / "apod.json"

        result = runner.invoke(app, ["fetch", "--export-json", str(target)])

        assert result.exit_code == 0, result.output
        assert json.loads(target.read_text(encoding="utf-8"))["date"] == "2020-01-01"


class TestDownload:
    """Tests for `afetch fetch --download`."""

    def test_single_image_uses_title_filename(self, fake_source, image_record, tmp_path):
        fake_source.result_set = ResultSet.of_single(image_record)

        result = runner.invoke(app, ["fetch", "--download", "--hd", "--dir", str(tmp_path)])

        assert result.exit_code == 0, result.output
        saved = tmp_path / "betelgeuse imagined.jpg"
        assert saved.read_bytes() == image_record.hdurl.encode("utf-8")

    def test_single_image_dest(self, fake_source, image_record, tmp_path):
        fake_source.result_set = ResultSet.of_single(image_record)
        dest = tmp_path / "today.jpg"

        result = runner.invoke(app, ["fetch", "--download", "--dest", str(dest)])

        assert result.exit_code == 0, result.output
        assert dest.read_bytes() == image_record.url.encode("utf-8")

    def test_single_video_is_an_error(self, fake_source, video_record, tmp_path):
        fake_source.result_set = ResultSet.of_single(video_record)

        result = runner.invoke(app, ["fetch", "--download", "--dir", str(tmp_path)])

        assert result.exit_code == 1
        assert list(tmp_path.glob("*.jpg")) == []

    def test_collection_skips_videos(self, fake_source, image_record, video_record, tmp_path):
        fake_source.result_set = ResultSet.of_collection([video_record, image_record])

        result = runner.invoke(app, ["fetch", "--count", "2", "--download", "--dir", str(tmp_path)])

        assert result.exit_code == 0, result.output
        assert "Skipping 2020-01-03" in result.output
        assert [p.name for p in tmp_path.glob("*.jpg")] == ["betelgeuse imagined.jpg"]

    def test_empty_collection_downloads_nothing(self, fake_source, tmp_path):
        fake_source.result_set = ResultSet.of_collection([])

        result = runner.invoke(app, ["fetch", "--count", "2", "--download", "--dir", str(tmp_path)])

        assert result.exit_code == 0, result.output
        assert "Nothing to download" in result.output
        assert list(tmp_path.iterdir()) == []

    def test_download_dir_from_settings(self, fake_source, image_record, tmp_path, monkeypatch):
        monkeypatch.setenv("AFETCH_DOWNLOAD_DIR", str(tmp_path / "apod"))
        fake_source.result_set = ResultSet.of_single(image_record)

        result = runner.invoke(app, ["fetch", "--download"])

        assert result.exit_code == 0, result.output
        assert (tmp_path / "apod" / "betelgeuse imagined.jpg").exists()


class TestDoctor:
    """Tests for `afetch doctor`."""

    def test_offline_run_with_demo_key(self, fake_source, monkeypatch, tmp_path):
        monkeypatch.setenv("AFETCH_API_KEY", "DEMO_KEY")
        monkeypatch.setenv("AFETCH_DOWNLOAD_DIR", str(tmp_path))

        result = runner.invoke(app, ["doctor", "run", "--offline"])

        assert result.exit_code == 0, result.output
        assert "LIMITED" in result.output
        assert "SKIPPED" in result.output

    def test_online_run_reports_todays_title(self, fake_source, image_record, monkeypatch, tmp_path):
        monkeypatch.setenv("AFETCH_API_KEY", "personal")
        monkeypatch.setenv("AFETCH_DOWNLOAD_DIR", str(tmp_path))
        fake_source.result_set = ResultSet.of_single(image_record)

        result = runner.invoke(app, ["doctor", "run"])

        assert result.exit_code == 0, result.output
        assert "Betelgeuse" in result.output

    def test_online_run_failure_exits_1(self, fake_source, monkeypatch, tmp_path):
        monkeypatch.setenv("AFETCH_DOWNLOAD_DIR", str(tmp_path))
        fake_source.error = UpstreamError("API rate limit exceeded", code="OVER_RATE_LIMIT")

        result = runner.invoke(app, ["doctor", "run"])

        assert result.exit_code == 1
        assert "FAIL" in result.output

    def test_setup_key_writes_user_env(self, monkeypatch, tmp_path):
        monkeypatch.setattr(config_module, "get_user_config_dir", lambda: tmp_path / "cfg")

        result = runner.invoke(app, ["doctor", "setup-key"], input="my-nasa-key\n")

        assert result.exit_code == 0, result.output
        content = (tmp_path / "cfg" / ".env").read_text(encoding="utf-8")
        assert "AFETCH_API_KEY=my-nasa-key" in content


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    level, handlers = root.level, root.handlers[:]
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


class TestVerboseFlag:
    """Tests for the global -v/--verbose option."""

    def test_verbose_sets_debug_level(self, fake_source, image_record, restore_root_logger):
        fake_source.result_set = ResultSet.of_single(image_record)

        result = runner.invoke(app, ["-v", "fetch"])

        assert result.exit_code == 0, result.output
        assert restore_root_logger.level == logging.DEBUG

    def test_default_level_is_warning(self, fake_source, image_record, restore_root_logger):
        fake_source.result_set = ResultSet.of_single(image_record)

        result = runner.invoke(app, ["fetch"])

        assert result.exit_code == 0, result.output
        assert restore_root_logger.level == logging.WARNING
