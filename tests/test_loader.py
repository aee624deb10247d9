"""
Tests for fetching and opening the remote model artifact
"""
import pytest

from conftest import FakeModel


class TestArtifactFilename:

    def test_keras_and_h5_accepted(self):
        from model.loader import artifact_filename

        assert artifact_filename("https://example.com/models/model.h5").endswith("-model.h5")
        assert artifact_filename("https://example.com/m/classifier.keras").endswith("-classifier.keras")

    def test_suffix_check_is_case_insensitive(self):
        from model.loader import artifact_filename

        assert artifact_filename("https://example.com/MODEL.H5").endswith("-MODEL.h5")

    def test_distinct_urls_do_not_collide(self):
        from model.loader import artifact_filename

        a = artifact_filename("https://a.example.com/model.h5")
        b = artifact_filename("https://b.example.com/model.h5")

        assert a != b

    def test_query_string_ignored(self):
        from model.loader import artifact_filename

        assert artifact_filename("https://example.com/model.keras?alt=media").endswith("-model.keras")

    @pytest.mark.parametrize("url", [
        "https://example.com/model.json",
        "https://example.com/models/",
        "https://example.com/model",
    ])
    def test_unsupported_artifacts_rejected(self, url):
        from model.errors import ModelLoadError
        from model.loader import artifact_filename

        with pytest.raises(ModelLoadError, match="Unsupported model artifact"):
            artifact_filename(url)


class TestLoadModel:

    def test_missing_url(self, tmp_path):
        from model.errors import ModelLoadError
        from model.loader import load_model

        with pytest.raises(ModelLoadError, match="No model URL"):
            load_model(None, tmp_path)

    def test_returns_handle(self, tmp_path, monkeypatch):
        import model.loader as loader

        fake = FakeModel(0.7)
        calls = []

        def fake_open(url, fname, cache_dir):
            calls.append((url, fname, cache_dir))
            return fake

        monkeypatch.setattr(loader, "_open_keras_model", fake_open)

        handle = loader.load_model("https://example.com/model.h5", tmp_path)

        assert handle.model is fake
        assert handle.source_url == "https://example.com/model.h5"
        assert calls[0][2] == tmp_path
        assert calls[0][1].endswith("-model.h5")

    def test_fetch_failure_wrapped(self, tmp_path, monkeypatch):
        import model.loader as loader
        from model.errors import ModelLoadError

        def failing_open(url, fname, cache_dir):
            raise OSError("connection refused")

        monkeypatch.setattr(loader, "_open_keras_model", failing_open)

        with pytest.raises(ModelLoadError, match="connection refused") as excinfo:
            loader.load_model("https://example.com/model.h5", tmp_path)

        assert isinstance(excinfo.value.__cause__, OSError)
