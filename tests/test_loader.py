"""
Tests for the load-then-resolve pipeline.
"""

import logging

import pytest

import readprops.resources as resources_module
from readprops.exceptions import (
    ConfigurationError,
    ResourceReadError,
    ResourceUnavailableError,
    UnresolvedReferenceError,
)
from readprops.loader import LoadOptions, PropertiesLoader
from readprops.resources import FileResource, UrlResource


@pytest.fixture
def write_props(tmp_path):
    def _write(name: str, text: str):
        path = tmp_path / name
        path.write_text(text, encoding="latin-1")
        return path

    return _write


class TestLoadOptions:
    """Tests for LoadOptions validation."""

    def test_defaults(self):
        options = LoadOptions()
        assert options.files == []
        assert options.urls == []
        assert options.quiet is False
        options.validate()

    def test_files_and_urls_conflict(self, tmp_path):
        options = LoadOptions(files=[tmp_path / "a.properties"], urls=["http://example.com/a.properties"])
        with pytest.raises(ConfigurationError, match="not both"):
            options.validate()


class TestLoad:
    """Tests for PropertiesLoader.load."""

    def test_later_file_wins(self, write_props):
        first = write_props("first.properties", "k=first\nonly.first=1\n")
        second = write_props("second.properties", "k=second\nonly.second=2\n")
        loader = PropertiesLoader(LoadOptions(files=[first, second]))
        target: dict[str, str] = {}
        loader.load(target)
        assert target == {"k": "second", "only.first": "1", "only.second": "2"}

    def test_order_reversed(self, write_props):
        first = write_props("first.properties", "k=first\n")
        second = write_props("second.properties", "k=second\n")
        target: dict[str, str] = {}
        PropertiesLoader(LoadOptions(files=[second, first])).load(target)
        assert target["k"] == "first"

    def test_urls_in_order(self, write_props):
        first = write_props("first.properties", "k=first\n")
        second = write_props("second.properties", "k=second\n")
        target: dict[str, str] = {}
        PropertiesLoader(LoadOptions(urls=[first.as_uri(), second.as_uri()])).load(target)
        assert target["k"] == "second"

    def test_classpath_url(self, tmp_path, write_props):
        write_props("cp.properties", "from=classpath\n")
        target: dict[str, str] = {}
        PropertiesLoader(LoadOptions(urls=["classpath:cp.properties"], classpath=[tmp_path])).load(target)
        assert target == {"from": "classpath"}

    def test_conflict_fails_before_any_open(self, tmp_path, monkeypatch):
        opened = []
        monkeypatch.setattr(FileResource, "can_be_opened", lambda self: opened.append(self) or True)
        monkeypatch.setattr(UrlResource, "can_be_opened", lambda self: opened.append(self) or True)
        options = LoadOptions(files=[tmp_path / "a.properties"], urls=["http://example.com/a.properties"])
        with pytest.raises(ConfigurationError):
            PropertiesLoader(options).load({})
        assert opened == []

    def test_missing_file_quiet(self, tmp_path, write_props, caplog):
        present = write_props("present.properties", "a=1\n")
        missing = tmp_path / "missing.properties"
        target = {"existing": "x"}
        with caplog.at_level(logging.INFO, logger="readprops"):
            PropertiesLoader(LoadOptions(files=[missing, present], quiet=True)).load(target)
        assert target == {"existing": "x", "a": "1"}
        assert "Quiet processing" in caplog.text
        assert "missing.properties" in caplog.text

    def test_missing_file_not_quiet(self, tmp_path, write_props):
        present = write_props("present.properties", "a=1\n")
        missing = tmp_path / "missing.properties"
        target: dict[str, str] = {}
        with pytest.raises(ResourceUnavailableError, match="missing.properties"):
            PropertiesLoader(LoadOptions(files=[present, missing])).load(target)
        # Merge is additive up to the failure point
        assert target == {"a": "1"}

    def test_missing_classpath_resource_names_original(self, tmp_path):
        options = LoadOptions(urls=["classpath:/nowhere.properties"], classpath=[tmp_path])
        with pytest.raises(ResourceUnavailableError) as exc_info:
            PropertiesLoader(options).load({})
        assert exc_info.value.resource == "classpath:/nowhere.properties"

    def test_unreadable_resource(self, tmp_path):
        directory = tmp_path / "a_directory"
        directory.mkdir()
        with pytest.raises(ResourceReadError, match="Error reading properties"):
            PropertiesLoader(LoadOptions(files=[directory])).load({})

    def test_malformed_content(self, write_props):
        bad = write_props("bad.properties", "k=\\uZZZZ\n")
        with pytest.raises(ResourceReadError) as exc_info:
            PropertiesLoader(LoadOptions(files=[bad])).load({})
        assert isinstance(exc_info.value.__cause__, ValueError)

    def test_stream_closed_after_merge(self, monkeypatch):
        import io

        streams = []

        class TrackingStream(io.BytesIO):
            pass

        def fake_fetch(url, timeout=30.0):
            return b"a=1\n"

        monkeypatch.setattr(resources_module, "fetch_url", fake_fetch)
        original_open = UrlResource._open

        def tracking_open(self):
            stream = TrackingStream(original_open(self).getvalue())
            streams.append(stream)
            return stream

        monkeypatch.setattr(UrlResource, "_open", tracking_open)
        PropertiesLoader(LoadOptions(urls=["http://example.com/a.properties"])).load({})
        assert len(streams) == 1
        assert streams[0].closed

    def test_stream_closed_on_failure(self, monkeypatch):
        import io

        streams = []

        def tracking_open(self):
            stream = io.BytesIO(b"k=\\u12\n")
            streams.append(stream)
            return stream

        monkeypatch.setattr(UrlResource, "_open", tracking_open)
        with pytest.raises(ResourceReadError):
            PropertiesLoader(LoadOptions(urls=["http://example.com/a.properties"])).load({})
        assert streams[0].closed


class TestLoadAndResolve:
    """Tests for PropertiesLoader.load_and_resolve."""

    def test_resolves_across_files(self, write_props):
        base = write_props("base.properties", "host=example.com\n")
        app = write_props("app.properties", "url=https://${host}/api\n")
        result = PropertiesLoader(LoadOptions(files=[base, app])).load_and_resolve()
        assert result == {"host": "example.com", "url": "https://example.com/api"}

    def test_seeded_from_base_without_mutating_it(self, write_props):
        app = write_props("app.properties", "greeting=hello ${name}\n")
        base = {"name": "world", "count": 3}
        result = PropertiesLoader(LoadOptions(files=[app])).load_and_resolve(base)
        assert result == {"name": "world", "greeting": "hello world"}
        assert base == {"name": "world", "count": 3}

    def test_environment_captured_only_when_needed(self, write_props):
        calls = []

        def provider():
            calls.append(1)
            return {"USER": "alice"}

        plain = write_props("plain.properties", "a=1\n")
        PropertiesLoader(LoadOptions(files=[plain]), environment_provider=provider).load_and_resolve()
        assert calls == []

        env = write_props("env.properties", "who=${env.USER}\nagain=${env.USER}\n")
        result = PropertiesLoader(LoadOptions(files=[env]), environment_provider=provider).load_and_resolve()
        assert calls == [1]
        assert result == {"who": "alice", "again": "alice"}

    def test_unexpanded(self, write_props):
        app = write_props("app.properties", "a=${b}\n")
        result = PropertiesLoader(LoadOptions(files=[app])).load_and_resolve(expand=False)
        assert result == {"a": "${b}"}

    def test_unresolved_reference_fails(self, write_props):
        app = write_props("app.properties", "a=${nope}\n")
        with pytest.raises(UnresolvedReferenceError):
            PropertiesLoader(LoadOptions(files=[app])).load_and_resolve()
