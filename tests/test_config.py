"""Tests for the config directory loaders and the settings file."""

from pathlib import Path

import pytest

from mdsite.config import (
    ConfigStore,
    load_channel_fields,
    load_ignore_list,
    load_replacements,
    load_settings,
    load_templates,
    parse_records,
    read_optional,
)
from mdsite.errors import AssignmentError, ConfigError, TemplateNotFoundError


class TestParseRecords:
    def test_block_and_single_line(self) -> None:
        assert parse_records("name\nline1\nline2\n----\nk=v") == [
            ("name", "line1\nline2"),
            ("k", "v"),
        ]

    def test_three_records(self) -> None:
        text = "name\nvalue value\nvalue\n----\nname2\nval2\n----\nname3=val3"
        assert parse_records(text) == [
            ("name", "value value\nvalue"),
            ("name2", "val2"),
            ("name3", "val3"),
        ]

    def test_trailing_newline_keeps_single_line_record(self) -> None:
        assert parse_records("k = v\n") == [("k", "v")]

    def test_block_value_is_verbatim(self) -> None:
        assert parse_records(" key \n  indented\n\nlast\n") == [("key", "  indented\n\nlast")]

    def test_separator_must_be_exact(self) -> None:
        assert parse_records("a\n-----\nb") == [("a", "-----\nb")]

    def test_empty_records_skipped(self) -> None:
        assert parse_records("----\na=1\n----\n\n----\n") == [("a", "1")]

    def test_single_line_without_equals(self) -> None:
        with pytest.raises(AssignmentError):
            parse_records("just a key")

    def test_only_newline_splits_lines(self) -> None:
        assert parse_records("name\nline\u2028more\r\nend") == [("name", "line\u2028more\r\nend")]
        assert parse_records("k=a\u2029b\x0cc") == [("k", "a\u2029b\x0cc")]


class TestReadOptional:
    def test_missing(self, tmp_path: Path) -> None:
        assert read_optional(tmp_path / "nope") is None

    def test_empty(self, tmp_path: Path) -> None:
        path = tmp_path / "empty"
        path.write_text("", encoding="utf-8")
        assert read_optional(path) is None

    def test_content(self, tmp_path: Path) -> None:
        path = tmp_path / "file"
        path.write_text("x", encoding="utf-8")
        assert read_optional(path) == "x"


class TestLoaders:
    def test_ignore_list(self, tmp_path: Path) -> None:
        (tmp_path / "md_ignore").write_text("a.md\n\n  docs/b.md \n", encoding="utf-8")
        ignored = load_ignore_list(tmp_path, ["extra.md"])
        assert ignored == frozenset({Path("a.md"), Path("docs/b.md"), Path("extra.md")})

    def test_overrides_win(self, tmp_path: Path) -> None:
        (tmp_path / "md_replace").write_text("site=File\n----\nfooter\nbye\n", encoding="utf-8")
        replacements = load_replacements(tmp_path, ["site = Override"])
        assert replacements == {"site": "Override", "footer": "bye"}

    def test_malformed_override(self, tmp_path: Path) -> None:
        with pytest.raises(AssignmentError):
            load_replacements(tmp_path, ["no-equals"])

    def test_templates_are_flat(self, tmp_path: Path) -> None:
        templates = tmp_path / "templates"
        (templates / "nested").mkdir(parents=True)
        (templates / "main").write_text("##MAIN##", encoding="utf-8")
        (templates / "nested" / "inner").write_text("skip", encoding="utf-8")
        assert load_templates(tmp_path) == {"main": "##MAIN##"}

    def test_channel_fields(self, tmp_path: Path) -> None:
        (tmp_path / "channels").write_text(
            "news\nprepend=https://x.org/\ntitle=News\n----\nempty=\n", encoding="utf-8"
        )
        channels = load_channel_fields(tmp_path)
        assert channels["news"] == {"prepend": "https://x.org/", "title": "News"}
        assert channels["empty"] == {}

    def test_channel_field_keeps_line_separator(self, tmp_path: Path) -> None:
        (tmp_path / "channels").write_bytes("news\ntitle=News\u2028Daily\n".encode("utf-8"))
        assert load_channel_fields(tmp_path) == {"news": {"title": "News\u2028Daily"}}


class TestConfigStore:
    def test_missing_directory_is_empty(self, tmp_path: Path) -> None:
        store = ConfigStore.load(tmp_path / "missing")
        assert store.ignore == frozenset()
        assert store.replacements == {}
        assert store.templates == {}
        assert store.channels == {}

    def test_config_path_must_be_directory(self, tmp_path: Path) -> None:
        path = tmp_path / "cfg"
        path.write_text("", encoding="utf-8")
        with pytest.raises(ConfigError):
            ConfigStore.load(path)

    def test_loads_site(self, site: Path) -> None:
        store = ConfigStore.load(site / "cfg", overrides=["footer=CLI"])
        assert store.is_ignored(Path("raw.md"))
        assert not store.is_ignored(Path("index.md"))
        assert store.replacements["footer"] == "CLI"
        assert store.replacements["nav"].startswith("[Home]")
        assert set(store.templates) == {"main", "post"}
        assert "blog" in store.channels

    def test_unknown_template(self, tmp_path: Path) -> None:
        store = ConfigStore.load(tmp_path)
        with pytest.raises(TemplateNotFoundError) as excinfo:
            store.template("main", Path("docs/page.md"))
        assert "main" in str(excinfo.value)
        assert "docs/page.md" in str(excinfo.value)


class TestLoadSettings:
    def test_missing_file(self, tmp_path: Path) -> None:
        assert load_settings(tmp_path / "mdsite.toml") == {}

    def test_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "mdsite.toml"
        path.write_text('input = "pages"\nreplace = ["a=b"]\n', encoding="utf-8")
        assert load_settings(path) == {"input": "pages", "replace": ["a=b"]}

    def test_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "mdsite.yaml"
        path.write_text("output: public\nverbose: true\n", encoding="utf-8")
        assert load_settings(path) == {"output": "public", "verbose": True}

    def test_empty_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "mdsite.yml"
        path.write_text("", encoding="utf-8")
        assert load_settings(path) == {}

    def test_json(self, tmp_path: Path) -> None:
        path = tmp_path / "mdsite.json"
        path.write_text('{"config_dir": "conf"}', encoding="utf-8")
        assert load_settings(path) == {"config_dir": "conf"}

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "mdsite.toml"
        path.write_text("input = ", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_settings(path)

    def test_must_be_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "mdsite.json"
        path.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_settings(path)
