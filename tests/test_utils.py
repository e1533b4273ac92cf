"""
公用函式 (檔案系統、顏色、日誌) 的單元測試。
"""

import logging
import os

import pytest

from depinsight.utils.color_utils import generate_color_palette, get_analogous_dark_color
from depinsight.utils.file_system_utils import atomic_write_text, find_descriptor_files
from depinsight.utils.logging_utils import NoisyLibraryFilter


def test_find_descriptor_files_skips_excluded_dirs(tmp_path):
    for relative in ("pom.xml", "a/pom.xml", "a/target/pom.xml", "b/module.yaml", "b/pom.xml.bak", "x.egg-info/pom.xml"):
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("", encoding="utf-8")

    found = find_descriptor_files(tmp_path, ["pom.xml", "module.yaml"])

    assert [path.relative_to(tmp_path).as_posix() for path in found] == ["a/pom.xml", "b/module.yaml", "pom.xml"]


def test_find_descriptor_files_with_custom_excludes(tmp_path):
    (tmp_path / "target").mkdir()
    (tmp_path / "target" / "pom.xml").write_text("", encoding="utf-8")

    assert find_descriptor_files(tmp_path, ["pom.xml"], exclude_dirs=[]) == [tmp_path / "target" / "pom.xml"]


def test_atomic_write_replaces_content(tmp_path):
    path = tmp_path / "out.txt"
    atomic_write_text(path, "first")
    atomic_write_text(path, "第二")

    assert path.read_text(encoding="utf-8") == "第二"
    assert [p.name for p in tmp_path.iterdir()] == ["out.txt"]


def test_atomic_write_cleans_up_on_failure(tmp_path, monkeypatch):
    def failing_replace(src, dst):
        raise OSError("boom")

    monkeypatch.setattr(os, "replace", failing_replace)
    with pytest.raises(OSError, match="boom"):
        atomic_write_text(tmp_path / "out.txt", "data")

    assert list(tmp_path.iterdir()) == []


def test_color_palette_is_deterministic_and_distinct():
    palette = generate_color_palette(8)
    assert palette == generate_color_palette(8)
    assert len(set(palette)) == 8
    assert all(color.startswith("#") and len(color) == 7 for color in palette)


def test_analogous_dark_color_is_darker():
    dark = get_analogous_dark_color("#E6F7FF")
    assert dark != "#E6F7FF"
    assert sum(int(dark[i : i + 2], 16) for i in (1, 3, 5)) < sum(int("E6F7FF"[i : i + 2], 16) for i in (0, 2, 4))


def test_noisy_library_filter():
    noisy_filter = NoisyLibraryFilter()
    debug = logging.LogRecord("graphviz.backend", logging.DEBUG, __file__, 1, "run", None, None)
    warning = logging.LogRecord("graphviz.backend", logging.WARNING, __file__, 1, "warn", None, None)
    own = logging.LogRecord("root", logging.DEBUG, __file__, 1, "mine", None, None)

    assert not noisy_filter.filter(debug)
    assert noisy_filter.filter(warning)
    assert noisy_filter.filter(own)
