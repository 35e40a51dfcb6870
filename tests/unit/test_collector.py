"""
文件收集器单元测试

测试遍历顺序、过滤规则以及可重复遍历。
"""

from pathlib import Path

import pytest

from jarsmith.build.collector import FileCollector, FileInfo, collect_files, suffixes


@pytest.fixture
def source_tree(tmp_path):
    """创建测试目录结构"""
    root = tmp_path / "src"
    (root / "com" / "acme").mkdir(parents=True)
    (root / "com" / "acme" / "Main.java").write_text("class Main {}")
    (root / "com" / "acme" / "Util.java").write_text("class Util {}")
    (root / "com" / "acme" / "notes.txt").write_text("notes")
    (root / "empty").mkdir()
    (root / "README").write_text("readme")
    return root


class TestFileInfo:
    """FileInfo 测试"""

    def test_entry_name_for_file(self, tmp_path):
        info = FileInfo(tmp_path / "a" / "b.txt", Path("a") / "b.txt", 3, 0.0)
        assert info.entry_name == "a/b.txt"

    def test_entry_name_for_directory(self, tmp_path):
        info = FileInfo(tmp_path / "a", Path("a"), 0, 0.0, is_directory=True)
        assert info.entry_name == "a/"

    def test_entry_name_for_root(self, tmp_path):
        """根目录的条目名为空字符串"""
        info = FileInfo(tmp_path, Path(""), 0, 0.0, is_directory=True)
        assert info.entry_name == ""

    def test_to_dict(self, tmp_path):
        info = FileInfo(tmp_path / "x", Path("x"), 10, 1.5)
        assert info.to_dict() == {'path': 'x', 'size': 10, 'mtime': 1.5, 'is_directory': False}


class TestCollectFiles:
    """collect_files 测试"""

    def test_files_only_by_default(self, source_tree):
        """默认只产出文件，按名称排序的先序遍历"""
        names = [f.entry_name for f in collect_files(source_tree)]
        assert names == [
            "README",
            "com/acme/Main.java",
            "com/acme/Util.java",
            "com/acme/notes.txt",
        ]

    def test_suffix_selector(self, source_tree):
        names = [f.entry_name for f in collect_files(source_tree, suffixes(".java"))]
        assert names == ["com/acme/Main.java", "com/acme/Util.java"]

    def test_include_directories(self, source_tree):
        """包含目录时根目录以空路径出现在最前面"""
        infos = list(collect_files(source_tree, dirs=True))
        names = [f.entry_name for f in infos]

        assert names[0] == ""
        assert infos[0].is_directory
        assert names == [
            "",
            "README",
            "com/",
            "com/acme/",
            "com/acme/Main.java",
            "com/acme/Util.java",
            "com/acme/notes.txt",
            "empty/",
        ]

    def test_directory_precedes_children(self, source_tree):
        names = [f.entry_name for f in collect_files(source_tree, dirs=True)]
        assert names.index("com/") < names.index("com/acme/") < names.index("com/acme/Main.java")

    def test_restartable(self, source_tree):
        """同一个集合可以多次遍历，并反映最新的目录内容"""
        collection = collect_files(source_tree, suffixes(".java"))
        first = [f.entry_name for f in collection]
        second = [f.entry_name for f in collection]
        assert first == second

        (source_tree / "New.java").write_text("class New {}")
        third = [f.entry_name for f in collection]
        assert "New.java" in third

    def test_missing_root(self, tmp_path):
        """根目录不存在时为空，不抛出异常"""
        assert list(collect_files(tmp_path / "missing")) == []
        assert list(collect_files(tmp_path / "missing", dirs=True)) == []

    def test_empty_root(self, tmp_path):
        root = tmp_path / "empty"
        root.mkdir()
        assert list(collect_files(root)) == []
        assert [f.entry_name for f in collect_files(root, dirs=True)] == [""]

    def test_file_root(self, tmp_path):
        """根路径是文件时只产出它自己"""
        single = tmp_path / "lib.txt"
        single.write_text("x")
        infos = list(collect_files(single))
        assert len(infos) == 1
        assert infos[0].entry_name == "lib.txt"
        assert infos[0].size == 1


class TestFileCollector:
    """FileCollector 测试"""

    def test_collect_multiple_roots(self, source_tree, tmp_path):
        other = tmp_path / "other"
        other.mkdir()
        (other / "Extra.java").write_text("class Extra {}")

        collector = FileCollector(suffixes(".java"))
        files = collector.collect([source_tree, other, tmp_path / "missing"])

        assert [f.entry_name for f in files] == ["com/acme/Main.java", "com/acme/Util.java", "Extra.java"]

    def test_statistics(self, source_tree):
        collector = FileCollector(dirs=True)
        collector.collect([source_tree])
        stats = collector.get_statistics()

        assert stats['total_files'] == 4
        assert stats['total_directories'] == 4
        assert stats['total_size'] == len("class Main {}") + len("class Util {}") + len("notes") + len("readme")
