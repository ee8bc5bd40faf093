"""Tests for codebase snapshot providers."""

from codeforge.codebase import FileSystemSnapshotProvider, StaticSnapshotProvider


class TestFileSystemSnapshotProvider:
    """Reading a codebase from disk."""

    def test_reads_code_files(self, tmp_path):
        (tmp_path / "pkg").mkdir()
        (tmp_path / "pkg" / "mod.py").write_text("x = 1\n")
        (tmp_path / "index.js").write_text("console.log(1)\n")
        (tmp_path / "README.md").write_text("# docs\n")
        (tmp_path / "config.json").write_text("{}")

        snapshot = FileSystemSnapshotProvider().analyze(str(tmp_path))

        assert snapshot.root_dir == str(tmp_path)
        assert snapshot.files == {"index.js": "console.log(1)\n", "pkg/mod.py": "x = 1\n"}

    def test_skips_ignored_dirs_and_minified(self, tmp_path):
        for ignored in ("node_modules", ".git", "__pycache__"):
            (tmp_path / ignored).mkdir()
            (tmp_path / ignored / "dep.js").write_text("1")
        (tmp_path / "bundle.min.js").write_text("1")
        (tmp_path / "app.ts").write_text("let a = 1")

        snapshot = FileSystemSnapshotProvider().analyze(str(tmp_path))

        assert list(snapshot.files) == ["app.ts"]

    def test_skips_large_files(self, tmp_path):
        (tmp_path / "big.py").write_text("x" * 200)
        (tmp_path / "small.py").write_text("y = 2")

        snapshot = FileSystemSnapshotProvider(max_file_bytes=100).analyze(str(tmp_path))

        assert list(snapshot.files) == ["small.py"]

    def test_unreadable_file_is_skipped(self, tmp_path, caplog):
        (tmp_path / "binary.py").write_bytes(b"\xff\xfe\x00bad")
        (tmp_path / "ok.py").write_text("ok = True")

        snapshot = FileSystemSnapshotProvider().analyze(str(tmp_path))

        assert list(snapshot.files) == ["ok.py"]
        assert "Failed to read file" in caplog.text

    def test_missing_directory(self, tmp_path):
        snapshot = FileSystemSnapshotProvider().analyze(str(tmp_path / "missing"))

        assert snapshot.files == {}


class TestStaticSnapshotProvider:
    """Fixed snapshots."""

    def test_returns_copies(self):
        provider = StaticSnapshotProvider({"a.py": "a"})

        first = provider.analyze("/x")
        first.files["b.py"] = "b"

        assert provider.analyze("/y").files == {"a.py": "a"}
        assert first.root_dir == "/x"
