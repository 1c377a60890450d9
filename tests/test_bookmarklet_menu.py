"""Tests for the bookmarklet-menu command line."""

import json

import pytest

import bookmarklet_menu
from bookmarklet_menu import main

CHROME_BOOKMARKS = {
    "roots": {
        "bookmark_bar": {
            "type": "folder",
            "name": "Bookmarks bar",
            "children": [
                {"type": "folder", "name": "Dev", "children": [
                    {"type": "folder", "name": "Debug", "children": [
                        {"type": "url", "name": "Outline", "url": "javascript:outline()"},
                        {"type": "url", "name": "Grid", "url": "javascript:grid()"},
                    ]},
                ]},
                {"type": "url", "name": "Top", "url": "javascript:scrollTo(0,0)"},
            ],
        },
        "other": {"type": "folder", "name": "Other bookmarks", "children": [
            {"type": "url", "name": "Example", "url": "https://example.com"},
        ]},
    },
}


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    monkeypatch.setattr(bookmarklet_menu, "setup_logger", lambda verbose=False, log_dir=None: None)
    monkeypatch.delenv("BOOKMARKLETS_FLAT_MENU", raising=False)


@pytest.fixture
def bookmark_file(tmp_path):
    path = tmp_path / "Bookmarks"
    path.write_text(json.dumps(CHROME_BOOKMARKS), encoding="utf-8")
    return path


class TestMain:
    def test_outline(self, bookmark_file, capsys):
        assert main([str(bookmark_file)]) == 0
        out = capsys.readouterr().out
        assert "🔖 Found 3 bookmarklets" in out
        assert "\n".join([
            "📁 Bookmarklets",
            "  📁 Dev ▸ Debug",
            "    🔖 Outline",
            "    🔖 Grid",
            "  🔖 Top",
        ]) in out

    def test_flat(self, bookmark_file, capsys):
        assert main([str(bookmark_file), "--flat"]) == 0
        out = capsys.readouterr().out
        assert "📁 Bookmarklets\n  🔖 Outline\n  🔖 Grid\n  🔖 Top" in out

    def test_flat_from_env(self, bookmark_file, capsys, monkeypatch):
        monkeypatch.setenv("BOOKMARKLETS_FLAT_MENU", "1")
        assert main([str(bookmark_file)]) == 0
        assert "Dev ▸ Debug" not in capsys.readouterr().out

    def test_json(self, bookmark_file, capsys):
        assert main([str(bookmark_file), "--json"]) == 0
        document = json.loads(capsys.readouterr().out)
        assert [entry["title"] for entry in document] == ["Dev ▸ Debug", "Outline", "Grid", "Top"]

    def test_output_file(self, bookmark_file, tmp_path, capsys):
        output = tmp_path / "menu.txt"
        assert main([str(bookmark_file), "-o", str(output)]) == 0
        assert output.read_text(encoding="utf-8").startswith("📁 Bookmarklets\n")
        assert "Menu saved to" in capsys.readouterr().out

    def test_missing_file(self, tmp_path, capsys):
        assert main([str(tmp_path / "missing")]) == 1
        assert "not found" in capsys.readouterr().out

    def test_unreadable_file(self, tmp_path, capsys):
        path = tmp_path / "Bookmarks"
        path.write_text("{broken", encoding="utf-8")
        assert main([str(path)]) == 1
        assert "Error: Bookmark file" in capsys.readouterr().out

    def test_invalid_config(self, bookmark_file, capsys, monkeypatch):
        monkeypatch.setenv("BOOKMARKLETS_FLAT_MENU", "sometimes")
        assert main([str(bookmark_file)]) == 1
        assert "BOOKMARKLETS_FLAT_MENU" in capsys.readouterr().out

    def test_watch_json(self, bookmark_file, capsys, monkeypatch):
        watched = []
        monkeypatch.setattr(bookmarklet_menu, "watch", lambda path, updater, interval: watched.append(path))

        assert main([str(bookmark_file), "--watch", "--json"]) == 0
        document = json.loads(capsys.readouterr().out)
        assert [entry["title"] for entry in document] == ["Dev ▸ Debug", "Outline", "Grid", "Top"]
        assert watched == [bookmark_file]

    def test_watch_outline(self, bookmark_file, capsys, monkeypatch):
        monkeypatch.setattr(bookmarklet_menu, "watch", lambda path, updater, interval: None)

        assert main([str(bookmark_file), "--watch"]) == 0
        out = capsys.readouterr().out
        assert "🔄 Menu rebuilt at" in out
        assert "  📁 Dev ▸ Debug" in out


class FakeStat:
    def __init__(self, mtime):
        self.st_mtime = mtime


class FakeBookmarkFile:
    """Bookmark file whose modification times follow a script; None means missing"""

    def __init__(self, mtimes):
        self.mtimes = list(mtimes)

    def stat(self):
        mtime = self.mtimes.pop(0)
        if mtime is None:
            raise FileNotFoundError("Bookmarks")
        return FakeStat(mtime)

    def __str__(self):
        return "Bookmarks"


class FakeUpdater:
    def __init__(self):
        self.requests = 0
        self.cancelled = 0

    def request_recompute(self):
        self.requests += 1

    def cancel(self):
        self.cancelled += 1


class TestWatch:
    def test_changes_request_recompute(self, monkeypatch, capsys):
        sleeps = []

        def fake_sleep(seconds):
            sleeps.append(seconds)
            if len(sleeps) > 5:
                raise KeyboardInterrupt

        monkeypatch.setattr(bookmarklet_menu.time, "sleep", fake_sleep)
        bookmark_file = FakeBookmarkFile([1.0, 1.0, None, 2.0, 2.0, 3.0])
        updater = FakeUpdater()

        bookmarklet_menu.watch(bookmark_file, updater, 0.5)

        assert updater.requests == 2
        assert updater.cancelled == 1
        assert sleeps == [0.5] * 6
        assert bookmark_file.mtimes == []
        out = capsys.readouterr().out
        assert "Watching Bookmarks" in out
        assert "Stopped watching" in out
