"""
Bookmark sources: read browser bookmark files into a raw bookmark tree
"""

import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from bs4 import BeautifulSoup

from bookmarklet_tree import RawFolder, RawItem, RawNode

logger = logging.getLogger(__name__)

FORMATS = ("auto", "chrome", "json", "html")
HTML_EXTENSIONS = (".html", ".htm")

# Firefox JSON backups mark folders with a type instead of always having children
FOLDER_TYPES = ("folder", "text/x-moz-place-container")


class BookmarkSourceError(Exception):
    """Raised when a bookmark file can't be found or read"""
    pass


def get_chrome_bookmarks_path(profile: str = "Default") -> Path:
    """Get the path to the Chrome bookmarks file of the given profile"""
    home = Path.home()
    if os.name == "nt":  # Windows
        return home / "AppData" / "Local" / "Google" / "Chrome" / "User Data" / profile / "Bookmarks"
    if sys.platform == "darwin":  # macOS
        return home / "Library" / "Application Support" / "Google" / "Chrome" / profile / "Bookmarks"
    if os.name == "posix":  # Linux
        chrome_path = home / ".config" / "google-chrome" / profile / "Bookmarks"
        if not chrome_path.exists():
            chrome_path = home / ".config" / "chromium" / profile / "Bookmarks"
        return chrome_path
    raise BookmarkSourceError(f"Unsupported operating system: {os.name}")


def detect_format(path: Union[str, Path], content: Optional[str] = None) -> str:
    """Guess the format of a bookmark file from its extension, then its content"""
    path = Path(path)
    if path.suffix.lower() in HTML_EXTENSIONS:
        return "html"

    if content is None:
        content = _read_text(path)
    stripped = content.lstrip()
    if stripped.startswith("<"):
        return "html"

    data = _parse_json(path, content)
    if isinstance(data, dict) and isinstance(data.get("roots"), dict):
        return "chrome"
    return "json"


def load_raw_tree(path: Union[str, Path], fmt: str = "auto") -> RawNode:
    """Load a bookmark file as a raw bookmark tree"""
    if fmt not in FORMATS:
        raise BookmarkSourceError(f"Unknown bookmark format: {fmt}. Supported: {', '.join(FORMATS)}")

    path = Path(path)
    content = _read_text(path)
    if fmt == "auto":
        fmt = detect_format(path, content)
        logger.debug(f"Detected {fmt} bookmark format for {path}")

    if fmt == "html":
        tree = parse_netscape_html(content)
    elif fmt == "chrome":
        tree = chrome_to_raw_tree(_parse_json(path, content))
    else:
        tree = webextension_to_raw_tree(_parse_json(path, content))

    logger.info(f"Loaded {fmt} bookmarks from {path}")
    return tree


def _read_text(path: Path) -> str:
    if not path.exists():
        raise BookmarkSourceError(f"Bookmark file not found: {path}")
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise BookmarkSourceError(f"Could not read bookmark file {path}: {e}") from e


def _parse_json(path: Path, content: str) -> Any:
    try:
        return json.loads(content)
    except json.JSONDecodeError as e:
        raise BookmarkSourceError(f"Bookmark file {path} is not valid JSON: {e}") from e


def chrome_to_raw_tree(data: Dict) -> RawFolder:
    """
    Convert a Chrome/Chromium/Edge "Bookmarks" document.

    The roots (bookmark bar, other bookmarks, mobile bookmarks...) become the
    children of an untitled root folder, in file order.
    """
    roots = data.get('roots')
    if not isinstance(roots, dict):
        raise BookmarkSourceError("Chrome bookmarks have no 'roots'")

    children = [_chrome_node(node) for node in roots.values() if isinstance(node, dict)]
    return RawFolder("", tuple(child for child in children if child is not None))


def _chrome_node(node: Dict) -> Optional[RawNode]:
    node_type = node.get('type')
    if node_type == 'url':
        return RawItem(node.get('name', ''), node.get('url'))
    if node_type == 'folder':
        children = (_chrome_node(child) for child in node.get('children', []))
        return RawFolder(node.get('name', ''), tuple(child for child in children if child is not None))

    logger.debug(f"Skipping Chrome bookmark node of type {node_type!r}")
    return None


def webextension_to_raw_tree(data: Union[Dict, List]) -> RawNode:
    """
    Convert a WebExtension bookmarks tree (bookmarks.getTree()) or a Firefox
    JSON backup. A list is taken as the result of getTree(): its first node is the root.
    """
    if isinstance(data, list):
        if not data:
            raise BookmarkSourceError("Bookmark tree is empty")
        data = data[0]
    if not isinstance(data, dict):
        raise BookmarkSourceError(f"Unexpected bookmark tree root: {type(data).__name__}")
    return _webextension_node(data)


def _webextension_node(node: Dict) -> RawNode:
    title = node.get('title', '')
    if 'children' in node or node.get('type') in FOLDER_TYPES:
        children = tuple(_webextension_node(child) for child in node.get('children') or [] if isinstance(child, dict))
        return RawFolder(title, children)
    return RawItem(title, node.get('url') or node.get('uri'))


def parse_netscape_html(content: str) -> RawFolder:
    """
    Parse a Netscape bookmark HTML export (the format every browser exports).

    <DT> and <p> are never closed in these files, so html.parser nests each
    <DT> in the previous one. An entry belongs to the nearest enclosing <DL>.
    """
    soup = BeautifulSoup(content, 'html.parser')
    top_dl = soup.find('dl')
    if top_dl is None:
        raise BookmarkSourceError("No bookmark list (<DL>) found in HTML file")

    h1 = soup.find('h1')
    title = h1.get_text(strip=True) if h1 else ""
    return RawFolder(title, _parse_dl(top_dl))


def _parse_dl(dl) -> tuple:
    children = []
    for dt in dl.find_all('dt'):
        if dt.find_parent('dl') is not dl:
            continue

        head = dt.find(['h3', 'a'])
        if head is None:
            continue

        if head.name == 'h3':
            sub_dl = dt.find('dl')
            if sub_dl is not None and sub_dl.find_parent('dt') is not dt:
                sub_dl = None
            children.append(RawFolder(head.get_text(strip=True), _parse_dl(sub_dl) if sub_dl is not None else ()))
        else:
            children.append(RawItem(head.get_text(strip=True), head.get('href')))
    return tuple(children)
