"""
Bookmarklet tree: reduce a raw bookmark tree to a condensed tree of bookmarklets
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, List, Optional, Tuple, Union
from urllib.parse import unquote

logger = logging.getLogger(__name__)

SCRIPT_SCHEME = "javascript:"
FOLDERS_GROUP_TITLES_SEP = " ▸ "
UNTITLED = "Untitled"

# WhiteSpace and LineTerminator characters trimmed by String.prototype.trim
SCRIPT_WHITESPACE = (
    "\t\n\x0b\x0c\r \xa0\u1680\u2000\u2001\u2002\u2003\u2004\u2005\u2006"
    "\u2007\u2008\u2009\u200a\u2028\u2029\u202f\u205f\u3000\ufeff"
)

# A "%" that does not start a two digit hex escape
_MALFORMED_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


@dataclass(frozen=True)
class RawItem:
    """A bookmark as read from the store"""
    title: Optional[str]
    url: Optional[str] = None


@dataclass(frozen=True)
class RawFolder:
    """A bookmark folder as read from the store"""
    title: Optional[str]
    children: Tuple[Union["RawItem", "RawFolder"], ...] = ()


RawNode = Union[RawItem, RawFolder]


class NodeKind(Enum):
    LEAF = "leaf"
    FOLDER = "folder"
    FOLDER_GROUP = "folder_group"


@dataclass(frozen=True)
class Leaf:
    """A single bookmarklet"""
    kind: ClassVar[NodeKind] = NodeKind.LEAF
    title: str
    source: str


@dataclass(frozen=True)
class Folder:
    """A folder holding at least one bookmarklet somewhere below it"""
    kind: ClassVar[NodeKind] = NodeKind.FOLDER
    title: str
    children: Tuple[Union[Leaf, "Folder"], ...]


@dataclass(frozen=True)
class FolderGroup(Folder):
    """
    A chain of nested folders, each holding a single folder, shown as one entry.

    member_folders lists the chain outermost first. Each member's only child is
    the next member; the last member is the folder whose children are shown.
    """
    kind: ClassVar[NodeKind] = NodeKind.FOLDER_GROUP
    member_folders: Tuple[Folder, ...] = ()


Node = Union[Leaf, Folder, FolderGroup]


def is_container(node: Optional[Node]) -> bool:
    return node is not None and node.kind in (NodeKind.FOLDER, NodeKind.FOLDER_GROUP)


def extract_source(url: Optional[str]) -> Optional[str]:
    """Return the script of a javascript: URL, or None if it doesn't qualify"""
    if not url or not url.startswith(SCRIPT_SCHEME):
        return None

    encoded = url[len(SCRIPT_SCHEME):]
    if _MALFORMED_ESCAPE.search(encoded):
        logger.debug(f"Skipping bookmarklet with malformed escape: {url[:60]!r}")
        return None

    try:
        source = unquote(encoded, errors="strict").strip(SCRIPT_WHITESPACE)
    except UnicodeDecodeError as e:
        logger.debug(f"Skipping bookmarklet that doesn't decode ({e}): {url[:60]!r}")
        return None

    return source or None


def group_folders(folder: Folder, inner: Folder) -> FolderGroup:
    """Collapse a folder whose only child is the container `inner`"""
    if inner.kind is NodeKind.FOLDER_GROUP:
        # Relink the new outer folder to the group's first member, then prepend it
        outer = Folder(folder.title, (inner.member_folders[0],))
        members = (outer,) + inner.member_folders
    else:
        members = (folder, inner)

    return FolderGroup(
        title=FOLDERS_GROUP_TITLES_SEP.join(member.title for member in members),
        children=inner.children,
        member_folders=members,
    )


def _reduce_item(raw: RawItem, untitled: str) -> Optional[Leaf]:
    source = extract_source(raw.url)
    if source is None:
        return None
    return Leaf(raw.title or untitled, source)


def _reduce_folder(raw: RawFolder, children: List[Node], untitled: str) -> Optional[Node]:
    if not children:
        return None

    folder = Folder(raw.title or untitled, tuple(children))

    # Nested folders
    if len(children) == 1 and is_container(children[0]):
        return group_folders(folder, children[0])

    return folder


def reduce(raw: RawNode, untitled: str = UNTITLED) -> Optional[Node]:
    """
    Create the bookmarklet tree of the given raw bookmark node.

    Items become Leaf nodes when their URL holds a script. Folders without any
    bookmarklet below them are dropped, and chains of folders that each hold a
    single folder are collapsed into one FolderGroup.
    Returns None when nothing below `raw` qualifies.

    Folders are walked with an explicit stack, so any nesting depth works.
    """
    if not isinstance(raw, RawFolder):
        return _reduce_item(raw, untitled)

    # (folder, iterator over its raw children, its reduced children so far)
    stack = [(raw, iter(raw.children), [])]
    while True:
        folder, pending, children = stack[-1]
        for raw_child in pending:
            if isinstance(raw_child, RawFolder):
                stack.append((raw_child, iter(raw_child.children), []))
                break
            leaf = _reduce_item(raw_child, untitled)
            if leaf is not None:
                children.append(leaf)
        else:
            stack.pop()
            node = _reduce_folder(folder, children, untitled)
            if not stack:
                return node
            if node is not None:
                stack[-1][2].append(node)


def top_level_entries(tree: Optional[Node]) -> Tuple[Node, ...]:
    """Entries shown directly in the root menu; a root folder is never shown itself"""
    if tree is None:
        return ()
    if is_container(tree):
        return tree.children
    return (tree,)


def count_bookmarklets(tree: Optional[Node]) -> int:
    count = 0
    stack = [tree] if tree is not None else []
    while stack:
        node = stack.pop()
        if node.kind is NodeKind.LEAF:
            count += 1
        else:
            stack.extend(node.children)
    return count
