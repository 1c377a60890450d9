"""
Menu hosts: realize menu create instructions
"""

import json
import logging
from dataclasses import asdict, dataclass, field
from typing import Dict, List, Optional, Protocol
from urllib.parse import quote

from bookmarklet_tree import Node
from menu_config import MenuConfig
from menu_projector import ROOT_REF, CreateInstruction, project

logger = logging.getLogger(__name__)

RESULT_DOCUMENT_PREFIX = "data:text/html;charset=utf-8,"


class MenuHost(Protocol):
    def remove_all(self) -> None:
        ...

    def create(self, instruction: CreateInstruction, enabled: bool = True) -> str:
        """Create the entry and return the reference its children use as parent"""
        ...


@dataclass
class MenuEntry:
    ref: str
    title: str
    is_container: bool
    enabled: bool = True
    payload: Optional[str] = None
    children: List['MenuEntry'] = field(default_factory=list)


class TextMenuHost:
    """Keep the menu in memory and render it as an indented outline"""

    def __init__(self):
        self.roots: List[MenuEntry] = []
        self.entries: Dict[str, MenuEntry] = {}

    def remove_all(self) -> None:
        self.roots = []
        self.entries = {}

    def create(self, instruction: CreateInstruction, enabled: bool = True) -> str:
        entry = MenuEntry(
            ref=instruction.ref,
            title=instruction.title,
            is_container=instruction.is_container,
            enabled=enabled,
            payload=instruction.leaf_payload,
        )

        if instruction.parent_ref is None:
            self.roots.append(entry)
        else:
            parent = self.entries.get(instruction.parent_ref)
            if parent is None:
                raise KeyError(f"Unknown parent menu entry: {instruction.parent_ref}")
            parent.children.append(entry)

        self.entries[entry.ref] = entry
        return entry.ref

    def render(self) -> str:
        lines = []
        for entry in self.roots:
            self._render_entry(entry, "", lines)
        return "\n".join(lines)

    def _render_entry(self, entry: MenuEntry, indent: str, lines: List[str]):
        if entry.is_container:
            marker = "📁" if entry.enabled else "⏳"
            lines.append(f"{indent}{marker} {entry.title}")
            for child in entry.children:
                self._render_entry(child, indent + "  ", lines)
        elif entry.payload is None:
            lines.append(f"{indent}   {entry.title}")
        else:
            lines.append(f"{indent}🔖 {entry.title}")


def root_instruction(config: MenuConfig) -> CreateInstruction:
    return CreateInstruction(ROOT_REF, config.root_title, None, True)


def build_menu(host: MenuHost, tree: Optional[Node], config: MenuConfig) -> List[CreateInstruction]:
    """Rebuild the whole menu of the given bookmarklet tree"""
    host.remove_all()
    root_ref = host.create(root_instruction(config))

    instructions = project(tree, config.flat_menu, root_ref, config.empty_title)
    refs = {root_ref: root_ref}
    for instruction in instructions:
        # Hosts may hand out their own references
        parent_ref = refs[instruction.parent_ref]
        if parent_ref != instruction.parent_ref:
            instruction = CreateInstruction(instruction.ref, instruction.title, parent_ref,
                                            instruction.is_container, instruction.leaf_payload)
        refs[instruction.ref] = host.create(instruction)

    logger.debug(f"Built menu with {len(instructions)} entries (flat={config.flat_menu})")
    return instructions


def show_loading(host: MenuHost, config: MenuConfig) -> None:
    """Show an inert root entry until bookmarks are retrieved"""
    host.remove_all()
    host.create(root_instruction(config), enabled=False)


def instructions_to_json(instructions: List[CreateInstruction]) -> str:
    return json.dumps([asdict(instruction) for instruction in instructions], indent=2, ensure_ascii=False)


def result_document_url(value) -> Optional[str]:
    """
    URL of the document showing what a bookmarklet returned, like browsers do
    for javascript: URLs. None when the script returned nothing.
    """
    if value is None or str(value) == "":
        return None
    return RESULT_DOCUMENT_PREFIX + quote(str(value), safe="-_.!~*'()")
