"""
Menu projection: turn a bookmarklet tree into menu create instructions
"""

from dataclasses import dataclass
from typing import List, Optional

from bookmarklet_tree import Node, NodeKind, top_level_entries

ROOT_REF = "root"
EMPTY_REF = "empty"
EMPTY_TITLE = "No bookmarklets"


@dataclass(frozen=True)
class CreateInstruction:
    """One menu entry to create under `parent_ref`"""
    ref: str
    title: str
    parent_ref: Optional[str]
    is_container: bool
    leaf_payload: Optional[str] = None


def project(tree: Optional[Node], flatten: bool = False, root_ref: str = ROOT_REF,
            empty_title: str = EMPTY_TITLE) -> List[CreateInstruction]:
    """
    Create the instructions building the menu of the given bookmarklet tree.

    The root folder itself is never shown: its children are placed directly
    under `root_ref`. With `flatten`, no container is created at all and every
    bookmarklet lands under `root_ref`.
    Entries come out in menu order, parents before their children.
    """
    entries = top_level_entries(tree)

    # If no bookmarklets
    if not entries:
        return [CreateInstruction(EMPTY_REF, empty_title, root_ref, False)]

    instructions = []
    stack = [(entry, root_ref) for entry in reversed(entries)]
    while stack:
        node, parent_ref = stack.pop()
        ref = f"item-{len(instructions) + 1}"

        if node.kind is NodeKind.LEAF:
            instructions.append(CreateInstruction(ref, node.title, parent_ref, False, node.source))
        elif node.kind in (NodeKind.FOLDER, NodeKind.FOLDER_GROUP):
            children_parent = parent_ref
            if not flatten:
                instructions.append(CreateInstruction(ref, node.title, parent_ref, True))
                children_parent = ref
            stack.extend((child, children_parent) for child in reversed(node.children))
        else:
            raise ValueError(f"Unknown bookmarklet node kind: {node.kind}")

    return instructions
