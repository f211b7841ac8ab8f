"""
Composition tree — folders and modules sized at three metrics.

A tree is built once per asset: modules are inserted by path, single-child
folder chains are merged once, then sizes are read for chart projection.

Node kinds:
  folder        — named container, size is the live sum of its children
  module        — leaf with a declared size and optional parsed source
  concatenated  — module that owns a nested sub-tree of the modules the
                  bundler merged into it; nested nodes are "content" nodes
                  whose owner is that module
"""
from __future__ import annotations

import gzip
import math
from enum import Enum
from typing import Callable, Iterator, Optional

MULTI_MODULE_PREFIX = "multi "
CONCATENATED_SUFFIX = " (concatenated)"

# parsed_size / gzip_size not computed yet
_UNSET = object()


def gzip_size(src: str) -> int:
    return len(gzip.compress(src.encode("utf-8"), compresslevel=9))


def byte_length(src: str) -> int:
    return len(src.encode("utf-8"))


def module_path_parts(module: dict) -> Optional[list[str]]:
    """
    Split a stats module's name into folder segments plus a file segment.

    "./src/a.js"                        -> ["src", "a.js"]
    "babel-loader!./~/lodash/index.js"  -> ["node_modules", "lodash", "index.js"]
    "multi ./a.js ./b.js"               -> ["multi ./a.js ./b.js"]

    Returns None when there is nothing usable (the module is skipped).
    """
    identifier = module.get("identifier") or ""
    if identifier.startswith(MULTI_MODULE_PREFIX):
        return [identifier]

    name = module.get("name") or module.get("path") or ""
    # loaders are joined with "!"; the raw module path is the last part
    raw_path = name.split("!")[-1]
    parts = [
        "node_modules" if part == "~" else part
        for part in raw_path.split("/")[1:]
    ]
    return parts or None


class NodeKind(str, Enum):
    FOLDER       = "folder"
    MODULE       = "module"
    CONCATENATED = "concatenated"


class Node:
    """One tree node; `kind` decides which fields are meaningful."""

    def __init__(
        self,
        name: str,
        kind: NodeKind,
        data: Optional[dict] = None,
        src: Optional[str] = None,
        owner: Optional["Node"] = None,
        compressed_size: Callable[[str], int] = gzip_size,
    ):
        self.name   = name
        self.kind   = kind
        self.data   = data or {}
        self.parent: Optional[Node] = None
        self.owner  = owner
        self.children: dict[str, Node] = {}
        self.compressed_size = compressed_size

        self._size = self.data.get("size") or 0
        self._src  = src
        self._parsed_size = _UNSET
        self._gzip_size   = _UNSET

    def __repr__(self) -> str:
        return f"Node({self.kind.value} {self.path!r})"

    # ── Structure ────────────────────────────────────────────────────────────

    @property
    def is_folder(self) -> bool:
        return self.kind is NodeKind.FOLDER

    @property
    def is_root(self) -> bool:
        return self.parent is None

    @property
    def path(self) -> str:
        names = []
        node: Optional[Node] = self
        while node is not None:
            names.append(node.name)
            node = node.parent
        return "/".join(reversed(names))

    def get_child(self, name: str) -> Optional["Node"]:
        return self.children.get(name)

    def add_child_folder(self, folder: "Node") -> "Node":
        folder.parent = self
        self.children[folder.name] = folder
        self._reset_sizes()
        return folder

    def add_child_module(self, module: "Node") -> None:
        current = self.children.get(module.name)
        if current is not None and current.is_folder:
            return
        if current is not None:
            current.merge(module)
        else:
            module.parent = self
            self.children[module.name] = module
        self._reset_sizes()

    def merge(self, other: "Node") -> None:
        """Fold a same-named sibling module into this one."""
        self._size += other._size
        if other._src:
            self._src = (self._src or "") + other._src
        self._reset_sizes()

    def walk(self) -> Iterator["Node"]:
        """Depth-first over every descendant, nested module trees included."""
        for child in self.children.values():
            yield child
            yield from child.walk()

    def merge_nested_folders(self) -> None:
        """Collapse chains of folders that hold nothing but one folder."""
        if self.is_folder and not self.is_root:
            while len(self.children) == 1:
                only_child = next(iter(self.children.values()))
                if not only_child.is_folder:
                    break
                self.name = f"{self.name}/{only_child.name}"
                self.children = only_child.children

        for child in self.children.values():
            child.parent = self
            child.merge_nested_folders()

        # merged children were renamed ("a" -> "a/b"); re-key, keeping order
        self.children = {child.name: child for child in self.children.values()}

    # ── Sizes ────────────────────────────────────────────────────────────────

    @property
    def stat_size(self) -> int:
        if self.is_folder:
            return sum(child.stat_size for child in self.children.values())
        return self._size

    @property
    def src(self) -> Optional[str]:
        if self._src is not None or self.kind is NodeKind.MODULE:
            return self._src
        sources = [child.src for child in self.children.values() if child.src]
        return "".join(sources) if sources else None

    @property
    def parsed_size(self) -> Optional[int]:
        if self._parsed_size is _UNSET:
            self._parsed_size = self._compute_size(byte_length, "parsed_size")
        return self._parsed_size

    @property
    def gzip_size(self) -> Optional[int]:
        if self._gzip_size is _UNSET:
            self._gzip_size = self._compute_size(self.compressed_size, "gzip_size")
        return self._gzip_size

    def _compute_size(self, measure: Callable[[str], int], metric: str) -> Optional[int]:
        src = self.src
        if src:
            return measure(src)
        if self.owner is not None:
            return self._estimate_from_owner(metric)
        return 0 if self.is_folder else None

    def _estimate_from_owner(self, metric: str) -> Optional[int]:
        owner_size = getattr(self.owner, metric)
        if owner_size is None or not self.owner.stat_size:
            return None
        return math.floor(self.stat_size / self.owner.stat_size * owner_size)

    def _reset_sizes(self) -> None:
        node: Optional[Node] = self
        while node is not None:
            node._parsed_size = _UNSET
            node._gzip_size   = _UNSET
            node = node.parent


class CompositionTree:
    """Folder/module tree of one asset, rooted at "."."""

    def __init__(
        self,
        compressed_size: Callable[[str], int] = gzip_size,
        path_parts: Callable[[dict], Optional[list[str]]] = module_path_parts,
    ):
        self.compressed_size = compressed_size
        self.path_parts = path_parts
        self.root = Node(".", NodeKind.FOLDER, compressed_size=compressed_size)

    @classmethod
    def from_modules(
        cls,
        modules: list[dict],
        sources: Optional[dict] = None,
        compressed_size: Callable[[str], int] = gzip_size,
    ) -> "CompositionTree":
        """Insert every module, then merge nested folders once."""
        tree = cls(compressed_size=compressed_size)
        for module in modules:
            src = sources.get(module.get("id")) if sources else None
            tree.insert(module, src)
        tree.merge_nested_folders()
        return tree

    @property
    def children(self) -> dict[str, Node]:
        return self.root.children

    @property
    def stat_size(self) -> int:
        return self.root.stat_size

    @property
    def parsed_size(self) -> Optional[int]:
        return self.root.parsed_size

    @property
    def gzip_size(self) -> Optional[int]:
        return self.root.gzip_size

    def insert(self, module: dict, src: Optional[str] = None) -> None:
        self._insert_into(self.root, module, src, owner=None)

    def merge_nested_folders(self) -> None:
        self.root.merge_nested_folders()

    def _insert_into(
        self,
        base: Node,
        module: dict,
        src: Optional[str],
        owner: Optional[Node],
    ) -> None:
        parts = self.path_parts(module)
        if not parts:
            return

        *folders, file_name = parts
        current = base
        for folder_name in folders:
            child = current.get_child(folder_name)
            # A module can sit where a folder is needed (webpack emits those
            # for broken dynamic require contexts); the folder replaces it.
            if child is None or not child.is_folder:
                child = current.add_child_folder(
                    Node(folder_name, NodeKind.FOLDER, owner=owner,
                         compressed_size=self.compressed_size)
                )
            current = child

        if module.get("modules") is not None:
            leaf = Node(
                file_name + CONCATENATED_SUFFIX, NodeKind.CONCATENATED,
                data=module, src=src, owner=owner,
                compressed_size=self.compressed_size,
            )
            for content in module["modules"]:
                self._insert_into(leaf, content, None, owner=leaf)
        else:
            leaf = Node(
                file_name, NodeKind.MODULE,
                data=module, src=src, owner=owner,
                compressed_size=self.compressed_size,
            )
        current.add_child_module(leaf)
