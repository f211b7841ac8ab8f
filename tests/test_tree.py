"""
Unit tests for analytics/tree.py.

Tests cover:
  - module_path_parts: loaders, "~", multi modules, unusable names
  - CompositionTree.insert: folders, leaf replacement, same-name merge
  - merge_nested_folders: single-child chains, root never merged
  - sizes: stat sum invariant, parsed/gzip memoization, content estimates
"""
import math

from bundle_analyzer.analytics.tree import (
    CompositionTree,
    NodeKind,
    byte_length,
    gzip_size,
    module_path_parts,
)
from conftest import make_module


def build(modules, sources=None, **kwargs):
    return CompositionTree.from_modules(modules, sources, **kwargs)


def child_names(node):
    return list(node.children)


# ── module_path_parts ─────────────────────────────────────────────────────────

class TestModulePathParts:
    def test_relative_path(self):
        assert module_path_parts({"name": "./src/a.js"}) == ["src", "a.js"]

    def test_loaders_removed(self):
        name = "babel-loader!eslint-loader!./src/app.js"
        assert module_path_parts({"name": name}) == ["src", "app.js"]

    def test_tilde_is_node_modules(self):
        assert module_path_parts({"name": "./~/lodash/index.js"}) == ["node_modules", "lodash", "index.js"]

    def test_multi_module_single_segment(self):
        module = {"identifier": "multi ./a.js ./b.js", "name": "multi ./a.js ./b.js"}
        assert module_path_parts(module) == ["multi ./a.js ./b.js"]

    def test_path_fallback(self):
        assert module_path_parts({"path": "./x.js"}) == ["x.js"]

    def test_unusable_name(self):
        assert module_path_parts({"name": 'external "react"'}) is None
        assert module_path_parts({}) is None


# ── insert / structure ────────────────────────────────────────────────────────

class TestInsert:
    def test_sibling_files_share_folder(self):
        tree = build([make_module(1, "./src/a.js", 10), make_module(2, "./src/b.js", 20)])
        assert child_names(tree.root) == ["src"]
        src = tree.children["src"]
        assert src.kind is NodeKind.FOLDER
        assert child_names(src) == ["a.js", "b.js"]

    def test_top_level_module_no_spurious_folder(self):
        tree = build([make_module(1, "./index.js", 5)])
        assert child_names(tree.root) == ["index.js"]
        assert tree.children["index.js"].kind is NodeKind.MODULE

    def test_insertion_order_preserved(self):
        tree = build([make_module(1, "./z.js", 1), make_module(2, "./a.js", 1), make_module(3, "./m.js", 1)])
        assert child_names(tree.root) == ["z.js", "a.js", "m.js"]

    def test_unusable_path_skipped(self):
        tree = build([make_module(1, 'external "react"', 100), make_module(2, "./a.js", 1)])
        assert child_names(tree.root) == ["a.js"]
        assert tree.stat_size == 1

    def test_module_replaced_by_folder(self):
        # broken dynamic require: "./src/locale" is first a module, then a folder
        tree = build([
            make_module(1, "./src/locale", 3),
            make_module(2, "./src/locale/en.js", 7),
        ])
        # src -> locale is a single-folder chain, so it gets merged
        locale = tree.children["src/locale"]
        assert locale.kind is NodeKind.FOLDER
        assert child_names(locale) == ["en.js"]
        assert tree.stat_size == 7

    def test_module_dropped_when_folder_exists(self):
        tree = build([
            make_module(1, "./src/locale/en.js", 7),
            make_module(2, "./src/locale", 3),
        ])
        assert tree.children["src/locale"].kind is NodeKind.FOLDER
        assert tree.stat_size == 7

    def test_same_name_modules_merge(self):
        tree = CompositionTree()
        tree.insert(make_module(1, "./a.js", 10), "aa")
        tree.insert(make_module(2, "./a.js", 5), "bbb")
        leaf = tree.children["a.js"]
        assert leaf.stat_size == 15
        assert leaf.src == "aabbb"
        assert leaf.parsed_size == 5

    def test_paths(self):
        tree = build([make_module(1, "./src/a.js", 1), make_module(2, "./src/b.js", 1)])
        assert tree.children["src"].path == "./src"
        assert tree.children["src"].children["a.js"].path == "./src/a.js"


# ── merge_nested_folders ──────────────────────────────────────────────────────

class TestMergeNestedFolders:
    def test_single_child_chain_collapses(self):
        tree = build([
            make_module(1, "./node_modules/lodash/lib/a.js", 1),
            make_module(2, "./node_modules/lodash/lib/b.js", 1),
        ])
        assert child_names(tree.root) == ["node_modules/lodash/lib"]
        folder = tree.children["node_modules/lodash/lib"]
        assert child_names(folder) == ["a.js", "b.js"]
        assert folder.children["a.js"].path == "./node_modules/lodash/lib/a.js"

    def test_folder_with_file_sibling_not_merged(self):
        tree = build([
            make_module(1, "./src/index.js", 1),
            make_module(2, "./src/utils/a.js", 1),
        ])
        src = tree.children["src"]
        assert child_names(src) == ["index.js", "utils"]

    def test_stops_at_file(self):
        tree = build([make_module(1, "./a/b/c.js", 1)])
        assert child_names(tree.root) == ["a/b"]
        assert child_names(tree.children["a/b"]) == ["c.js"]

    def test_children_keyed_by_merged_name(self):
        tree = build([
            make_module(1, "./a/b/c.js", 1),
            make_module(2, "./src/index.js", 1, modules=[
                make_module(3, "./src/deep/x/y.js", 1),
                make_module(4, "./src/z.js", 1),
            ]),
        ])
        assert tree.root.get_child("a/b") is not None
        assert tree.root.get_child("a") is None
        for node in [tree.root, *tree.root.walk()]:
            assert list(node.children) == [c.name for c in node.children.values()]

    def test_root_never_renamed(self):
        tree = build([make_module(1, "./src/a.js", 1), make_module(2, "./src/b.js", 1)])
        assert tree.root.name == "."


# ── sizes ─────────────────────────────────────────────────────────────────────

class TestSizes:
    def test_folder_stat_size_is_sum(self):
        tree = build([
            make_module(1, "./src/a.js", 10),
            make_module(2, "./src/deep/x/b.js", 20),
            make_module(3, "./src/deep/y/c.js", 30),
            make_module(4, "./lib.js", 40),
        ])
        assert tree.stat_size == 100
        for node in tree.root.walk():
            if node.kind is NodeKind.FOLDER:
                assert node.stat_size == sum(c.stat_size for c in node.children.values())

    def test_folder_stat_size_is_live(self):
        tree = build([make_module(1, "./src/a.js", 10)])
        assert tree.stat_size == 10
        tree.insert(make_module(2, "./src/b.js", 5))
        assert tree.stat_size == 15

    def test_no_sources(self):
        tree = build([make_module(1, "./src/a.js", 10)])
        leaf = tree.children["src"].children["a.js"]
        assert leaf.parsed_size is None
        assert leaf.gzip_size is None
        assert tree.children["src"].parsed_size == 0
        assert tree.children["src"].gzip_size == 0

    def test_parsed_size_is_utf8_bytes(self):
        tree = build([make_module(1, "./a.js", 10)], {1: "é"})
        assert tree.children["a.js"].parsed_size == 2

    def test_folder_sizes_from_children_sources(self):
        tree = build(
            [make_module(1, "./src/a.js", 10), make_module(2, "./src/b.js", 10)],
            {1: "var a=1;", 2: "var b=2;"},
        )
        src = tree.children["src"]
        assert src.parsed_size == byte_length("var a=1;var b=2;")
        assert src.gzip_size == gzip_size("var a=1;var b=2;")

    def test_gzip_memoized_per_node(self):
        calls = []

        def counting(src):
            calls.append(src)
            return len(src)

        tree = build([make_module(1, "./a.js", 1)], {1: "abc"}, compressed_size=counting)
        leaf = tree.children["a.js"]
        assert leaf.gzip_size == 3
        assert leaf.gzip_size == 3
        assert calls == ["abc"]


class TestConcatenated:
    def concatenated(self, src=None):
        return build(
            [make_module(1, "./src/index.js", 100, modules=[
                make_module(3, "./src/x.js", 40),
                make_module(4, "./src/lib/y.js", 60),
            ])],
            {1: src} if src else None,
        )

    def test_nested_subtree(self):
        tree = self.concatenated()
        leaf = tree.children["src"].children["index.js (concatenated)"]
        assert leaf.kind is NodeKind.CONCATENATED
        # the nested "src" folder keeps a file and a folder, so it isn't merged
        assert child_names(leaf) == ["src"]
        assert child_names(leaf.children["src"]) == ["x.js", "lib"]

    def test_declared_size_is_own(self):
        tree = self.concatenated()
        assert tree.stat_size == 100

    def test_content_sizes_estimated_from_owner(self):
        src = "x" * 50
        tree = self.concatenated(src)
        leaf = tree.children["src"].children["index.js (concatenated)"]
        x = leaf.children["src"].children["x.js"]
        assert leaf.parsed_size == 50
        assert x.parsed_size == math.floor(40 / 100 * 50)
        assert x.gzip_size == math.floor(40 / 100 * gzip_size(src))
        assert leaf.children["src"].parsed_size == 50

    def test_content_sizes_unknown_without_owner_source(self):
        tree = self.concatenated()
        leaf = tree.children["src"].children["index.js (concatenated)"]
        assert leaf.parsed_size is None
        assert leaf.children["src"].children["x.js"].parsed_size is None

    def test_empty_modules_list_still_concatenated(self):
        tree = build([make_module(1, "./a.js", 1, modules=[])])
        assert tree.children["a.js (concatenated)"].children == {}
