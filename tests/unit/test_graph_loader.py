#!/usr/bin/env python3
"""
Tests for the graph loader: dependency closure, cycles, error propagation,
implicit imports, vendoring, visibility, collisions and build IDs.
"""

import os
import pytest
from pkggraph.loader.visibility import INTERNAL_NOT_ALLOWED, VENDORED_NOT_ALLOWED
from pkggraph.shared.errors import (
    CollisionError,
    CrossPathError,
    CycleError,
    FatalError,
    ForeignSourceError,
    ImportPathError,
    NoGoFilesError,
    NotFoundError,
)
from pkggraph.shared.package import LoadState
from tests.test_utils import Workspace, go_source, write_file


class TestDependencyClosure:

    def test_transitive_deps(self, workspace):
        workspace.pkg("c", ["c/d"])
        workspace.pkg("c/d", ["fmt"])
        [c] = workspace.load("c")
        assert c.error is None
        assert c.imports == ["c/d"]
        assert c.deps == ["c/d", "fmt", "runtime"]
        assert not c.incomplete
        assert c.state is LoadState.FINALIZED
        assert len(c.build_id) == 40

    def test_each_record_has_its_own_closure(self, workspace):
        workspace.pkg("c", ["c/d"])
        workspace.pkg("c/d", ["fmt"])
        loader = workspace.loader()
        loader.load_packages(["c"])
        assert loader.cache.get("c/d").deps == ["fmt", "runtime"]
        assert loader.cache.get("fmt").deps == ["runtime"]

    def test_shared_dependency_loaded_once(self, workspace):
        workspace.pkg("a", ["b", "c"])
        workspace.pkg("b", ["d"])
        workspace.pkg("c", ["d"])
        workspace.pkg("d")
        loader = workspace.loader()
        [a] = loader.load_packages(["a"])
        assert a.deps == ["b", "c", "d", "runtime"]
        assert [r.import_path for r in loader.records()] == ["a", "b", "c", "d", "runtime"]

    def test_same_spec_twice_returns_same_record(self, workspace):
        workspace.pkg("a")
        first, second = workspace.load("a", "a")
        assert first is second

    def test_standard_flag(self, workspace):
        workspace.std("example.com/x")
        workspace.pkg("mine")
        fmt, dotted, mine = workspace.load("fmt", "example.com/x", "mine")
        assert fmt.standard and fmt.goroot
        assert dotted.goroot and not dotted.standard
        assert not mine.goroot and not mine.standard
        assert mine.root == str(workspace.gopath)

    def test_package_list_is_post_order(self, workspace):
        workspace.pkg("c", ["c/d"])
        workspace.pkg("c/d", ["fmt"])
        loader = workspace.loader()
        roots = loader.load_packages(["c"])
        assert [p.import_path for p in loader.package_list(roots)] == ["runtime", "fmt", "c/d", "c"]

    def test_clear(self, workspace):
        workspace.pkg("a")
        loader = workspace.loader()
        loader.load_packages(["a"])
        loader.clear()
        assert loader.records() == []
        assert loader.edges == {}


class TestImplicitImports:

    def test_runtime_and_unsafe_have_no_deps(self, workspace):
        runtime, unsafe = workspace.load("runtime", "unsafe")
        assert runtime.deps == []
        assert unsafe.deps == []

    def test_every_other_package_gets_runtime(self, workspace):
        workspace.pkg("plain")
        errors, plain = workspace.load("errors", "plain")
        assert errors.deps == ["runtime"]
        assert plain.deps == ["runtime"]
        assert plain.imports == []

    def test_cgo_packages(self, workspace):
        workspace.pkg("cg", files={"cg.go": go_source("cg", ["C"])})
        [cg] = workspace.load("cg")
        assert cg.cgo_files == ["cg.go"]
        assert cg.imports == ["C"]
        assert cg.deps == ["runtime", "runtime/cgo", "syscall"]

    def test_standard_runtime_cgo_skips_cgo_imports(self, workspace):
        workspace.std("runtime/cgo", files={"cgo.go": go_source("cgo", ["C"])})
        [cgo] = workspace.load("runtime/cgo")
        assert cgo.deps == ["runtime"]

    def test_c_files_with_cgo_are_allowed(self, workspace):
        workspace.pkg("cg", files={"cg.go": go_source("cg", ["C"]), "impl.c": "int x;\n"})
        [cg] = workspace.load("cg")
        assert cg.error is None
        assert cg.c_files == ["impl.c"]


class TestCycles:

    def test_two_package_cycle(self, workspace):
        workspace.pkg("a", ["b"])
        workspace.pkg("b", ["a"])
        loader = workspace.loader()
        [a] = loader.load_packages(["a"])
        b = loader.cache.get("b")

        assert isinstance(a.error, CycleError)
        assert a.error.import_stack == ["a", "b", "a"]
        assert str(a.error) == "import cycle not allowed\npackage a\n\timports b\n\timports a\n"
        assert a.incomplete
        assert a.build_id == ""

        assert b.error is None
        assert b.incomplete
        assert "a" not in b.deps
        assert b.deps_errors == [a.error]
        assert loader.edges["b"] == ["runtime"]

    def test_self_import(self, workspace):
        workspace.pkg("self", ["self"])
        [pkg] = workspace.load("self")
        assert isinstance(pkg.error, CycleError)
        assert pkg.error.import_stack == ["self", "self"]
        assert "self" not in pkg.deps

    def test_loading_terminates_and_finalizes(self, workspace):
        workspace.pkg("a", ["b"])
        workspace.pkg("b", ["c"])
        workspace.pkg("c", ["a"])
        loader = workspace.loader()
        loader.load_packages(["a"])
        assert all(not r.pending for r in loader.records())


class TestErrorPropagation:

    def test_missing_dependency(self, workspace):
        workspace.pkg("a", ["b"])
        workspace.pkg("b", ["missing"])
        loader = workspace.loader()
        [a] = loader.load_packages(["a"])
        missing = loader.cache.get("missing")

        assert isinstance(missing.error, NotFoundError)
        assert missing.error.import_stack == ["a", "b", "missing"]
        assert missing.error.pos == os.path.join("gopath", "src", "b", "b.go") + ":4:2"
        assert missing.incomplete
        assert missing.state is LoadState.ERRORED

        assert a.error is None
        assert a.incomplete
        assert a.deps == ["b", "missing", "runtime"]
        assert a.deps_errors == [missing.error]

    def test_reuse_keeps_shortest_import_stack(self, workspace):
        workspace.pkg("a", ["b", "missing"])
        workspace.pkg("b", ["missing"])
        loader = workspace.loader()
        [a] = loader.load_packages(["a"])
        missing = loader.cache.get("missing")
        assert missing.error.import_stack == ["a", "missing"]
        assert a.deps_errors == [missing.error]

    def test_missing_entry_package(self, workspace):
        [pkg] = workspace.load("nowhere")
        assert isinstance(pkg.error, NotFoundError)
        assert pkg.error.import_stack == ["nowhere"]
        assert pkg.error.pos == ""
        assert str(pkg.error).startswith('package nowhere: cannot find package "nowhere" in any of:')

    def test_directory_without_sources(self, workspace):
        (workspace.gopath_src / "empty").mkdir()
        [pkg] = workspace.load("empty")
        assert isinstance(pkg.error, NoGoFilesError)

    def test_program_import(self, workspace):
        workspace.pkg("tool", name="main")
        workspace.pkg("lib", ["tool"])
        [lib] = workspace.load("lib")
        assert isinstance(lib.error, ImportPathError)
        assert lib.error.message == 'import "tool" is a program, not an importable package'
        assert lib.error.pos.endswith("lib.go:4:2")
        assert "tool" in lib.deps
        assert lib.build_id == ""

    def test_local_import_in_non_local_package(self, workspace):
        workspace.pkg("lib", ["./sub"])
        workspace.pkg("lib/sub")
        [lib] = workspace.load("lib")
        assert isinstance(lib.error, ImportPathError)
        assert lib.error.message == 'local import "./sub" in non-local package'

    def test_foreign_sources(self, workspace):
        workspace.pkg("fs", files={"fs.go": go_source("fs"), "x.c": "int x;\n"})
        [pkg] = workspace.load("fs")
        assert isinstance(pkg.error, ForeignSourceError)
        assert pkg.error.files == ["x.c"]
        assert pkg.error.import_stack == ["fs"]

    def test_import_comment_mismatch(self, workspace):
        workspace.pkg("cp", files={"cp.go": go_source("cp", import_comment="example.com/cp")})
        [pkg] = workspace.load("cp")
        assert isinstance(pkg.error, CrossPathError)
        assert pkg.error.message == (
            f'code in directory {workspace.gopath_src / "cp"} expects import "example.com/cp"'
        )

    def test_matching_import_comment(self, workspace):
        workspace.pkg("example.com/cp", files={"cp.go": go_source("cp", import_comment="example.com/cp")})
        [pkg] = workspace.load("example.com/cp")
        assert pkg.error is None
        assert pkg.import_comment == "example.com/cp"


class TestLocalPackages:

    def test_local_argument_below_root_is_canonical(self, workspace):
        workspace.pkg("c")
        [pkg] = workspace.load("./c", cwd=workspace.gopath_src)
        assert pkg.import_path == "c"
        assert not pkg.local

    def test_local_package_outside_roots(self, workspace):
        write_file(workspace.root / "outside" / "main.go", go_source("main", ["fmt", "./helper"]))
        write_file(workspace.root / "outside" / "helper" / "h.go", go_source("helper"))
        [pkg] = workspace.load("./outside")
        assert pkg.error is None
        assert pkg.local
        assert pkg.import_path.startswith("_/")
        assert pkg.import_path.endswith("/outside")
        assert pkg.root == ""
        helper = pkg.import_path + "/helper"
        assert pkg.imports == [helper, "fmt"]
        assert pkg.deps == sorted([helper, "fmt", "runtime"])


class TestVendoring:

    def test_vendored_dependency(self, workspace):
        workspace.pkg("x", ["y"])
        workspace.pkg("x/vendor/y")
        [x] = workspace.load("x")
        assert x.error is None
        assert x.imports == ["x/vendor/y"]
        assert x.deps == ["runtime", "x/vendor/y"]
        assert x.deps_errors == []

    def test_root_copy_without_vendor_tree(self, workspace):
        workspace.pkg("x/sub", ["y"])
        workspace.pkg("y")
        [sub] = workspace.load("x/sub")
        assert sub.error is None
        assert sub.imports == ["y"]
        assert sub.deps == ["runtime", "y"]
        assert sub.deps_errors == []

    def test_files_package_uses_vendor_tree(self, workspace):
        write_file(workspace.gopath_src / "x" / "cmd" / "main.go", go_source("main", ["y"]))
        workspace.pkg("x/vendor/y")
        [pkg] = workspace.load("gopath/src/x/cmd/main.go")
        assert pkg.import_path == "command-line-arguments"
        assert pkg.imports == ["x/vendor/y"]
        assert pkg.deps == ["runtime", "x/vendor/y"]
        assert pkg.deps_errors == []

    def test_local_package_under_root_uses_vendor_tree(self, workspace):
        write_file(workspace.gopath_src / "x" / "cmd" / "main.go", go_source("main", ["./sub"]))
        workspace.pkg("x/cmd/sub", ["y"])
        workspace.pkg("x/vendor/y")
        loader = workspace.loader()
        [pkg] = loader.load_packages(["gopath/src/x/cmd/main.go"])
        assert pkg.deps_errors == []
        sub = loader.cache.get(pkg.imports[0])
        assert sub.local
        assert sub.import_path.startswith("_/")
        assert sub.imports == ["x/vendor/y"]

    def test_vendoring_disabled(self, workspace):
        workspace.pkg("x", ["y"])
        workspace.pkg("x/vendor/y")
        [x] = workspace.load("x", vendor_enabled=False)
        assert x.deps == ["runtime", "y"]
        assert isinstance(x.deps_errors[0], NotFoundError)

    def test_full_vendor_path_is_rejected(self, workspace):
        workspace.pkg("x", ["x/vendor/y"])
        workspace.pkg("x/vendor/y")
        [x] = workspace.load("x")
        assert x.error is None
        assert x.incomplete
        [error] = x.deps_errors
        assert error.message == "must be imported as y"
        assert error.import_stack == ["x", "x/vendor/y"]

    def test_full_vendor_path_is_rejected_for_broken_package(self, workspace):
        workspace.pkg("x", ["x/vendor/y"])
        workspace.pkg("x/vendor/y", files={"a.go": go_source("a"), "b.go": go_source("b")})
        [x] = workspace.load("x")
        assert x.incomplete
        assert [e.message for e in x.deps_errors] == ["must be imported as y"]

    def test_vendor_tree_not_visible_outside_parent(self, workspace):
        workspace.pkg("x/vendor/y")
        workspace.pkg("z", ["x/vendor/y"])
        [z] = workspace.load("z")
        assert z.deps_errors[0].message == VENDORED_NOT_ALLOWED

    def test_vendored_import_comment_is_not_checked(self, workspace):
        workspace.pkg("x", ["y"])
        workspace.pkg("x/vendor/y", files={"y.go": go_source("y", import_comment="example.com/y")})
        [x] = workspace.load("x")
        assert x.deps_errors == []


class TestInternal:

    @pytest.fixture
    def tree(self, workspace):
        workspace.pkg("a/internal/b")
        workspace.pkg("a/c", ["a/internal/b"])
        workspace.pkg("z", ["a/internal/b"])
        return workspace

    def test_allowed_within_parent(self, tree):
        [c] = tree.load("a/c")
        assert c.deps_errors == []
        assert not c.incomplete

    def test_rejected_outside_parent(self, tree):
        loader = tree.loader()
        c, z = loader.load_packages(["a/c", "z"])
        assert c.deps_errors == []
        [error] = z.deps_errors
        assert error.message == INTERNAL_NOT_ALLOWED
        assert error.import_stack == ["z", "a/internal/b"]
        assert z.incomplete
        assert loader.cache.get("a/internal/b").error is None

    def test_entry_package_is_exempt(self, tree):
        [b] = tree.load("a/internal/b")
        assert b.error is None

    def test_visibility_disabled(self, tree):
        [z] = tree.load("z", enforce_visibility=False)
        assert z.deps_errors == []


class TestCollisions:

    def test_file_name_collision(self, workspace):
        workspace.pkg("fc", files={"Foo.go": go_source("fc"), "foo.go": go_source("fc")})
        [pkg] = workspace.load("fc")
        assert isinstance(pkg.error, CollisionError)
        assert str(pkg.error) == 'package fc: case-insensitive file name collision: "Foo.go" and "foo.go"'

    def test_import_collision(self, workspace):
        workspace.pkg("q/Lib")
        workspace.pkg("q/lib")
        workspace.pkg("imp", ["q/Lib", "q/lib"])
        [pkg] = workspace.load("imp")
        assert isinstance(pkg.error, CollisionError)
        assert pkg.error.message == 'case-insensitive import collision: "q/Lib" and "q/lib"'

    def test_import_collision_skipped_when_deps_failed(self, workspace):
        workspace.pkg("q/Lib", ["missing"])
        workspace.pkg("q/lib")
        workspace.pkg("imp", ["q/Lib", "q/lib"])
        [pkg] = workspace.load("imp")
        assert pkg.error is None
        assert pkg.incomplete


class TestBuildIdentity:

    @staticmethod
    def _layout(ws):
        ws.pkg("c", ["c/d"])
        ws.pkg("c/d", ["fmt"])
        return ws

    def test_independent_of_location(self, tmp_path):
        one = self._layout(Workspace(tmp_path / "one"))
        two = self._layout(Workspace(tmp_path / "two"))
        [c1] = one.load("c")
        [c2] = two.load("c")
        assert c1.build_id == c2.build_id

    def test_dependency_change_propagates(self, tmp_path):
        one = self._layout(Workspace(tmp_path / "one"))
        two = self._layout(Workspace(tmp_path / "two"))
        write_file(two.gopath_src / "c" / "d" / "extra.go", go_source("d"))
        [c1] = one.load("c")
        [c2] = two.load("c")
        assert c1.build_id != c2.build_id

    def test_runtime_version_matters(self, tmp_path):
        one = Workspace(tmp_path / "one")
        two = Workspace(tmp_path / "two")
        write_file(two.goroot_src / "runtime" / "zversion.go", "package runtime\n\nconst theVersion = `go1.6`\n")
        [r1] = one.load("runtime")
        [r2] = two.load("runtime")
        assert r1.build_id != r2.build_id


class TestDeferredAndFiles:

    def test_ignored_imports_loaded_on_demand(self, workspace):
        workspace.pkg("ig", files={
            "ig.go": go_source("ig"),
            "skip.go": go_source("ig", ["errors"], constraint="// +build ignore"),
        })
        loader = workspace.loader()
        [pkg] = loader.load_packages(["ig"])
        assert pkg.ignored_go_files == ["skip.go"]
        assert pkg.ignored_imports == ["errors"]
        assert pkg.deps == ["runtime"]

        loaded = loader.load_ignored_imports(pkg)
        assert [p.import_path for p in loaded] == ["errors"]
        assert pkg.deps == ["runtime"]

    def test_files_package(self, workspace):
        write_file(workspace.root / "cmd" / "main.go", go_source("main", ["fmt"]))
        write_file(workspace.root / "cmd" / "extra.go",
                   go_source("main", ["errors"], constraint="//go:build ignore"))
        write_file(workspace.root / "cmd" / "unlisted.go", go_source("main", ["syscall"]))
        [pkg] = workspace.load("cmd/main.go", "cmd/extra.go")
        assert pkg.import_path == "command-line-arguments"
        assert pkg.local
        assert pkg.go_files == ["extra.go", "main.go"]
        assert pkg.deps == ["errors", "fmt", "runtime"]
        assert pkg.directory == str(workspace.root / "cmd")

    @pytest.mark.parametrize("files, message", [
        (["cmd/notes.txt"], "named files must be .go files"),
        (["cmd/gone.go"], "stat cmd/gone.go: no such file or directory"),
        (["cmd/dir.go"], "cmd/dir.go is a directory, should be a Go file"),
        (["cmd/main.go", "other/x.go"], "named files must all be in one directory; have cmd and other"),
    ])
    def test_files_package_errors(self, workspace, files, message):
        write_file(workspace.root / "cmd" / "main.go", go_source("main"))
        (workspace.root / "cmd" / "dir.go").mkdir()
        write_file(workspace.root / "other" / "x.go", go_source("main"))
        with pytest.raises(FatalError) as exc:
            workspace.loader().load_files_package(files)
        assert str(exc.value) == message
