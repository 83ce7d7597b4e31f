"""
Configuration constants to replace magic strings throughout pkggraph
"""

import os
import tempfile

# Parser configuration constants (cache under temp dir to avoid cluttering project root)
DEFAULT_HEADER_CACHE_FILE = os.path.join(tempfile.gettempdir(), "pkggraph_header.cache")
DEFAULT_CONSTRAINT_CACHE_FILE = os.path.join(tempfile.gettempdir(), "pkggraph_constraint.cache")

# Source file conventions
GO_FILE_EXTENSION = ".go"
TEST_FILE_SUFFIX = "_test.go"
XTEST_PACKAGE_SUFFIX = "_test"
CGO_PSEUDO_IMPORT = "C"
RUNTIME_VERSION_FILE = "zversion.go"

# Auxiliary (non-Go) inputs, keyed by extension -> Package field
AUXILIARY_EXTENSIONS = {
    ".c": "c_files",
    ".cc": "cxx_files",
    ".cpp": "cxx_files",
    ".cxx": "cxx_files",
    ".m": "m_files",
    ".h": "h_files",
    ".hh": "h_files",
    ".hpp": "h_files",
    ".hxx": "h_files",
    ".s": "s_files",
    ".syso": "syso_files",
    ".swig": "swig_files",
    ".swigcxx": "swig_cxx_files",
}

# Build constraint tags that never hold
DEFAULT_ALWAYS_FALSE_TAGS = ("ignore",)
GO_BUILD_PREFIX = "//go:build"
PLUS_BUILD_PREFIX = "+build"

# Path segment markers
INTERNAL_MARKER = "internal"
VENDOR_MARKER = "vendor"
TESTDATA_DIR = "testdata"
LOCAL_PATH_PREFIX = "_"

# Packages with special dependency rules
RUNTIME_PACKAGE = "runtime"
UNSAFE_PACKAGE = "unsafe"
CGO_RUNTIME_PACKAGE = "runtime/cgo"
SYSCALL_PACKAGE = "syscall"
BUILTIN_PSEUDO_PACKAGE = "builtin"
PROGRAM_PACKAGE_NAME = "main"
FILES_PACKAGE_PATH = "command-line-arguments"
CGO_EXCLUDE = frozenset({"runtime/cgo"})
CGO_SYSCALL_EXCLUDE = frozenset({"runtime/cgo", "runtime/race"})

# Environment variable names
ENV_GOROOT = "GOROOT"
ENV_GOPATH = "GOPATH"
ENV_VENDOR_EXPERIMENT = "GO15VENDOREXPERIMENT"
ENV_VISIBILITY = "PKGGRAPH_VISIBILITY"
ENV_DISABLED_VALUES = ("0", "false", "no", "off")

# Pattern pseudo-specs
PATTERN_ALL = "all"
PATTERN_STD = "std"
PATTERN_WILDCARD = "..."

# File encoding constants
DEFAULT_FILE_ENCODING = "utf-8"
