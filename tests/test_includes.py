from __future__ import annotations

import subprocess
import unittest
from unittest import mock

import factories  # noqa: F401

from c4dart.errors import IncludeDetectionError
from c4dart.includes import include_args, parse_search_paths, system_include_paths

CLANG_STDERR = """\
clang version 17.0.6
Target: x86_64-pc-linux-gnu
 "/usr/lib/llvm-17/bin/clang" -cc1 -triple x86_64-pc-linux-gnu -E -v -x c -
#include "..." search starts here:
#include <...> search starts here:
 /usr/lib/llvm-17/lib/clang/17/include
 /usr/local/include
 /usr/include/x86_64-linux-gnu
 /usr/include
End of search list.
"""

MACOS_STDERR = """\
#include <...> search starts here:
 /usr/local/include
 /Library/Developer/CommandLineTools/usr/lib/clang/15.0.0/include
 /Library/Developer/CommandLineTools/SDKs/MacOSX.sdk/System/Library/Frameworks (framework directory)
End of search list.
"""


class ParseSearchPathsTests(unittest.TestCase):
    def test_linux_output(self) -> None:
        self.assertEqual(
            parse_search_paths(CLANG_STDERR),
            [
                "/usr/lib/llvm-17/lib/clang/17/include",
                "/usr/local/include",
                "/usr/include/x86_64-linux-gnu",
                "/usr/include",
            ],
        )

    def test_framework_marker_is_dropped(self) -> None:
        paths = parse_search_paths(MACOS_STDERR)
        self.assertEqual(paths[-1], "/Library/Developer/CommandLineTools/SDKs/MacOSX.sdk/System/Library/Frameworks")

    def test_empty_list(self) -> None:
        self.assertEqual(parse_search_paths("#include <...> search starts here:\nEnd of search list.\n"), [])

    def test_missing_start_marker(self) -> None:
        with self.assertRaises(IncludeDetectionError):
            parse_search_paths("clang version 17.0.6\n")

    def test_missing_end_marker(self) -> None:
        with self.assertRaises(IncludeDetectionError):
            parse_search_paths("#include <...> search starts here:\n /usr/include\n")


class SystemIncludePathsTests(unittest.TestCase):
    def test_runs_preprocessor_and_parses_stderr(self) -> None:
        done = subprocess.CompletedProcess(args=[], returncode=0, stdout="", stderr=CLANG_STDERR)
        with mock.patch("c4dart.includes.subprocess.run", return_value=done) as run:
            paths = system_include_paths("clang-17")
        self.assertEqual(paths[0], "/usr/lib/llvm-17/lib/clang/17/include")
        self.assertEqual(run.call_args[0][0], ["clang-17", "-E", "-xc", "-v", "-"])

    def test_non_zero_exit(self) -> None:
        done = subprocess.CompletedProcess(args=[], returncode=1, stdout="", stderr="boom")
        with mock.patch("c4dart.includes.subprocess.run", return_value=done):
            with self.assertRaises(IncludeDetectionError) as ctx:
                system_include_paths()
        self.assertIn("boom", str(ctx.exception))
        self.assertEqual(ctx.exception.exit_code, 4)

    def test_missing_compiler(self) -> None:
        with mock.patch("c4dart.includes.subprocess.run", side_effect=FileNotFoundError("clang")):
            with self.assertRaises(IncludeDetectionError):
                system_include_paths("clang")


class IncludeArgsTests(unittest.TestCase):
    def test_system_paths_first(self) -> None:
        self.assertEqual(
            include_args(["/usr/include"], ["vendor", "third_party/inc"]),
            ["-isystem/usr/include", "-Ivendor", "-Ithird_party/inc"],
        )

    def test_no_paths(self) -> None:
        self.assertEqual(include_args([], []), [])


if __name__ == "__main__":
    unittest.main()
