"""
Unit tests for sysroot verification.
"""

from pathlib import PurePosixPath

import pytest

from crossroot.core.exceptions import IncompleteSysroot, UnsupportedTargetError
from crossroot.sysroot.verifier import ChecklistGroup, build_checklist, verify

TRIPLE = "x86_64-unknown-linux-gnu"


class TestBuildChecklist:
    """Tests for checklist construction."""

    def test_groups_and_order(self):
        """Test that critical entries come before startup objects."""
        checklist = build_checklist(TRIPLE)

        groups = [e.group for e in checklist.entries]
        assert groups == [ChecklistGroup.CRITICAL] * 6 + [ChecklistGroup.STARTUP] * 4
        assert [e.name for e in checklist.startup] == [
            "Scrt1.o",
            "crti.o",
            "crtn.o",
            "libc.so.6",
        ]

    def test_paths_use_multiarch(self):
        """Test that library paths follow the target's multiarch tuple."""
        checklist = build_checklist("armv7-unknown-linux-gnueabihf")
        paths = {e.name: e.relative_path for e in checklist.entries}

        assert paths["libudev library"] == PurePosixPath(
            "usr/lib/arm-linux-gnueabihf/libudev.so"
        )
        assert paths["libc.so.6"] == PurePosixPath("lib/arm-linux-gnueabihf/libc.so.6")
        assert paths["openssl header"] == PurePosixPath("usr/include/openssl/ssl.h")

    def test_depends_only_on_triple(self):
        """Test that the same triple always yields the same checklist."""
        assert build_checklist(TRIPLE) == build_checklist(TRIPLE)
        assert build_checklist(TRIPLE) != build_checklist("aarch64-unknown-linux-gnu")

    def test_unknown_triple(self):
        """Test that unsupported triples are rejected."""
        with pytest.raises(UnsupportedTargetError):
            build_checklist("riscv64gc-unknown-linux-gnu")


class TestVerify:
    """Tests for verify()."""

    def test_complete_sysroot(self, populated_sysroot):
        """Test that a fully populated sysroot has no missing entries."""
        report = verify(populated_sysroot, TRIPLE)

        assert report.complete
        assert len(report.found) == 10
        report.raise_for_missing()

    def test_one_missing_entry(self, populated_sysroot):
        """Test that exactly the removed file is reported."""
        (populated_sysroot / "usr/lib/x86_64-linux-gnu/crti.o").unlink()

        report = verify(populated_sysroot, TRIPLE)

        assert [s.entry.name for s in report.missing] == ["crti.o"]
        assert report.missing[0].path == (
            populated_sysroot.absolute() / "usr/lib/x86_64-linux-gnu/crti.o"
        )
        with pytest.raises(IncompleteSysroot) as exc_info:
            report.raise_for_missing()
        assert len(exc_info.value.missing) == 1
        assert "crti.o" in str(exc_info.value)

    def test_empty_sysroot(self, temp_dir):
        """Test that an empty directory misses every entry."""
        report = verify(temp_dir, TRIPLE)

        assert len(report.missing) == 10
        assert report.group(ChecklistGroup.STARTUP)[0].entry.name == "Scrt1.o"

    def test_not_cached(self, populated_sysroot):
        """Test that each call re-reads the filesystem."""
        assert verify(populated_sysroot, TRIPLE).complete

        (populated_sysroot / "usr/include/libudev.h").unlink()
        assert not verify(populated_sysroot, TRIPLE).complete

        (populated_sysroot / "usr/include/libudev.h").write_text("")
        assert verify(populated_sysroot, TRIPLE).complete

    def test_read_only(self, temp_dir):
        """Test that verification creates nothing."""
        verify(temp_dir, TRIPLE)

        assert list(temp_dir.iterdir()) == []

    def test_symlinked_library_counts(self, populated_sysroot):
        """Test that a symlink to an existing file is found."""
        lib = populated_sysroot / "usr/lib/x86_64-linux-gnu"
        (lib / "libssl.so").unlink()
        (lib / "libssl.so.3").write_text("ssl")
        (lib / "libssl.so").symlink_to("libssl.so.3")

        assert verify(populated_sysroot, TRIPLE).complete
