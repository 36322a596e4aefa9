"""Test loading expressions from text files and archives."""
import tarfile
import zipfile

import py7zr
import pytest

from string_calculator.batch.archive import SUPPORTED_SUFFIXES, extract_archive, read_expressions


def test_read_plain_text(tmp_path) -> None:
    """A .txt file is read directly."""
    txt = tmp_path / "ops.txt"
    txt.write_text("1+1\n2*2\n")

    assert read_expressions(txt) == "1+1\n2*2\n"


def test_extract_zip(tmp_path) -> None:
    """Check that a .zip archive can be extracted and read correctly."""
    txt = tmp_path / "ops.txt"
    txt.write_text("3+3\n")

    zip_path = tmp_path / "ops.zip"
    with zipfile.ZipFile(zip_path, "w") as zf:
        zf.write(txt, arcname="ops.txt")

    assert extract_archive(zip_path) == "3+3\n"
    assert read_expressions(zip_path) == "3+3\n"


def test_extract_tar_xz(tmp_path) -> None:
    """Check that a .tar.xz archive can be extracted and read correctly."""
    txt = tmp_path / "ops.txt"
    txt.write_text("4*4\n")

    tar_path = tmp_path / "ops.tar.xz"
    with tarfile.open(tar_path, "w:xz") as tf:
        tf.add(txt, arcname="ops.txt")

    assert extract_archive(tar_path) == "4*4\n"


def test_extract_7z(tmp_path) -> None:
    """Check that a .7z archive can be extracted and read correctly."""
    txt = tmp_path / "ops.txt"
    txt.write_text("5-2\n")

    archive_path = tmp_path / "ops.7z"
    with py7zr.SevenZipFile(archive_path, "w") as archive:
        archive.write(txt, arcname="ops.txt")

    assert extract_archive(archive_path) == "5-2\n"


def test_extract_archive_no_txt(tmp_path) -> None:
    """Verify that extraction fails if no .txt file exists in the archive."""
    zip_path = tmp_path / "empty.zip"
    with zipfile.ZipFile(zip_path, "w") as zf:
        zf.writestr("data.bin", b"\x00\x01")

    with pytest.raises(ValueError, match="holds no .txt expression list"):
        extract_archive(zip_path)


def test_extract_unsupported_format(tmp_path) -> None:
    """Ensure unsupported archive formats raise a ValueError."""
    file_path = tmp_path / "ops.rar"
    file_path.write_text("1+1")

    with pytest.raises(ValueError, match="Unsupported batch format"):
        read_expressions(file_path)


def test_unsupported_format_lists_supported_suffixes(tmp_path) -> None:
    """The error for an unknown format names every accepted suffix."""
    file_path = tmp_path / "ops.tar.gz"
    file_path.write_text("1+1")

    with pytest.raises(ValueError) as exc_info:
        read_expressions(file_path)
    for suffix in SUPPORTED_SUFFIXES:
        assert suffix in str(exc_info.value)


def test_tar_xz_without_txt(tmp_path) -> None:
    """A .tar.xz archive without a .txt member is rejected."""
    data = tmp_path / "data.bin"
    data.write_bytes(b"\x00\x01")

    tar_path = tmp_path / "ops.tar.xz"
    with tarfile.open(tar_path, "w:xz") as tf:
        tf.add(data, arcname="data.bin")

    with pytest.raises(ValueError, match="holds no .txt expression list"):
        extract_archive(tar_path)
