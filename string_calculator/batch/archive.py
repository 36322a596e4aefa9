"""Load the expression lines of a batch from a text file or a compressed archive."""
from pathlib import Path
import tarfile
import tempfile
from typing import Callable, Dict, List
import zipfile

import py7zr
from pydantic import FilePath

from string_calculator.common.logger import logger


SUPPORTED_SUFFIXES: List[str] = [".txt", ".zip", ".tar.xz", ".7z"]


def _batch_suffix(path: Path) -> str:
    """Return the suffix that selects how ``path`` is read, e.g. ``.tar.xz``."""
    if path.suffixes[-2:] == [".tar", ".xz"]:
        return ".tar.xz"
    return path.suffix


def _unpack_zip(archive_path: Path, target: Path) -> str:
    with zipfile.ZipFile(archive_path, "r") as zf:
        names = [name for name in zf.namelist() if name.endswith(".txt")]
        if not names:
            raise ValueError(f"📄❌ {archive_path.name} holds no .txt expression list")
        zf.extract(names[0], path=target)
        return names[0]


def _unpack_tar_xz(archive_path: Path, target: Path) -> str:
    with tarfile.open(archive_path, "r:xz") as tf:
        members = [m for m in tf.getmembers() if m.isfile() and m.name.endswith(".txt")]
        if not members:
            raise ValueError(f"📄❌ {archive_path.name} holds no .txt expression list")
        tf.extract(members[0], path=target, filter="data")
        return members[0].name


def _unpack_7z(archive_path: Path, target: Path) -> str:
    with py7zr.SevenZipFile(archive_path, mode="r") as archive:
        names = [name for name in archive.getnames() if name.endswith(".txt")]
        if not names:
            raise ValueError(f"📄❌ {archive_path.name} holds no .txt expression list")
        archive.extract(targets=[names[0]], path=target)
        return names[0]


# Archive suffix to a function unpacking the first .txt member into a directory
UNPACKERS: Dict[str, Callable[[Path, Path], str]] = {
    ".zip": _unpack_zip,
    ".tar.xz": _unpack_tar_xz,
    ".7z": _unpack_7z,
}


def read_expressions(input_file: FilePath) -> str:
    """
    Return the text of a batch, one expression per line.

    :param FilePath input_file: Path to a ``.txt`` file or an archive listed in ``SUPPORTED_SUFFIXES``

    :return: Raw batch text
    :rtype: str
    :raises ValueError: If the format is unsupported or an archive holds no .txt file
    """
    if _batch_suffix(input_file) == ".txt":
        return input_file.read_text(encoding="utf-8")
    return extract_archive(input_file)


def extract_archive(archive_path: FilePath) -> str:
    """
    Unpack the expression list shipped inside an archive.

    The first ``.txt`` member is the batch; other members are ignored. It is
    unpacked into a scratch directory that is removed before returning.

    :param FilePath archive_path: Archive whose suffix is one of ``UNPACKERS``

    :return: Text of the first .txt member
    :rtype: str
    :raises ValueError: If the format is unsupported or the archive holds no .txt file
    """
    suffix = _batch_suffix(archive_path)
    unpack = UNPACKERS.get(suffix)
    if unpack is None:
        raise ValueError(
            f"📄❌ Unsupported batch format {suffix or archive_path.name!r}, "
            f"expected one of {', '.join(SUPPORTED_SUFFIXES)}"
        )

    with tempfile.TemporaryDirectory() as tmpdir:
        scratch = Path(tmpdir)
        member = unpack(archive_path, scratch)
        logger.info(f"📦 Extracted {member} from {archive_path.name}")
        return (scratch / member).read_text(encoding="utf-8")
