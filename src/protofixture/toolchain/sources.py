"""Proto source sets: schema roots and archive staging.

A source set is a named group of schema roots compiled together (``main``,
``test``, ...). Roots are either plain directories or archives whose
``.proto`` members are extracted into a staging directory first.
"""

from __future__ import annotations

import logging
import shutil
import tarfile
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from protofixture.errors import ProtoSourceError


LOGGER = logging.getLogger("protofixture.toolchain.sources")

PROTO_SUFFIX = ".proto"
_TAR_SUFFIXES = (".tar.gz", ".tgz", ".tar")
_ZIP_SUFFIXES = (".zip", ".jar")


def is_archive(path: Path) -> bool:
    return path.name.lower().endswith(_TAR_SUFFIXES + _ZIP_SUFFIXES)


def _archive_stem(path: Path) -> str:
    lowered = path.name.lower()
    for suffix in _TAR_SUFFIXES + _ZIP_SUFFIXES:
        if lowered.endswith(suffix):
            return path.name[: -len(suffix)]
    return path.stem


def discover_proto_files(root: Path) -> list[Path]:
    """Return the proto files under ``root`` as sorted paths relative to it."""
    return sorted(
        path.relative_to(root)
        for path in root.rglob(f"*{PROTO_SUFFIX}")
        if path.is_file()
    )


def stage_archive(archive: Path, staging_dir: Path) -> Path:
    """Extract the ``.proto`` members of ``archive`` into a fresh directory.

    Returns the directory to use as a schema root. Members with unsafe paths
    (absolute, or escaping the target) are rejected by the extraction filter.
    """
    archive = Path(archive)
    if not archive.is_file():
        raise ProtoSourceError(f"Proto archive not found: {archive}")
    target = staging_dir / _archive_stem(archive)
    if target.exists():
        shutil.rmtree(target)
    target.mkdir(parents=True)

    lowered = archive.name.lower()
    try:
        if lowered.endswith(_TAR_SUFFIXES):
            with tarfile.open(archive) as bundle:
                members = [
                    member
                    for member in bundle.getmembers()
                    if member.isfile() and member.name.endswith(PROTO_SUFFIX)
                ]
                bundle.extractall(target, members=members, filter="data")
        elif lowered.endswith(_ZIP_SUFFIXES):
            with zipfile.ZipFile(archive) as bundle:
                names = [name for name in bundle.namelist() if name.endswith(PROTO_SUFFIX)]
                bundle.extractall(target, members=names)
        else:
            raise ProtoSourceError(f"Unsupported archive type: {archive}")
    except (tarfile.TarError, zipfile.BadZipFile) as exc:
        raise ProtoSourceError(f"Cannot read proto archive {archive}: {exc}") from exc

    LOGGER.debug("Staged %s into %s", archive, target)
    return target


@dataclass(slots=True, frozen=True)
class SourceSet:
    """Schema roots compiled together, plus roots visible only as imports."""

    name: str
    roots: tuple[Path, ...]
    import_roots: tuple[Path, ...] = ()

    def proto_files(self) -> list[tuple[Path, Path]]:
        """Return ``(root, relative_path)`` for every proto this set compiles.

        Order is root order, then sorted relative path. Two roots supplying
        the same relative path would shadow each other in protoc, so that is
        rejected here.
        """
        owners: dict[Path, Path] = {}
        files: list[tuple[Path, Path]] = []
        for root in self.roots:
            for relative in discover_proto_files(root):
                if relative in owners:
                    raise ProtoSourceError(
                        f"Source set '{self.name}': {relative.as_posix()} is provided by both "
                        f"{owners[relative]} and {root}"
                    )
                owners[relative] = root
                files.append((root, relative))
        if not files:
            raise ProtoSourceError(f"Source set '{self.name}' has no {PROTO_SUFFIX} files")
        return files


def resolve_source_set(
    name: str,
    base_dir: Path | None,
    extra_sources: Iterable[Path] = (),
    *,
    staging_dir: Path,
    import_roots: Iterable[Path] = (),
) -> SourceSet:
    """Build a :class:`SourceSet` from its conventional directory and extras.

    ``base_dir`` may be missing when extras are given (an archive-only set).
    Directories are used in place; archives are staged under ``staging_dir``.
    """
    extras = [Path(source) for source in extra_sources]
    roots: list[Path] = []
    if base_dir is not None and Path(base_dir).is_dir():
        roots.append(Path(base_dir))
    elif not extras:
        raise ProtoSourceError(f"Source directory not found for '{name}': {base_dir}")

    for source in extras:
        if source.is_dir():
            roots.append(source)
        elif is_archive(source):
            roots.append(stage_archive(source, staging_dir))
        else:
            raise ProtoSourceError(
                f"Source for '{name}' is neither a directory nor a supported archive: {source}"
            )

    return SourceSet(
        name=name,
        roots=tuple(root.resolve() for root in roots),
        import_roots=tuple(Path(root).resolve() for root in import_roots),
    )


__all__ = [
    "PROTO_SUFFIX",
    "SourceSet",
    "discover_proto_files",
    "is_archive",
    "resolve_source_set",
    "stage_archive",
]
