"""Local persistence of orb sources and result lists.

Orb sources live in one directory, one file per versioned orb, named after
the URL-quoted ref (``circleci%2Fnode%405.0.2.yml``). Result lists are plain
text with one ref per line.
"""
from __future__ import annotations

import json
import logging
import os
import re
import urllib.parse
from typing import Dict, Iterable, List

from constants import Constants
from resolver.models import VersionedOrb

logger = logging.getLogger(__name__)

_SRC_SUFFIX_RE = re.compile(re.escape(Constants.ORB_SRC_SUFFIX) + "$", re.IGNORECASE)


def orb_src_file_name(ref: str) -> str:
    """File name holding the source of one orb version."""
    return urllib.parse.quote_plus(ref) + Constants.ORB_SRC_SUFFIX


def ref_from_file_name(file_name: str) -> str:
    """Inverse of ``orb_src_file_name``."""
    return urllib.parse.unquote_plus(_SRC_SUFFIX_RE.sub("", file_name))


def load_orb(ref: str, path: str) -> VersionedOrb:
    """Read one orb source file.

    Raises:
        OSError: If the file cannot be read.
    """
    logger.debug("loading %r", ref)
    with open(path, encoding="utf-8") as file:
        return VersionedOrb.from_ref(ref, file.read())


def load_orbs_in_dir(src_dir: str) -> List[VersionedOrb]:
    """Load every orb source file found directly in a directory.

    Files are visited in name order so runs are reproducible.
    """
    orbs = []
    for entry in sorted(os.scandir(src_dir), key=lambda e: e.name):
        if entry.is_dir():
            continue
        orbs.append(load_orb(ref_from_file_name(entry.name), entry.path))
    return orbs


def read_ref_list(path: str) -> List[str]:
    """Read a list of refs, one per line, ignoring blank lines."""
    with open(path, encoding="utf-8") as file:
        return [line.strip() for line in file if line.strip()]


def load_listed_orbs(list_path: str, src_dir: str) -> List[VersionedOrb]:
    """Load the orbs named in a list file, preserving the list order."""
    return [
        load_orb(ref, os.path.join(src_dir, orb_src_file_name(ref)))
        for ref in read_ref_list(list_path)
    ]


def write_ref_list(path: str, refs: Iterable[str]) -> None:
    """Write refs one per line."""
    with open(path, "w", encoding="utf-8") as file:
        file.write("\n".join(refs))


def dump_orb_sources(orbs: Iterable[VersionedOrb], src_dir: str) -> None:
    """Write the source of each orb into ``src_dir``, creating it if needed."""
    os.makedirs(src_dir, exist_ok=True)
    for orb in orbs:
        with open(os.path.join(src_dir, orb_src_file_name(orb.ref)), "w", encoding="utf-8") as file:
            file.write(orb.source)


def format_unresolved_map(unresolved: Dict[str, List[str]]) -> str:
    """Render the unresolved map as ``"ref" => [ "dep" "dep" ]`` lines."""
    lines = []
    for ref in sorted(unresolved):
        quoted = " ".join(json.dumps(dep, ensure_ascii=False) for dep in unresolved[ref])
        lines.append(f"{json.dumps(ref, ensure_ascii=False)} => [ {quoted} ]")
    return "\n".join(lines)


def write_unresolved_map(path: str, unresolved: Dict[str, List[str]]) -> None:
    with open(path, "w", encoding="utf-8") as file:
        file.write(format_unresolved_map(unresolved))
