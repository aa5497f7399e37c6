# sewpager/core/io.py
"""
Load pattern documents from SVG.
Each top-level <g> is one pattern group; paths with class "seam" are its
outlines; every other child is carried through as opaque serialized XML.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from pathlib import Path

from sewpager.core.config import ALLOWANCE_CLASS, OUTLINE_CLASS
from sewpager.core.types import OutlinePath, PatternDocument, PieceGroup

logger = logging.getLogger(__name__)

SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"

ET.register_namespace("", SVG_NS)
ET.register_namespace("xlink", XLINK_NS)


def _resolve_path(path: str | Path, repo_root: Path | None) -> Path:
    """Resolve path; if relative, against repo_root (or cwd if repo_root is None)."""
    p = Path(path)
    if not p.is_absolute() and repo_root is not None:
        p = repo_root / p
    return p.resolve()


def _local(tag: str) -> str:
    """Tag name without namespace."""
    return tag.rsplit("}", 1)[-1] if isinstance(tag, str) else ""


def _classes(el: ET.Element) -> list[str]:
    return (el.get("class") or "").split()


def is_outline(el: ET.Element) -> bool:
    """A sewing-line path: <path class="seam ..."> that is not a generated allowance."""
    classes = _classes(el)
    return _local(el.tag) == "path" and OUTLINE_CLASS in classes and ALLOWANCE_CLASS not in classes


def _outline_path(el: ET.Element) -> OutlinePath:
    """Path data plus every other attribute, in document order."""
    attributes = tuple((k, v) for k, v in el.attrib.items() if k != "d")
    return OutlinePath(d=el.get("d", ""), attributes=attributes)


def _group_from_element(el: ET.Element, index: int) -> PieceGroup:
    outlines: list[OutlinePath] = []
    auxiliary: list[str] = []
    for child in el:
        if is_outline(child):
            if child.get("d"):
                outlines.append(_outline_path(child))
            continue
        # Drop tail whitespace so serialized payloads stay compact.
        child.tail = None
        auxiliary.append(ET.tostring(child, encoding="unicode"))
    group_id = el.get("id") or f"piece-{index + 1}"
    return PieceGroup(
        id=group_id,
        outlines=tuple(outlines),
        transform=el.get("transform") or "",
        auxiliary=tuple(auxiliary),
    )


def parse_svg_document(svg_text: str, source: str = "") -> PatternDocument:
    """
    Parse SVG text into a PatternDocument.
    Raises ValueError if the text is not XML or the root is not <svg>.
    """
    try:
        root = ET.fromstring(svg_text)
    except ET.ParseError as e:
        raise ValueError(f"Failed to parse SVG: {e}") from e
    if _local(root.tag) != "svg":
        raise ValueError("No valid SVG element found")

    groups: list[PieceGroup] = []
    defs: str | None = None
    group_index = 0
    for child in root:
        name = _local(child.tag)
        if name == "defs" and defs is None:
            child.tail = None
            defs = ET.tostring(child, encoding="unicode")
        elif name == "g":
            group = _group_from_element(child, group_index)
            group_index += 1
            if not group.outlines:
                logger.debug("Group %s has no outline; skipped", group.id)
                continue
            groups.append(group)
    return PatternDocument(groups=groups, source=source, defs=defs)


def load_document(path: str | Path, repo_root: Path | None = None) -> PatternDocument:
    """
    Read and parse an SVG pattern document.
    Raises FileNotFoundError if path is missing, ValueError if it cannot be parsed.
    """
    resolved = _resolve_path(path, repo_root)
    if not resolved.exists():
        raise FileNotFoundError(f"Pattern file not found: {resolved}")
    text = resolved.read_text(encoding="utf-8")
    return parse_svg_document(text, source=str(path))
