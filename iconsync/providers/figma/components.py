import hashlib
import json
import re
from typing import Any, List

from slugify import slugify

from iconsync.core.errors import RemoteError
from iconsync.sync.models import RemoteItem

# Keys of a vector node that change how the exported icon looks.
VECTOR_KEYS = (
    "fillGeometry",
    "fills",
    "strokes",
    "strokeWeight",
    "strokeAlign",
    "strokeGeometry",
    "strokeCap",
    "constraints",
    "effects",
)

# Everything else becomes a dash; "/" stays to map onto subfolders.
_DISALLOWED_NAME_CHARS = re.compile(r"[^-a-z0-9_/]+")
_WHITESPACE = re.compile(r"\s")


def md5(text: str) -> str:
    return hashlib.md5(text.encode("utf-8")).hexdigest()


def icon_name(raw: str) -> str:
    """Lowercase, transliterated, filesystem-safe name keeping ``/``."""
    slug = slugify(_WHITESPACE.sub("-", raw.lower()), regex_pattern=_DISALLOWED_NAME_CHARS)
    parts = [part.strip("-") for part in slug.split("/")]
    return "/".join(part for part in parts if part)


def _visible(node: dict) -> bool:
    return node.get("visible", True) is not False


def _vector_data(node: dict) -> list:
    data: list = []
    for child in node.get("children") or []:
        if not isinstance(child, dict) or not _visible(child):
            continue
        if "fillGeometry" in child or "strokes" in child:
            data.append([child.get(key) for key in VECTOR_KEYS])
        if "children" in child:
            data.extend(_vector_data(child))
    return data


def content_hash(node: dict) -> str:
    """
    Digest over the geometry and paint of everything drawn inside ``node``.

    Serialized compactly so the digest matches inventories written by the
    Node.js edition of this tool.
    """
    return md5(json.dumps(_vector_data(node), separators=(",", ":"), ensure_ascii=False))


def find_components(nodes: List[dict]) -> List[RemoteItem]:
    """Flatten a Figma frame into icons.

    ``COMPONENT`` nodes are icons. ``COMPONENT_SET`` children are icons named
    ``"<set>__<variant>"``. Other containers are walked; hidden nodes skipped.
    """
    out: List[RemoteItem] = []
    for node in nodes:
        if not isinstance(node, dict) or not _visible(node):
            continue
        node_type = node.get("type")

        if node_type == "COMPONENT":
            out.append(_component(node, icon_name(str(node.get("name") or ""))))
        elif node_type == "COMPONENT_SET":
            set_name = icon_name(str(node.get("name") or ""))
            for child in node.get("children") or []:
                if not isinstance(child, dict) or not _visible(child) or child.get("type") != "COMPONENT":
                    continue
                variant = icon_name(str(child.get("name") or "").replace("=", "_"))
                out.append(_component(child, f"{set_name}__{variant}"))
        elif node.get("children"):
            out.extend(find_components(node["children"]))
    return out


def _component(node: dict[str, Any], name: str) -> RemoteItem:
    node_id = node.get("id")
    if not node_id:
        raise RemoteError("component_without_id", details={"name": node.get("name")})
    # Names made only of symbols slugify to nothing.
    name = name or icon_name(str(node_id))
    return RemoteItem(identifier=str(node_id), name=name, content_hash=content_hash(node))
