"""Line scanner that partitions text into code, SQL, list and prose units."""
import re
from typing import NamedTuple

FENCE = re.compile(r"^\s*(```|~~~)")
SQL_START = re.compile(
    r"^\s*(SELECT|INSERT|UPDATE|DELETE|CREATE|ALTER|DROP|WITH|MERGE|TRUNCATE|GRANT|REVOKE)\b",
    re.I,
)
LIST_ITEM = re.compile(r"^\s*([-*+•]|\d+[.)])\s+\S")


class SemanticUnit(NamedTuple):
    kind: str  # prose | code | sql | list
    text: str


def split_semantic_units(text: str) -> list[SemanticUnit]:
    """Scan line by line. Code fences, SQL statements and list blocks become single units."""
    lines = text.split("\n")
    units: list[SemanticUnit] = []
    prose: list[str] = []

    def flush_prose() -> None:
        if prose:
            para = "\n".join(prose).strip()
            if para:
                units.append(SemanticUnit("prose", para))
            prose.clear()

    i = 0
    n = len(lines)
    while i < n:
        line = lines[i]
        fence = FENCE.match(line)
        if fence:
            flush_prose()
            marker = fence.group(1)
            block = [line]
            i += 1
            while i < n:
                block.append(lines[i])
                i += 1
                if lines[i - 1].strip().startswith(marker):
                    break
            units.append(SemanticUnit("code", "\n".join(block).strip()))
            continue
        if SQL_START.match(line):
            flush_prose()
            block = []
            while i < n and lines[i].strip():
                block.append(lines[i])
                i += 1
                if block[-1].rstrip().endswith(";"):
                    break
            units.append(SemanticUnit("sql", "\n".join(block).strip()))
            continue
        if LIST_ITEM.match(line):
            flush_prose()
            block = []
            while i < n:
                current = lines[i]
                if LIST_ITEM.match(current) or (block and current[:1] in (" ", "\t") and current.strip()):
                    block.append(current)
                elif not current.strip():
                    # A blank line only continues the list if another item follows
                    j = i + 1
                    while j < n and not lines[j].strip():
                        j += 1
                    if j < n and LIST_ITEM.match(lines[j]):
                        block.extend(lines[i:j])
                        i = j
                        continue
                    break
                else:
                    break
                i += 1
            units.append(SemanticUnit("list", "\n".join(block).strip()))
            continue
        if not line.strip():
            flush_prose()
        else:
            prose.append(line)
        i += 1
    flush_prose()
    return units
