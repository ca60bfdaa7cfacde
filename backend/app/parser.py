"""
Lesson file parsing.

Two on-disk shapes are supported and modelled as a tagged variant:

- ``JsonSource``: a ``.json`` file holding one lesson object.
- ``TextSource``: a ``.md``/``.markdown``/``.txt`` file that opens with a
  ``---`` delimited ``key: value`` header, followed by free-form prose with
  fenced code blocks. The first block is the starter code, the last block the
  solution.

Both are reduced to a plain dict by ``extract_fields`` and validated by
``schemas.Lesson`` in the content store.
"""
from __future__ import annotations

import html
import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Union

from .errors import LessonParseError

HEADER_MARKER = "---"
JSON_SUFFIXES = {".json"}
TEXT_SUFFIXES = {".md", ".markdown", ".txt"}
SUPPORTED_SUFFIXES = JSON_SUFFIXES | TEXT_SUFFIXES

CODE_BLOCK = re.compile(r"```([\w+#.-]*)[^\n]*\n(.*?)```", re.DOTALL)
H3 = re.compile(r"^### (.+)$", re.MULTILINE)
H2 = re.compile(r"^## (.+)$", re.MULTILINE)
H1 = re.compile(r"^# (.+)$", re.MULTILINE)
BOLD = re.compile(r"\*\*(.+?)\*\*")
ITALIC = re.compile(r"\*([^*\n]+)\*")
INLINE_CODE = re.compile(r"`([^`\n]+)`")
LINE_BREAK = re.compile(r"(?<!</h1>)(?<!</h2>)(?<!</h3>)(?<!\x00)\n")
PLACEHOLDER = re.compile(r"\x00(\d+)\x00")
INTEGER_ID = re.compile(r"[+-]?\d+")


@dataclass(frozen=True)
class JsonSource:
    path: Path
    data: dict
    kind: str = "json"


@dataclass(frozen=True)
class TextSource:
    path: Path
    header: Dict[str, str]
    body: str
    kind: str = "text"


LessonSource = Union[JsonSource, TextSource]


@dataclass
class CodeBlock:
    language: str
    code: str


@dataclass
class LessonFields:
    """Raw field values pulled out of a source, before schema validation."""

    values: dict = field(default_factory=dict)
    code_blocks: List[CodeBlock] = field(default_factory=list)


def is_lesson_file(path: Path) -> bool:
    return path.suffix.lower() in SUPPORTED_SUFFIXES and not path.name.startswith(".")


def parse_header(lines: List[str]) -> Dict[str, str]:
    header: Dict[str, str] = {}
    for line in lines:
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or ":" not in stripped:
            continue
        key, value = stripped.split(":", 1)
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in {'"', "'"}:
            value = value[1:-1]
        header[key.strip()] = value
    return header


def parse_text(path: Path, text: str) -> TextSource:
    lines = text.lstrip("\ufeff").splitlines()
    start = next((i for i, line in enumerate(lines) if line.strip()), None)
    if start is None or lines[start].strip() != HEADER_MARKER:
        raise LessonParseError(path, "missing header delimiter")
    for end in range(start + 1, len(lines)):
        if lines[end].strip() == HEADER_MARKER:
            break
    else:
        raise LessonParseError(path, "unterminated header block")
    header = parse_header(lines[start + 1 : end])
    body = "\n".join(lines[end + 1 :]).strip()
    return TextSource(path=path, header=header, body=body)


def parse_json(path: Path, text: str) -> JsonSource:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise LessonParseError(path, f"invalid JSON ({exc.msg} at line {exc.lineno})") from exc
    if not isinstance(data, dict):
        raise LessonParseError(path, "JSON lesson must be an object")
    return JsonSource(path=path, data=data)


def parse_source(path: Path, text: str) -> LessonSource:
    suffix = path.suffix.lower()
    if suffix in JSON_SUFFIXES:
        return parse_json(path, text)
    if suffix in TEXT_SUFFIXES:
        return parse_text(path, text)
    raise LessonParseError(path, f"unsupported file type {suffix or '(none)'}")


def read_source(path: Path) -> LessonSource:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise LessonParseError(path, f"unreadable ({exc})") from exc
    return parse_source(path, text)


def extract_code_blocks(body: str) -> List[CodeBlock]:
    return [
        CodeBlock(language=match.group(1), code=match.group(2).strip("\n"))
        for match in CODE_BLOCK.finditer(body)
    ]


def extract_fields(source: LessonSource) -> LessonFields:
    if isinstance(source, JsonSource):
        return LessonFields(values=dict(source.data))

    values: dict = dict(source.header)
    raw_id = values.get("id", "").strip()
    if not INTEGER_ID.fullmatch(raw_id):
        raise LessonParseError(source.path, f"header id {raw_id!r} is not numeric")
    values["id"] = int(raw_id)

    blocks = extract_code_blocks(source.body)
    starter = blocks[0].code if blocks else ""
    solution = blocks[-1].code if blocks else ""
    values["body"] = source.body
    values["starterCode"] = starter
    values["solution"] = solution
    return LessonFields(values=values, code_blocks=blocks)


def candidate_id(fields: LessonFields):
    """The lesson id a file claims, or None when it is not an integer."""
    value = fields.values.get("id")
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def render_markdown(text: str, allow_raw_html: bool = False) -> str:
    """Render the small markdown subset used in lesson bodies.

    Fenced code blocks are rendered first and held back as placeholders so the
    inline passes cannot touch their contents. Unless ``allow_raw_html`` is
    set, the remaining prose is HTML-escaped before any tags are added.
    """
    blocks: List[str] = []

    def stash(match: re.Match) -> str:
        language = match.group(1)
        code = html.escape(match.group(2).strip("\n"), quote=False)
        css = f' class="language-{html.escape(language)}"' if language else ""
        blocks.append(f"<pre><code{css}>{code}</code></pre>")
        return f"\x00{len(blocks) - 1}\x00"

    out = CODE_BLOCK.sub(stash, text.replace("\x00", "").replace("\r\n", "\n"))
    if not allow_raw_html:
        out = html.escape(out, quote=False)
    out = H3.sub(r"<h3>\1</h3>", out)
    out = H2.sub(r"<h2>\1</h2>", out)
    out = H1.sub(r"<h1>\1</h1>", out)
    out = BOLD.sub(r"<strong>\1</strong>", out)
    out = ITALIC.sub(r"<em>\1</em>", out)
    out = INLINE_CODE.sub(r"<code>\1</code>", out)
    out = LINE_BREAK.sub("<br>\n", out)
    return PLACEHOLDER.sub(lambda m: blocks[int(m.group(1))], out)
