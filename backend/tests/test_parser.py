from pathlib import Path

import pytest

from backend.app.errors import LessonParseError
from backend.app.parser import (
    JsonSource,
    TextSource,
    extract_fields,
    parse_header,
    parse_source,
    render_markdown,
)

LESSON_MD = Path("lessons/basics/07-scope.md")


def text_lesson(header_lines, body):
    return "\n".join(["---", *header_lines, "---", body])


def test_text_source_is_tagged_variant():
    source = parse_source(LESSON_MD, text_lesson(["id: 7", "title: Scope"], "Hello"))
    assert isinstance(source, TextSource)
    assert source.kind == "text"
    assert source.header == {"id": "7", "title": "Scope"}
    assert source.body == "Hello"


def test_json_source_is_tagged_variant():
    source = parse_source(Path("7.json"), '{"id": 7, "title": "Scope"}')
    assert isinstance(source, JsonSource)
    assert source.kind == "json"
    assert source.data["id"] == 7


def test_first_and_last_code_blocks_become_starter_and_solution():
    body = "```js\nconst x=1\n```\n```js\nconst x=2\n```"
    fields = extract_fields(parse_source(LESSON_MD, text_lesson(["id: 7", "title: T"], body)))
    assert fields.values["starterCode"] == "const x=1"
    assert fields.values["solution"] == "const x=2"
    assert [block.language for block in fields.code_blocks] == ["js", "js"]


def test_middle_blocks_are_ignored_for_starter_and_solution():
    body = "```js\na()\n```\ntext\n```js\nb()\n```\nmore\n```js\nc()\n```"
    fields = extract_fields(parse_source(LESSON_MD, text_lesson(["id: 7", "title: T"], body)))
    assert fields.values["starterCode"] == "a()"
    assert fields.values["solution"] == "c()"
    assert len(fields.code_blocks) == 3


def test_single_code_block_is_both_starter_and_solution():
    body = "Try it:\n```js\nprint(1)\n```"
    fields = extract_fields(parse_source(LESSON_MD, text_lesson(["id: 7", "title: T"], body)))
    assert fields.values["starterCode"] == "print(1)"
    assert fields.values["solution"] == "print(1)"


def test_no_code_blocks_gives_empty_code():
    fields = extract_fields(parse_source(LESSON_MD, text_lesson(["id: 7", "title: T"], "Prose only")))
    assert fields.values["starterCode"] == ""
    assert fields.values["solution"] == ""


def test_header_id_is_parsed_as_integer():
    fields = extract_fields(parse_source(LESSON_MD, text_lesson(['id: "12"', "title: T"], "")))
    assert fields.values["id"] == 12


def test_non_numeric_header_id_is_rejected():
    source = parse_source(LESSON_MD, text_lesson(["id: seven", "title: T"], ""))
    with pytest.raises(LessonParseError):
        extract_fields(source)


def test_missing_header_delimiter_is_rejected():
    with pytest.raises(LessonParseError) as exc:
        parse_source(LESSON_MD, "id: 7\ntitle: T\n\nBody")
    assert exc.value.reason == "missing header delimiter"


def test_unterminated_header_is_rejected():
    with pytest.raises(LessonParseError):
        parse_source(LESSON_MD, "---\nid: 7\ntitle: T\n")


def test_header_splits_on_first_colon_and_trims_quotes():
    header = parse_header(
        [
            'title: "Loops: part 2"',
            "track: 'basics'",
            "# a comment",
            "no colon here",
            "",
            "difficulty:advanced",
        ]
    )
    assert header == {"title": "Loops: part 2", "track": "basics", "difficulty": "advanced"}


def test_invalid_json_is_rejected():
    with pytest.raises(LessonParseError):
        parse_source(Path("3.json"), '{"id": 3,')


def test_json_must_be_an_object():
    with pytest.raises(LessonParseError):
        parse_source(Path("3.json"), "[1, 2, 3]")


def test_unsupported_suffix_is_rejected():
    with pytest.raises(LessonParseError):
        parse_source(Path("notes.yaml"), "id: 1")


def test_render_headers_and_inline_markup():
    html = render_markdown("# Title\nSome **bold** and *it* and `x`")
    assert html == "<h1>Title</h1>\nSome <strong>bold</strong> and <em>it</em> and <code>x</code>"


def test_render_levels_two_and_three():
    html = render_markdown("## Two\n### Three")
    assert html == "<h2>Two</h2>\n<h3>Three</h3>"


def test_render_fenced_block_is_protected_from_inline_passes():
    html = render_markdown("Intro\n```js\nif (a < b) { x = a * b * c }\n```\nafter")
    assert html == (
        'Intro<br>\n<pre><code class="language-js">if (a &lt; b) { x = a * b * c }</code></pre>\nafter'
    )


def test_render_escapes_raw_html_by_default():
    html = render_markdown("<script>alert(1)</script>")
    assert "<script>" not in html
    assert "&lt;script&gt;" in html


def test_render_can_pass_raw_html_through():
    html = render_markdown("<b>kept</b>", allow_raw_html=True)
    assert html == "<b>kept</b>"
