import json

import pytest

from ssrtools.jsonparser import JsonParseError, JsonSettings, parse, parse_ex
from ssrtools.jsonvalue import JsonType


def test_parses_nested_document():
    doc = '{"a": 1, "b": [true, false, null], "c": "x"}'
    assert parse(doc).to_python() == {"a": 1, "b": [True, False, None], "c": "x"}


@pytest.mark.parametrize(
    "obj",
    [
        {"name": "server", "port": 8388, "list": [1, 2, [3, {}]], "ok": True},
        [[], {}, "", 0, -17, None, False],
        "plain string",
        {"nested": {"deep": {"deeper": ["x", "y"]}}},
    ],
)
def test_round_trip_with_stdlib_encoder(obj):
    assert parse(json.dumps(obj)).to_python() == obj


def test_bytes_and_text_agree():
    doc = '{"k": [1, "v"]}'
    assert parse(doc.encode()).to_python() == parse(doc).to_python()


def test_skips_utf8_bom():
    assert parse(b"\xef\xbb\xbf[1]").to_python() == [1]


def test_integer_and_double_types():
    assert parse("42").type is JsonType.INTEGER
    assert parse("42").as_int() == 42
    value = parse("1e3")
    assert value.type is JsonType.DOUBLE
    assert value.as_float() == pytest.approx(1000.0)


def test_negative_and_fraction():
    assert parse("-2").to_python() == -2
    assert parse("1.5").to_python() == pytest.approx(1.5)
    assert parse("-1.5").to_python() == pytest.approx(-1.5)


def test_escapes_are_decoded():
    value = parse(r'"\u00e9\n\t\"\\\/\u20ac"')
    assert value.as_str() == "\u00e9\n\t\"\\/\u20ac"


def test_trailing_commas_are_accepted():
    assert parse("[1,]").to_python() == [1]
    assert parse('{"a":1,}').to_python() == {"a": 1}


def test_nul_byte_ends_document():
    assert parse(b"[1]\x00garbage").to_python() == [1]


@pytest.mark.parametrize(
    "doc, fragment",
    [
        ("01", "Unexpected `0` before `1`"),
        ("1.", "Expected digit after `.`"),
        ("1e", "Expected digit after `e`"),
        ("-.5", "Expected digit before `.`"),
        ("tru", "Unknown value"),
        ("nul", "Unknown value"),
        ('"abc', "Unexpected EOF in string"),
        ("[1 2]", "Expected , before 2"),
        ('{"a" 1}', "Expected : before 1"),
        ("[1] x", "Trailing garbage: `x`"),
        ('"\\u12G4"', "Invalid character value `u`"),
        ("]", "Unexpected ]"),
        ("{,}", "Unexpected `,` in object"),
        ("[1]/", "Unexpected / when seeking value"),
    ],
)
def test_errors(doc, fragment):
    with pytest.raises(JsonParseError, match=fragment):
        parse(doc)


def test_empty_input_is_an_error():
    with pytest.raises(JsonParseError):
        parse("")


def test_error_reports_line():
    with pytest.raises(JsonParseError) as info:
        parse("[\n1 2]")
    assert info.value.line == 2
    assert str(info.value).startswith("2:")


def test_comments_when_enabled():
    settings = JsonSettings(enable_comments=True)
    doc = "[1, // first\n 2 /* second */]"
    assert parse_ex(settings, doc).to_python() == [1, 2]


def test_comments_rejected_by_default():
    with pytest.raises(JsonParseError, match="when seeking value"):
        parse("[1, // first\n 2]")


def test_comment_inside_number_not_allowed():
    with pytest.raises(JsonParseError, match="Comment not allowed here"):
        parse("1/", JsonSettings(enable_comments=True))


def test_unterminated_block_comment():
    with pytest.raises(JsonParseError, match="Unexpected EOF in block comment"):
        parse("[1 /* open", JsonSettings(enable_comments=True))


def test_bad_comment_opening():
    with pytest.raises(JsonParseError, match="in comment opening sequence"):
        parse("[/x]", JsonSettings(enable_comments=True))


def test_memory_limit():
    with pytest.raises(JsonParseError, match="Memory allocation failure"):
        parse('{"a": [1, 2, 3]}', JsonSettings(max_memory=1))
    roomy = JsonSettings(max_memory=1 << 20)
    assert parse('{"a": [1, 2, 3]}', roomy).to_python() == {"a": [1, 2, 3]}