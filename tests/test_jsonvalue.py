import pytest

from ssrtools.jsonvalue import JsonType, JsonValue


def _sample():
    return JsonValue(
        JsonType.OBJECT,
        [
            ("name", JsonValue(JsonType.STRING, "server")),
            ("port", JsonValue(JsonType.INTEGER, 8388)),
            ("ratio", JsonValue(JsonType.DOUBLE, 2.75)),
            ("fast", JsonValue(JsonType.BOOLEAN, True)),
            ("none", JsonValue(JsonType.NULL)),
            (
                "list",
                JsonValue(
                    JsonType.ARRAY,
                    [JsonValue(JsonType.INTEGER, 1), JsonValue(JsonType.STRING, "x")],
                ),
            ),
        ],
    )


def test_type_numbers_follow_declaration_order():
    assert JsonValue(JsonType(0)).type is JsonType.NONE
    assert JsonValue(JsonType(7)).to_python() is None
    assert JsonValue(JsonType(3), 42).as_int() == 42
    assert JsonValue(JsonType(5), "abc").as_str() == "abc"
    assert JsonValue(JsonType(2)).to_python() == []


def test_object_lookup_by_name():
    doc = _sample()
    assert doc["name"].as_str() == "server"
    assert doc["port"].as_int() == 8388


def test_missing_member_gives_none_value():
    doc = _sample()
    missing = doc["absent"]
    assert missing.type is JsonType.NONE
    assert missing.as_int() == 0
    assert missing.as_str() == ""


def test_string_index_on_array_gives_none():
    doc = _sample()
    assert doc["list"]["name"].type is JsonType.NONE


def test_array_index_and_bounds():
    arr = _sample()["list"]
    assert arr[0].as_int() == 1
    assert arr[1].as_str() == "x"
    assert arr[2].type is JsonType.NONE
    assert arr[-1].type is JsonType.NONE


def test_int_index_on_object_gives_none():
    assert _sample()[0].type is JsonType.NONE


def test_len():
    doc = _sample()
    assert len(doc) == 6
    assert len(doc["list"]) == 2
    assert len(doc["name"]) == len("server")
    assert len(doc["port"]) == 0


def test_bool_only_true_for_true_boolean():
    doc = _sample()
    truth = [bool(value) for _, value in doc]
    assert truth == [False, False, False, True, False, False]
    values = [
        JsonValue(JsonType.BOOLEAN, False),
        JsonValue(JsonType.BOOLEAN, True),
        doc,
        doc["port"],
    ]
    assert [bool(v) for v in values] == [False, True, False, False]


def test_as_int_truncates_double():
    assert JsonValue(JsonType.DOUBLE, 2.75).as_int() == 2
    assert JsonValue(JsonType.DOUBLE, -2.75).as_int() == -2


def test_as_float():
    doc = _sample()
    assert doc["port"].as_float() == 8388.0
    assert doc["ratio"].as_float() == 2.75
    assert doc["name"].as_float() == 0.0


def test_as_str_of_non_string_is_empty():
    assert JsonValue(JsonType.INTEGER, 5).as_str() == ""


def test_to_python_round_trip():
    assert _sample().to_python() == {
        "name": "server",
        "port": 8388,
        "ratio": 2.75,
        "fast": True,
        "none": None,
        "list": [1, "x"],
    }


def test_duplicate_names_first_wins():
    doc = JsonValue(
        JsonType.OBJECT,
        [
            ("k", JsonValue(JsonType.INTEGER, 1)),
            ("k", JsonValue(JsonType.INTEGER, 2)),
        ],
    )
    assert doc["k"].as_int() == 1
    assert doc.to_python() == {"k": 1}
    assert len(doc) == 2


def test_iteration():
    doc = _sample()
    assert [name for name, _ in doc] == ["name", "port", "ratio", "fast", "none", "list"]
    assert [item.to_python() for item in doc["list"]] == [1, "x"]
    assert list(doc["port"]) == []


def test_defaults_for_scalars():
    assert JsonValue(JsonType.INTEGER).value == 0
    assert JsonValue(JsonType.STRING).value == ""
    assert JsonValue(JsonType.BOOLEAN).value is False
    assert JsonValue(JsonType.ARRAY).to_python() == []
    assert JsonValue().type is JsonType.NONE


def test_invalid_type_rejected():
    with pytest.raises(ValueError):
        JsonValue(99)