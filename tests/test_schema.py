import json

from nebo.schema import SchemaBuilder, new_schema


def test_schema_builder_basic():
    schema = (
        new_schema("add", "subtract")
        .number("a", "First operand", True)
        .number("b", "Second operand", True)
        .build()
    )
    parsed = json.loads(schema)

    assert parsed["type"] == "object"
    props = parsed["properties"]
    assert "action" in props
    assert "a" in props
    assert "b" in props
    assert props["action"]["enum"] == ["add", "subtract"]
    assert {"action", "a", "b"} <= set(parsed["required"])


def test_schema_builder_all_types():
    schema = (
        new_schema("run")
        .string("name", "Resource name", True)
        .number("count", "How many", False)
        .bool("verbose", "Show details", False)
        .enum("format", "Output format", True, "json", "text")
        .object("config", "Configuration", False)
        .build()
    )
    parsed = json.loads(schema)
    props = parsed["properties"]

    expected = {
        "name": "string",
        "count": "number",
        "verbose": "boolean",
        "format": "string",
        "config": "object",
    }
    for name, prop_type in expected.items():
        assert props[name]["type"] == prop_type

    assert len(props["format"]["enum"]) == 2

    required = set(parsed["required"])
    assert {"action", "name", "format"} <= required
    assert not required & {"count", "verbose", "config"}


def test_schema_builder_empty():
    parsed = json.loads(new_schema("list").build())
    assert len(parsed["properties"]) == 1


def test_action_description_lists_actions():
    parsed = json.loads(new_schema("add", "subtract").build())
    assert parsed["properties"]["action"]["description"] == "Action to perform: add, subtract"


def test_required_order_starts_with_action():
    parsed = json.loads(
        new_schema("x").string("q", "d", True).number("n", "d", True).build()
    )
    assert parsed["required"] == ["action", "q", "n"]


def test_exact_bytes_sorted_and_compact():
    assert new_schema("list").build() == (
        b'{"properties":{"action":{"description":"Action to perform: list",'
        b'"enum":["list"],"type":"string"}},"required":["action"],"type":"object"}'
    )


def test_no_actions_gives_null_enum():
    parsed = json.loads(SchemaBuilder().build())
    assert parsed["properties"]["action"]["enum"] is None
    assert parsed["properties"]["action"]["description"] == "Action to perform: "


def test_builder_methods_chain_same_instance():
    builder = new_schema("a")
    assert builder.string("s", "d", False) is builder
    assert builder.enum("e", "d", False, "v") is builder


def test_html_characters_escaped():
    raw = new_schema("a").string("s", "<b> & more", False).build()
    assert b"<" not in raw and b"&" not in raw
    assert json.loads(raw)["properties"]["s"]["description"] == "<b> & more"