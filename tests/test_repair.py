"""Tests for pi.structured.repair."""

import json

import pytest

from pi.structured.repair import parse, repair, try_parse


class TestStrings:
    def test_unclosed_string_gets_quote_and_brace(self) -> None:
        assert repair('{"name": "Alice') == '{"name": "Alice"}'

    def test_lone_trailing_backslash_is_removed(self) -> None:
        assert repair('{"text": "hello\\') == '{"text": "hello"}'

    @pytest.mark.parametrize("tail", ["\\u", "\\u0", "\\u00", "\\u004"])
    def test_partial_unicode_escape_is_removed(self, tail: str) -> None:
        assert repair('{"text": "' + tail) == '{"text": ""}'

    def test_partial_unicode_escape_keeps_preceding_text(self) -> None:
        repaired = repair('{"city":"New Yor\\u00')
        assert repaired == '{"city":"New Yor"}'
        assert json.loads(repaired) == {"city": "New Yor"}

    def test_complete_unicode_escape_is_preserved(self) -> None:
        assert repair('{"symbol": "\\u0041') == '{"symbol": "\\u0041"}'
        assert repair('{"symbol": "\\u0041"}') == '{"symbol": "\\u0041"}'

    def test_escaped_backslash_before_u_is_literal(self) -> None:
        assert repair('{"path": "C:\\\\u00') == '{"path": "C:\\\\u00"}'

    def test_escaped_quotes(self) -> None:
        text = '{"message": "He said \\"hello\\""}'
        assert repair(text) == text

    def test_escape_sequences_pass_through(self) -> None:
        assert repair('{"text": "hello\\nworld\\t') == '{"text": "hello\\nworld\\t"}'

    def test_structural_characters_inside_strings_are_ignored(self) -> None:
        assert repair('{"code": "if (a) { return [1, 2') == '{"code": "if (a) { return [1, 2"}'

    def test_trailing_whitespace_inside_string_is_kept(self) -> None:
        assert repair('{"text": "a  ') == '{"text": "a  "}'

    def test_very_long_string(self) -> None:
        value = "x" * 10000
        repaired = repair('{"data": "' + value)
        assert repaired.endswith('"}')
        assert json.loads(repaired) == {"data": value}


class TestContainers:
    def test_unclosed_object(self) -> None:
        assert repair('{"a": 1') == '{"a": 1}'

    def test_nested_unclosed_objects(self) -> None:
        assert repair('{"user": {"name": "Bob"') == '{"user": {"name": "Bob"}}'

    def test_deeply_nested(self) -> None:
        assert repair('{"a": {"b": {"c": {"d": {"e": "value"') == '{"a": {"b": {"c": {"d": {"e": "value"}}}}}'

    def test_unclosed_arrays(self) -> None:
        assert repair("[1, 2, 3") == "[1, 2, 3]"
        assert repair("[[1, 2, [3, 4") == "[[1, 2, [3, 4]]]"

    def test_mixed_nesting(self) -> None:
        assert repair('{"data": [{"items": [1, 2, {"nested": [3, 4') == (
            '{"data": [{"items": [1, 2, {"nested": [3, 4]}]}]}'
        )

    def test_array_of_objects(self) -> None:
        assert repair('[{"name": "Alice"}, {"name": "Bob"') == '[{"name": "Alice"}, {"name": "Bob"}]'

    def test_single_openers(self) -> None:
        assert repair("{") == "{}"
        assert repair("[") == "[]"

    def test_trailing_comma_and_whitespace(self) -> None:
        assert repair('{"a": 1,   ') == '{"a": 1}'
        assert repair('{"items": [{"name": "test",  ') == '{"items": [{"name": "test"}]}'

    def test_comma_before_closer_is_dropped(self) -> None:
        assert repair('{"a": 1,}') == '{"a": 1}'
        assert repair("[1, 2, 3,]") == "[1, 2, 3]"

    def test_literals(self) -> None:
        assert repair('{"active": true, "verified": false') == '{"active": true, "verified": false}'
        assert repair('{"value": null, "other": 42') == '{"value": null, "other": 42}'


class TestDanglingMembers:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ('{"na', "{}"),
            ('{"name"', "{}"),
            ('{"name":', "{}"),
            ('{"name": ', "{}"),
            ('{"a": 1, "b', '{"a": 1}'),
            ('{"a": 1, "b":', '{"a": 1}'),
            ('{"a": tr', "{}"),
            ('{"a": 1, "b": nu', '{"a": 1}'),
            ('{"a": -', "{}"),
            ('{"a": 1.', "{}"),
            ('{"a": 2, "b": 1.5e', '{"a": 2}'),
            ('{"a": [1, fa', '{"a": [1]}'),
            ('{"a": {"b', '{"a": {}}'),
        ],
    )
    def test_unfinished_member_is_dropped(self, text: str, expected: str) -> None:
        assert repair(text) == expected

    def test_complete_number_is_kept(self) -> None:
        assert repair('{"a": 12') == '{"a": 12}'
        assert repair('{"a": -1.5e3') == '{"a": -1.5e3}'

    def test_corrupt_token_is_left_alone(self) -> None:
        assert repair('{"a": trx') == '{"a": trx}'
        assert try_parse('{"a": trx') is None

    def test_garbage_after_complete_value_keeps_value(self) -> None:
        assert repair('{"a": 1} tr') == '{"a": 1}'


class TestMismatchedClosers:
    """Pins the lossy one-level mismatch heuristic."""

    def test_brace_closes_array_and_object(self) -> None:
        assert repair('{"a": [1}') == '{"a": [1}'

    def test_bracket_closes_object_and_array(self) -> None:
        assert repair('[{"a": 1]') == '[{"a": 1]'

    def test_only_one_extra_level_is_closed(self) -> None:
        assert repair('{"x": [[1}') == '{"x": [[1}]}'

    def test_closer_on_empty_stack_is_kept(self) -> None:
        assert repair("}") == "}"


class TestEdgeCases:
    def test_empty_input(self) -> None:
        assert repair("") == "{}"

    def test_whitespace_only(self) -> None:
        assert repair("   ") == "{}"
        assert repair("\n\t") == "{}"

    def test_valid_json_is_unchanged(self) -> None:
        text = '{"users": [{"name": "Alice", "age": 30}], "count": 1}'
        assert repair(text) == text

    def test_idempotent_on_normalized_input(self) -> None:
        normalized = repair('{"a": [1, 2,], "b": {"c": null},}\n ')
        assert normalized == '{"a": [1, 2], "b": {"c": null}}'
        assert repair(normalized) == normalized

    def test_top_level_scalars(self) -> None:
        assert repair("42") == "42"
        assert repair('"abc') == '"abc"'
        assert repair("tru") == "{}"

    def test_every_prefix_repairs_to_valid_json(self) -> None:
        document = json.dumps(
            {
                "name": "Ada \"the\" Countess",
                "tags": ["math", "engines", "\u00e9"],
                "stats": {"born": 1815, "ratio": -1.5e-3, "alive": False, "spouse": None},
                "notes": [],
            }
        )
        for cut in range(len(document) + 1):
            prefix = document[:cut]
            json.loads(repair(prefix))

    def test_full_document_round_trips(self) -> None:
        document = '{"a": [1, {"b": "c"}], "d": true}'
        assert repair(document) == document


class TestParse:
    def test_parse_incomplete(self) -> None:
        assert parse('{"name": "Alice", "age": 30') == {"name": "Alice", "age": 30}

    def test_parse_empty_is_empty_object(self) -> None:
        assert parse("") == {}

    def test_parse_raises_on_unrepairable(self) -> None:
        with pytest.raises(json.JSONDecodeError):
            parse("not json at all")

    def test_try_parse_returns_none_on_broken(self) -> None:
        assert try_parse("{ : : : }") is None

    def test_try_parse_round_trip(self) -> None:
        content = try_parse('{"users": [{"name": "Alice", "active": true}, {"name": "Bob"')
        assert content == {"users": [{"name": "Alice", "active": True}, {"name": "Bob"}]}

    def test_array_streaming_intermediate_results(self) -> None:
        partials = [
            "[",
            '[{"id": 1',
            '[{"id": 1}',
            '[{"id": 1}, ',
            '[{"id": 1}, {"id": 2',
            '[{"id": 1}, {"id": 2}]',
        ]
        for partial in partials:
            assert try_parse(partial) is not None, partial
