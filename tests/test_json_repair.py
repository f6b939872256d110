import json
import unittest

from skillpath.core.errors import ErrorKind, PipelineFailure
from skillpath.parsing.repair import cleanup_json_string, parse_json_payload


class CleanupJsonStringTests(unittest.TestCase):
    def test_trailing_comma_in_object(self):
        self.assertEqual(json.loads(cleanup_json_string('{"a":1,}')), {"a": 1})

    def test_trailing_comma_in_nested_array(self):
        repaired = cleanup_json_string('{"items": [1, 2, 3, ],\n}')
        self.assertEqual(json.loads(repaired), {"items": [1, 2, 3]})

    def test_commas_inside_strings_are_kept(self):
        repaired = cleanup_json_string('{"note": "a,}", "b": 1}')
        self.assertEqual(json.loads(repaired), {"note": "a,}", "b": 1})

    def test_raw_newline_inside_string_is_escaped(self):
        repaired = cleanup_json_string('{"summary": "line one\nline two"}')
        self.assertEqual(json.loads(repaired), {"summary": "line one\nline two"})

    def test_smart_quote_delimiters(self):
        repaired = cleanup_json_string("{“summary”: “Strong engineer”}")
        self.assertEqual(json.loads(repaired), {"summary": "Strong engineer"})

    def test_smart_quotes_inside_straight_string_are_content(self):
        repaired = cleanup_json_string('{"quote": "He said “ship it”"}')
        self.assertEqual(json.loads(repaired), {"quote": "He said “ship it”"})

    def test_truncated_output_is_closed(self):
        repaired = cleanup_json_string('{"success": tru')
        self.assertEqual(json.loads(repaired), {"success": True})
        repaired = cleanup_json_string('{"goals": [{"title": "Learn SQL", "tags": ["db",')
        self.assertEqual(json.loads(repaired), {"goals": [{"title": "Learn SQL", "tags": ["db"]}]})

    def test_valid_json_is_unchanged(self):
        text = '{"a": [1, {"b": "c\\"d"}], "e": null}'
        self.assertEqual(cleanup_json_string(text), text)


class ParseJsonPayloadTests(unittest.TestCase):
    def test_repaired_payload_parses(self):
        self.assertEqual(parse_json_payload('{"a":1,}'), {"a": 1})

    def test_unrepairable_payload_is_parse_failure(self):
        result = parse_json_payload("{overallScore: seventy}")
        self.assertIsInstance(result, PipelineFailure)
        self.assertIs(result.kind, ErrorKind.PARSE_FAILURE)


if __name__ == "__main__":
    unittest.main()
