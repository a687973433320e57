# -*- coding: utf-8 -*-

from __future__ import annotations

import unittest

from babykicks.advisory.parsing import iter_object_candidates, parse_model_json, remove_trailing_commas


class TestParseModelJson(unittest.TestCase):
    def test_plain_object(self) -> None:
        self.assertEqual(parse_model_json('{"a": 1}'), {"a": 1})

    def test_code_fence(self) -> None:
        content = '```json\n{"severity": "low", "message": "ok"}\n```'
        self.assertEqual(parse_model_json(content)["severity"], "low")

    def test_prose_around_object(self) -> None:
        content = 'Here is the analysis: {"isAnomaly": false, "note": "a {brace} in text"} Thanks!'
        parsed = parse_model_json(content)
        self.assertFalse(parsed["isAnomaly"])
        self.assertEqual(parsed["note"], "a {brace} in text")

    def test_trailing_commas_and_full_width_punctuation(self) -> None:
        content = '{"momSymptoms"："1. 疲劳"，"nutrition": "均衡",}'
        parsed = parse_model_json(content)
        self.assertEqual(parsed["momSymptoms"], "1. 疲劳")
        self.assertEqual(parsed["nutrition"], "均衡")

    def test_no_object_raises(self) -> None:
        with self.assertRaises(ValueError):
            parse_model_json("sorry, no data")
        with self.assertRaises(ValueError):
            parse_model_json("")

    def test_remove_trailing_commas_ignores_strings(self) -> None:
        self.assertEqual(remove_trailing_commas('{"a": ",}", }'), '{"a": ",}" }')

    def test_multiple_candidates(self) -> None:
        self.assertEqual(iter_object_candidates('{"a": 1} and {"b": 2}'), ['{"a": 1}', '{"b": 2}'])


if __name__ == "__main__":
    unittest.main()
