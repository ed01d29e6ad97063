"""
Unit tests for build_scripts_utils.py: reply parsing, VideoDocument, field elicitation.
"""

import json
import tempfile
import unittest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))
sys.path.insert(0, str(Path(__file__).parent))

from build_scripts_utils import (
    VideoDocument,
    clean_json_response,
    elicit_fields,
    extract_json_block,
    load_video_document,
    parse_field_response,
)
from conversation import ConversationHistory
from script_types import VideoGenType
from log_helpers import CollectingLogSink


class ScriptedAdapter:
    """Replies from a list, recording each key asked for."""

    def __init__(self, replies):
        self.replies = list(replies)
        self.keys = []
        self.classification_flags = []

    def run_turn(self, history, prompt, *, classification=False, key="type"):
        self.classification_flags.append(classification)
        self.keys.append(key)
        history.append("user", prompt)
        reply = self.replies.pop(0)
        history.append("assistant", reply)
        return reply


class TestCleanJsonResponse(unittest.TestCase):
    """Test cases for clean_json_response function."""

    def test_plain_json(self):
        self.assertEqual(clean_json_response('{"key": "value"}'), '{"key": "value"}')

    def test_json_with_json_code_block(self):
        self.assertEqual(clean_json_response('```json\n{"key": "value"}\n```'), '{"key": "value"}')

    def test_json_with_code_block(self):
        self.assertEqual(clean_json_response('```\n{"key": "value"}\n```'), '{"key": "value"}')

    def test_json_with_whitespace(self):
        self.assertEqual(clean_json_response('   ```json\n{"key": "value"}\n```   '), '{"key": "value"}')


class TestExtractJsonBlock(unittest.TestCase):

    def test_object_inside_prose(self):
        self.assertEqual(extract_json_block('Sure! {"title": "x"} Enjoy.'), {"title": "x"})

    def test_array_inside_prose(self):
        self.assertEqual(extract_json_block('Here: ["a", "b"]'), ["a", "b"])

    def test_no_block_raises(self):
        with self.assertRaises(json.JSONDecodeError):
            extract_json_block("nothing here")


class TestParseFieldResponse(unittest.TestCase):
    """Test parse_field_response nesting and fallback rules."""

    def setUp(self):
        self.log = CollectingLogSink()

    def test_nested_key_unwrapped(self):
        self.assertEqual(parse_field_response('{"title": "Hello"}', "title", self.log), "Hello")
        self.assertEqual(self.log.lines, [])

    def test_not_json_stored_raw_with_one_log_line(self):
        self.assertEqual(parse_field_response("not json", "title", self.log), "not json")
        self.assertEqual(len(self.log.matching("Error parsing JSON")), 1)

    def test_raw_text_is_trimmed(self):
        self.assertEqual(parse_field_response("  just words \n", "script", self.log), "just words")

    def test_missing_key_keeps_whole_object(self):
        result = parse_field_response('{"name": "Bob"}', "other_party_name", self.log)
        self.assertEqual(result, {"name": "Bob"})

    def test_null_key_keeps_whole_object(self):
        result = parse_field_response('{"title": null, "alt": "x"}', "title", self.log)
        self.assertEqual(result, {"title": None, "alt": "x"})

    def test_array_kept(self):
        self.assertEqual(parse_field_response('["a", "b"]', "images", self.log), ["a", "b"])

    def test_code_fenced_reply(self):
        raw = '```json\n{"questions": [{"question": "Q?", "answers": ["a", "b"], "correct": 1}]}\n```'
        result = parse_field_response(raw, "questions", self.log)
        self.assertEqual(result[0]["correct"], 1)

    def test_json_in_prose_recovered(self):
        result = parse_field_response('Here you go: {"title": "Cats"}', "title", self.log)
        self.assertEqual(result, "Cats")

    def test_idempotent_on_well_formed_values(self):
        for value in (["a", "b"], {"option1": "x", "option2": "y"}, 42, "Hello"):
            once = parse_field_response(json.dumps({"field": value}), "field", self.log)
            twice = parse_field_response(json.dumps({"field": once}), "field", self.log)
            self.assertEqual(once, value)
            self.assertEqual(twice, value)


class TestVideoDocument(unittest.TestCase):
    """Test VideoDocument serialization."""

    def test_type_first_then_fields_in_order(self):
        doc = VideoDocument(type=VideoGenType.RankVideo)
        doc.set_field("title", "T")
        doc.set_field("ranks", [1, 2])
        self.assertEqual(list(doc.to_dict()), ["type", "title", "ranks"])
        self.assertEqual(doc.to_dict()["type"], "RankVideo")

    def test_to_json_two_space_indent(self):
        doc = VideoDocument(type=VideoGenType.TopicVideo, fields={"title": "Café"})
        text = doc.to_json()
        self.assertIn('\n  "type": "TopicVideo"', text)
        self.assertIn("Café", text)

    def test_round_trip(self):
        doc = VideoDocument(type=VideoGenType.QuizVideo, fields={"title": "Q", "questions": []})
        again = VideoDocument.from_json(doc.to_json())
        self.assertIs(again.type, doc.type)
        self.assertEqual(set(again.fields), set(doc.fields))

    def test_type_key_reserved(self):
        doc = VideoDocument(type=VideoGenType.TopicVideo)
        with self.assertRaises(ValueError):
            doc.set_field("type", "QuizVideo")

    def test_from_dict_invalid_type(self):
        with self.assertRaises(ValueError):
            VideoDocument.from_dict({"type": "giraffe"})

    def test_from_json_not_object(self):
        with self.assertRaises(ValueError):
            VideoDocument.from_json("[1, 2]")


class TestLoadVideoDocument(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.path = Path(self.temp_dir) / "script.json"

    def tearDown(self):
        if self.path.exists():
            self.path.unlink()

    def test_loads_file(self):
        self.path.write_text(json.dumps({"type": "ratherVideo", "title": "WYR"}), encoding="utf-8")
        doc = load_video_document(self.path)
        self.assertIs(doc.type, VideoGenType.RatherVideo)
        self.assertEqual(doc.fields, {"title": "WYR"})

    def test_missing_file(self):
        with self.assertRaises(FileNotFoundError):
            load_video_document(self.path)


class TestElicitFields(unittest.TestCase):
    """Test elicit_fields ordering and degradation."""

    def setUp(self):
        self.log = CollectingLogSink()
        self.prompts = {"title": "Give title", "script": "Give script", "images": "Give images"}

    def test_one_field_per_prompt_in_order(self):
        adapter = ScriptedAdapter(['{"title": "T"}', '{"script": "S"}', '{"images": ["a"]}'])
        history = ConversationHistory("sys")
        doc = VideoDocument(type=VideoGenType.TopicVideo)
        elicit_fields(adapter, history, doc, self.prompts, self.log)
        self.assertEqual(adapter.keys, ["title", "script", "images"])
        self.assertEqual(doc.fields, {"title": "T", "script": "S", "images": ["a"]})
        self.assertEqual(len(history), 1 + 2 * 3)
        self.assertEqual(adapter.classification_flags, [False, False, False])

    def test_field_named_type_rejected_before_any_turn(self):
        adapter = ScriptedAdapter(['{"title": "T"}', '{"type": "x"}'])
        history = ConversationHistory("sys")
        doc = VideoDocument(type=VideoGenType.TopicVideo)
        with self.assertRaises(ValueError):
            elicit_fields(adapter, history, doc, {"title": "Give title", "type": "Give type"}, self.log)
        self.assertEqual(adapter.keys, [])
        self.assertEqual(len(history), 1)
        self.assertEqual(doc.fields, {})

    def test_all_parse_failures_still_fill_every_field(self):
        adapter = ScriptedAdapter(["nope one", "nope two", "nope three"])
        doc = VideoDocument(type=VideoGenType.TopicVideo)
        elicit_fields(adapter, ConversationHistory("sys"), doc, self.prompts, self.log)
        self.assertEqual(list(doc.fields), ["title", "script", "images"])
        self.assertEqual(doc.fields["script"], "nope two")
        self.assertEqual(len(self.log.matching("Error parsing JSON")), 3)

    def test_failure_keeps_earlier_fields(self):
        adapter = ScriptedAdapter(['{"title": "T"}', "broken", '{"images": []}'])
        doc = VideoDocument(type=VideoGenType.TopicVideo)
        elicit_fields(adapter, ConversationHistory("sys"), doc, self.prompts, self.log)
        self.assertEqual(doc.fields["title"], "T")
        self.assertEqual(doc.fields["script"], "broken")
        self.assertEqual(doc.fields["images"], [])

    def test_logs_ask_and_answer_per_field(self):
        adapter = ScriptedAdapter(['{"title": "T"}'])
        doc = VideoDocument(type=VideoGenType.TopicVideo)
        elicit_fields(adapter, ConversationHistory("sys"), doc, {"title": "Give title"}, self.log, label="X m")
        self.assertEqual(len(self.log.lines), 2)
        self.assertIn("Will ask AI for field 'title'", self.log.lines[0])
        self.assertIn("AI said for field 'title'", self.log.lines[1])


if __name__ == "__main__":
    unittest.main()
