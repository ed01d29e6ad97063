"""
Unit tests for prompt_builders.py.
"""

import unittest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import prompt_builders
from script_types import VideoGenType


class TestClassificationPrompt(unittest.TestCase):
    """Test build_classification_prompt."""

    def test_contains_prompt_and_all_types(self):
        result = prompt_builders.build_classification_prompt("Why do cats purr?")
        self.assertIn("Why do cats purr?", result)
        for video_type in VideoGenType:
            self.assertIn(video_type.value, result)

    def test_json_object_mode_asks_for_type_key(self):
        result = prompt_builders.build_classification_prompt("x", json_object=True)
        self.assertIn('{"type":', result)
        self.assertIn("JSON", result)

    def test_plain_mode_asks_for_bare_name(self):
        result = prompt_builders.build_classification_prompt("x")
        self.assertNotIn('{"type":', result)


class TestFieldPrompts(unittest.TestCase):
    """Test the variant -> field prompt table."""

    def test_every_type_has_prompts(self):
        for video_type in VideoGenType:
            prompts = prompt_builders.get_field_prompts(video_type)
            self.assertGreater(len(prompts), 0)
            for key, prompt in prompts.items():
                self.assertNotEqual(key, "type")
                self.assertIn(key, prompt)

    def test_title_comes_first(self):
        for video_type in VideoGenType:
            self.assertEqual(list(prompt_builders.get_field_prompts(video_type))[0], "title")

    def test_quiz_field_order(self):
        self.assertEqual(
            list(prompt_builders.get_field_prompts(VideoGenType.QuizVideo)),
            ["title", "description", "start_script", "questions", "end_script"],
        )

    def test_accepts_string_value(self):
        self.assertIs(
            prompt_builders.get_field_prompts("RankVideo"),
            prompt_builders.get_field_prompts(VideoGenType.RankVideo),
        )

    def test_catalog_is_read_only(self):
        prompts = prompt_builders.get_field_prompts(VideoGenType.TopicVideo)
        with self.assertRaises(TypeError):
            prompts["title"] = "changed"

    def test_unknown_type_raises(self):
        with self.assertRaises(ValueError):
            prompt_builders.get_field_prompts("NotAVideo")


if __name__ == "__main__":
    unittest.main()
