"""
Unit tests for conversation.py.
"""

import dataclasses
import unittest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from conversation import ConversationHistory, ConversationMessage


class TestConversationHistory(unittest.TestCase):
    """Test ConversationHistory ordering and validation."""

    def test_seeded_with_system_prompt_as_user(self):
        history = ConversationHistory("You write videos.")
        self.assertEqual(len(history), 1)
        self.assertEqual(history.as_ordered_list(), [{"role": "user", "content": "You write videos."}])

    def test_no_seed(self):
        self.assertEqual(len(ConversationHistory()), 0)
        self.assertIsNone(ConversationHistory().last)

    def test_append_keeps_order(self):
        history = ConversationHistory("sys")
        history.append("user", "q1")
        history.append("assistant", "a1")
        history.append("user", "q2")
        self.assertEqual([m["content"] for m in history.as_ordered_list()], ["sys", "q1", "a1", "q2"])
        self.assertEqual(history.last.content, "q2")

    def test_empty_role_rejected(self):
        with self.assertRaises(ValueError):
            ConversationHistory().append("", "x")

    def test_unknown_role_rejected(self):
        with self.assertRaises(ValueError):
            ConversationHistory().append("tool", "x")

    def test_as_ordered_list_is_a_copy(self):
        history = ConversationHistory("sys")
        snapshot = history.as_ordered_list()
        snapshot.append({"role": "user", "content": "sneaky"})
        snapshot[0]["content"] = "changed"
        self.assertEqual(len(history), 1)
        self.assertEqual(history.as_ordered_list()[0]["content"], "sys")

    def test_messages_are_immutable(self):
        message = ConversationHistory().append("user", "hi")
        self.assertIsInstance(message, ConversationMessage)
        with self.assertRaises(dataclasses.FrozenInstanceError):
            message.content = "bye"

    def test_iteration(self):
        history = ConversationHistory("sys")
        history.append("assistant", "ok")
        self.assertEqual([m.role for m in history], ["user", "assistant"])


if __name__ == "__main__":
    unittest.main()
