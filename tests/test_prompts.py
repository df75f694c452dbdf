import unittest

from devicewatch.services import prompts
from devicewatch.services.prompts import PromptContext, build_prompt, language_hint


class TestPrompts(unittest.TestCase):

    def test_placeholders_in_values_are_not_expanded(self):
        context = PromptContext(device_id="$query", query="$device_id ${readings}")

        prompt = build_prompt(prompts.CHAT, context)

        self.assertIn("assistant for device $query.", prompt)
        self.assertIn('The user asks: "$device_id ${readings}"', prompt)

    def test_readings_serialized_as_json(self):
        prompt = build_prompt(prompts.RISK, PromptContext(readings=[{"state": "DANGER", "voltage": 251.5}]))
        self.assertIn('Readings: [{"state": "DANGER", "voltage": 251.5}]', prompt)

    def test_english_has_no_hint(self):
        self.assertEqual(language_hint("en", ["reason"]), "")
        self.assertEqual(language_hint("", ["reason"]), "")

    def test_known_and_unknown_languages(self):
        self.assertEqual(language_hint("am", ["reason"]), " Provide the 'reason' in Amharic language.")
        self.assertEqual(language_hint("fr", ["summary", "overall_status"]),
                         " Provide the 'summary' and 'overall_status' in fr language.")

    def test_maintenance_prompt(self):
        prompt = build_prompt(prompts.MAINTENANCE, PromptContext(device_id="IND-MACHINE-07"), "am", ["suggested_action"])

        self.assertIn("for device IND-MACHINE-07.", prompt)
        self.assertIn("History: []", prompt)
        self.assertTrue(prompt.endswith("Provide the 'suggested_action' in Amharic language."))


if __name__ == '__main__':
    unittest.main()
