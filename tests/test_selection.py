import unittest

from grounded_gemini.selection import select_model
from grounded_gemini.types import ModelDescriptor


def _m(model_id: str, provider: str, api: str = "openai-completions") -> ModelDescriptor:
    return ModelDescriptor(id=model_id, provider=provider, api=api, base_url="https://example.test")


class SelectModelTests(unittest.TestCase):
    def test_newest_flash_family_first(self) -> None:
        models = [
            _m("gemini-2.0-flash", "google-gemini-cli"),
            _m("gemini-2.5-flash", "google"),
            _m("gemini-3-flash-preview", "google-generative-ai"),
        ]
        self.assertEqual(select_model(models).id, "gemini-3-flash-preview")

    def test_provider_priority_within_family(self) -> None:
        models = [
            _m("gemini-2.5-flash", "google"),
            _m("gemini-2.5-flash", "google-antigravity"),
            _m("gemini-2.5-flash-lite", "google-gemini-cli"),
        ]
        self.assertEqual(select_model(models).provider, "google-gemini-cli")

    def test_match_through_api_tag_only(self) -> None:
        models = [_m("Gemini-2.5-Flash", "corp-proxy", api="google-gemini-cli")]
        self.assertEqual(select_model(models).provider, "corp-proxy")

    def test_non_flash_fallback_by_priority(self) -> None:
        models = [_m("gemini-2.5-pro", "google"), _m("gemini-2.5-pro", "google-antigravity")]
        self.assertEqual(select_model(models).provider, "google-antigravity")

    def test_non_google_models_are_ignored(self) -> None:
        self.assertIsNone(select_model([_m("gpt-4o", "openai"), _m("gemini-flash", "openrouter")]))
        self.assertIsNone(select_model([]))

    def test_first_google_model_when_no_priority_provider(self) -> None:
        models = [_m("gemini-pro", "proxy-a", api="google-generative-ai"), _m("gemini-ultra", "proxy-b", api="google-generative-ai")]
        self.assertEqual(select_model(models).id, "gemini-pro")


if __name__ == "__main__":
    unittest.main()
