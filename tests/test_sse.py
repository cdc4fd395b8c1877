import json
import unittest

from grounded_gemini.sse import FrameParser
from tests.helpers import data_line, text_frame


class FrameParserTests(unittest.TestCase):
    def setUp(self) -> None:
        self.parser = FrameParser()

    def test_single_frame(self) -> None:
        frames = self.parser.feed(data_line(text_frame("Hello", " world")))
        self.assertEqual(len(frames), 1)
        self.assertEqual(frames[0].text_parts, ["Hello", " world"])

    def test_payload_split_across_chunks(self) -> None:
        raw = data_line(text_frame("split"))
        self.assertEqual(self.parser.feed(raw[:15]), [])
        frames = self.parser.feed(raw[15:])
        self.assertEqual([f.text_parts for f in frames], [["split"]])

    def test_multibyte_character_split_across_chunks(self) -> None:
        raw = data_line(text_frame("日本"))
        raw = raw.replace(b"\\u65e5\\u672c", "日本".encode())
        cut = raw.index("本".encode()) + 1
        self.assertEqual(self.parser.feed(raw[:cut]), [])
        frames = self.parser.feed(raw[cut:])
        self.assertEqual(frames[0].text_parts, ["日本"])

    def test_malformed_line_is_skipped(self) -> None:
        chunk = b'data: {"candidates": [\n' + data_line(text_frame("after"))
        frames = self.parser.feed(chunk)
        self.assertEqual([f.text_parts for f in frames], [["after"]])

    def test_non_data_and_empty_lines_are_ignored(self) -> None:
        chunk = b": keep-alive\nevent: message\ndata:\ndata:   \n" + data_line(text_frame("x"))
        self.assertEqual(len(self.parser.feed(chunk)), 1)

    def test_unterminated_line_is_held_back(self) -> None:
        raw = data_line(text_frame("late")).rstrip(b"\n")
        self.assertEqual(self.parser.feed(raw), [])
        self.assertEqual(self.parser.feed(b"\n")[0].text_parts, ["late"])

    def test_crlf_line_endings(self) -> None:
        raw = b"data: " + json.dumps(text_frame("crlf")).encode() + b"\r\n\r\n"
        self.assertEqual(self.parser.feed(raw)[0].text_parts, ["crlf"])

    def test_response_envelope_is_unwrapped(self) -> None:
        frames = self.parser.feed(data_line({"response": text_frame("wrapped")}))
        self.assertEqual(frames[0].text_parts, ["wrapped"])

    def test_parts_without_text_are_skipped(self) -> None:
        payload = {
            "candidates": [
                {"content": {"parts": [{"thought": True}, {"text": "a"}, {"text": ""}, {"text": "b"}]}}
            ]
        }
        self.assertEqual(self.parser.feed(data_line(payload))[0].text_parts, ["a", "b"])

    def test_only_first_candidate_is_used(self) -> None:
        payload = text_frame("first")
        payload["candidates"].append({"content": {"parts": [{"text": "second"}]}})
        self.assertEqual(self.parser.feed(data_line(payload))[0].text_parts, ["first"])

    def test_frame_without_candidates(self) -> None:
        frames = self.parser.feed(data_line({"usageMetadata": {"totalTokenCount": 3}}))
        self.assertEqual(frames[0].text_parts, [])
        self.assertIsNone(frames[0].grounding_metadata)

    def test_metadata_in_either_naming_convention(self) -> None:
        camel = text_frame(
            groundingMetadata={"webSearchQueries": ["q"]},
            urlContextMetadata={"urlMetadata": [{"retrievedUrl": "https://a"}]},
        )
        snake = text_frame(
            grounding_metadata={"web_search_queries": ["q"]},
            url_context_metadata={"url_metadata": [{"retrieved_url": "https://a"}]},
        )
        for payload in (camel, snake):
            frame = FrameParser().feed(data_line(payload))[0]
            self.assertEqual(frame.grounding_metadata.web_search_queries, ["q"])
            self.assertEqual(frame.url_context_metadata.url_metadata[0].retrieved_url, "https://a")

    def test_malformed_grounding_metadata_keeps_text(self) -> None:
        payload = text_frame("kept", groundingMetadata={"groundingChunks": "oops"})
        frames = self.parser.feed(data_line(payload))
        self.assertEqual([f.text_parts for f in frames], [["kept"]])
        self.assertIsNone(frames[0].grounding_metadata)

    def test_metadata_fields_are_validated_independently(self) -> None:
        payload = text_frame(
            "kept",
            groundingMetadata={"webSearchQueries": ["q"]},
            urlContextMetadata={"urlMetadata": "oops"},
        )
        frame = self.parser.feed(data_line(payload))[0]
        self.assertEqual(frame.text_parts, ["kept"])
        self.assertEqual(frame.grounding_metadata.web_search_queries, ["q"])
        self.assertIsNone(frame.url_context_metadata)

    def test_non_string_text_part_is_skipped(self) -> None:
        payload = {"candidates": [{"content": {"parts": [{"text": 7}, {"text": "ok"}]}}]}
        self.assertEqual(self.parser.feed(data_line(payload))[0].text_parts, ["ok"])

    def test_non_object_json_is_skipped(self) -> None:
        self.assertEqual(self.parser.feed(b"data: [1, 2]\ndata: 42\n"), [])


if __name__ == "__main__":
    unittest.main()
