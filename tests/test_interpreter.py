"""Tests for the response interpreter (no HTTP)."""

import json
import unittest

from gemini_chat.composer import RequestKind
from gemini_chat.interpreter import (
    NO_IMAGE_FALLBACK,
    NO_TEXT_FALLBACK,
    ApiError,
    ImageResult,
    TextResult,
    interpret_response,
)


class TestGenerateResponses(unittest.TestCase):

    def test_text_extracted(self) -> None:
        body = '{"candidates":[{"content":{"parts":[{"text":"hello"}]}}]}'
        self.assertEqual(interpret_response(200, body), TextResult("hello"))

    def test_dict_body_accepted(self) -> None:
        body = {"candidates": [{"content": {"parts": [{"text": "hi"}]}}]}
        self.assertEqual(interpret_response(200, body), TextResult("hi"))

    def test_empty_candidates_falls_back(self) -> None:
        self.assertEqual(
            interpret_response(200, '{"candidates": []}'),
            TextResult(NO_TEXT_FALLBACK),
        )
        self.assertEqual(NO_TEXT_FALLBACK, "No response from Gemini.")

    def test_candidate_without_text_falls_back(self) -> None:
        body = json.dumps({"candidates": [{"finishReason": "SAFETY"}]})
        self.assertEqual(interpret_response(200, body),
                         TextResult(NO_TEXT_FALLBACK))

    def test_non_json_body_falls_back(self) -> None:
        self.assertEqual(interpret_response(200, "<html>oops</html>"),
                         TextResult(NO_TEXT_FALLBACK))


class TestImageResponses(unittest.TestCase):

    def test_image_data_uri(self) -> None:
        body = '{"predictions":[{"bytesBase64Encoded":"Zm9v"}]}'
        result = interpret_response(200, body, RequestKind.IMAGE)
        self.assertEqual(result, ImageResult("data:image/png;base64,Zm9v"))
        self.assertEqual(result.base64_data, "Zm9v")

    def test_no_predictions_falls_back(self) -> None:
        self.assertEqual(
            interpret_response(200, "{}", RequestKind.IMAGE),
            TextResult(NO_IMAGE_FALLBACK),
        )
        self.assertEqual(NO_IMAGE_FALLBACK, "No image generated.")


class TestErrors(unittest.TestCase):

    def test_403_is_api_error_regardless_of_body(self) -> None:
        for body in ("forbidden",
                     '{"candidates":[{"content":{"parts":[{"text":"x"}]}}]}',
                     ""):
            result = interpret_response(403, body)
            self.assertEqual(result, ApiError(403, body))

    def test_error_message_uses_google_error_detail(self) -> None:
        body = json.dumps({"error": {
            "code": 400, "message": "API key not valid.",
            "status": "INVALID_ARGUMENT",
        }})
        result = interpret_response(400, body, RequestKind.IMAGE)
        self.assertIsInstance(result, ApiError)
        self.assertIn("API Error: 400", result.message)
        self.assertIn("API key not valid.", result.message)
        self.assertIn("INVALID_ARGUMENT", result.message)

    def test_bytes_body_decoded(self) -> None:
        result = interpret_response(500, b"boom")
        self.assertEqual(result, ApiError(500, "boom"))


if __name__ == "__main__":
    unittest.main()
