"""Tests for the Gemini HTTP client.

``requests.post`` is patched; no real HTTP requests are made.
"""

import unittest
from unittest import mock

import requests

from gemini_chat.composer import compose_request
from gemini_chat.errors import MissingCredential
from gemini_chat.gemini_api import GeminiAPIError, GeminiClient
from gemini_chat.interpreter import ApiError, ImageResult, TextResult
from gemini_chat.modes import ModeState
from gemini_chat.personas import IMAGE_GENERATION, PersonaCatalog

LOOKUP = PersonaCatalog().instruction_for


def _response(status: int, text: str) -> mock.Mock:
    resp = mock.Mock(spec=requests.Response)
    resp.status_code = status
    resp.text = text
    return resp


class TestGeminiClient(unittest.TestCase):

    def test_requires_key(self) -> None:
        with self.assertRaises(MissingCredential):
            GeminiClient("")

    @mock.patch("gemini_chat.gemini_api.requests.post")
    def test_text_request(self, post: mock.Mock) -> None:
        post.return_value = _response(
            200, '{"candidates":[{"content":{"parts":[{"text":"hello"}]}}]}',
        )
        req = compose_request("hi", (), ModeState(), LOOKUP)
        result = GeminiClient("SECRET").send(req)

        self.assertEqual(result, TextResult("hello"))
        post.assert_called_once()
        url = post.call_args.args[0]
        self.assertIn(":generateContent?key=SECRET", url)
        self.assertEqual(post.call_args.kwargs["json"], req.payload)
        self.assertNotIn("timeout", post.call_args.kwargs)

    @mock.patch("gemini_chat.gemini_api.requests.post")
    def test_image_request(self, post: mock.Mock) -> None:
        post.return_value = _response(
            200, '{"predictions":[{"bytesBase64Encoded":"Zm9v"}]}',
        )
        req = compose_request("fox", (), ModeState(IMAGE_GENERATION), LOOKUP)
        result = GeminiClient("K").send(req)
        self.assertEqual(result, ImageResult("data:image/png;base64,Zm9v"))
        self.assertIn("imagen-3.0-generate-001:predict", post.call_args.args[0])

    @mock.patch("gemini_chat.gemini_api.requests.post")
    def test_http_error_is_result(self, post: mock.Mock) -> None:
        post.return_value = _response(403, "denied")
        req = compose_request("hi", (), ModeState(), LOOKUP)
        self.assertEqual(GeminiClient("K").send(req), ApiError(403, "denied"))

    @mock.patch("gemini_chat.gemini_api.requests.post")
    def test_transport_error_raises(self, post: mock.Mock) -> None:
        post.side_effect = requests.ConnectionError("no route")
        req = compose_request("hi", (), ModeState(), LOOKUP)
        with self.assertRaises(GeminiAPIError) as ctx:
            GeminiClient("SECRET").send(req)
        text = str(ctx.exception)
        self.assertIn("no route", text)
        self.assertIn("<API_KEY>", text)
        self.assertNotIn("SECRET", text)

    @mock.patch("gemini_chat.gemini_api.requests.post")
    def test_key_never_logged(self, post: mock.Mock) -> None:
        post.return_value = _response(200, "{}")
        req = compose_request("hi", (), ModeState(), LOOKUP)
        with self.assertLogs("gemini_chat", level="DEBUG") as logs:
            GeminiClient("SECRET").send(req)
        self.assertFalse(any("SECRET" in line for line in logs.output))


if __name__ == "__main__":
    unittest.main()
