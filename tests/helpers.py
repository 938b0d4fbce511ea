import base64
import json
import os


def b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def gemini_stream(images, text="here you go", pretty=True) -> bytes:
    """Build a streamGenerateContent-like response: a JSON array of chunks.

    ``images`` is a list of (mime_type, raw_bytes); each image gets its own chunk.
    """
    chunks = [{"candidates": [{"content": {"role": "model", "parts": [{"text": text}]}, "index": 0}]}]
    for mime, raw in images:
        chunks.append(
            {
                "candidates": [
                    {
                        "content": {
                            "role": "model",
                            "parts": [{"inlineData": {"mimeType": mime, "data": b64(raw)}}],
                        },
                        "index": 0,
                    }
                ]
            }
        )
    chunks.append({"usageMetadata": {"promptTokenCount": 7, "totalTokenCount": 1297}})
    return json.dumps(chunks, indent=2 if pretty else None).encode("utf-8")


class FakeTransport:
    """Writes canned response bodies in call order and records every call."""

    def __init__(self, *responses):
        # each response is (status, body_bytes)
        self.responses = list(responses)
        self.calls = []

    def post(self, body, dest, timeout=60, retries=0, retry_delay=0):
        self.calls.append(
            {"body": json.loads(body), "dest": dest, "timeout": timeout, "retries": retries, "retry_delay": retry_delay}
        )
        status, payload = self.responses.pop(0)
        os.makedirs(os.path.dirname(os.path.abspath(dest)), exist_ok=True)
        with open(dest, "wb") as f:
            f.write(payload)
        return status
