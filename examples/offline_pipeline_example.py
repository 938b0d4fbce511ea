"""Small example running the acquire → extract → save pipeline with a dummy transport.

Run directly to see output:
    python examples/offline_pipeline_example.py
"""
import base64
import json
import os
import tempfile

from nanobanana import RequestSpec, ResponseAcquirer, save_all, select_extractor

PIXEL_PNG = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mNkYAAAAAYAAjCB0C8AAAAASUVORK5CYII="
)


class DummyTransport:
    """First answer has text only, so the image-only fallback kicks in."""

    def __init__(self):
        self.calls = 0

    def post(self, body, dest, timeout=60, retries=0, retry_delay=0):
        self.calls += 1
        if self.calls == 1:
            chunks = [{"candidates": [{"content": {"parts": [{"text": "Sure!"}]}}]}]
        else:
            data = base64.b64encode(PIXEL_PNG).decode("ascii")
            chunks = [{"candidates": [{"content": {"parts": [{"inlineData": {"mimeType": "image/png", "data": data}}]}}]}]
        with open(dest, "w", encoding="utf-8") as f:
            json.dump(chunks, f, indent=2)
        return 200


def main():
    workdir = tempfile.mkdtemp(prefix="nanobanana-")
    acquirer = ResponseAcquirer(
        DummyTransport(),
        os.path.join(workdir, "output.txt"),
        os.path.join(workdir, "output_image_only.txt"),
    )
    result = acquirer.acquire(RequestSpec("a single transparent pixel"))
    print("Response:", result.path, "fallback used:", result.used_fallback)

    pairs = select_extractor().extract(result.document)
    for path in save_all(pairs, "pixel.png", workdir):
        print("Saved:", path, os.path.getsize(path), "bytes")


if __name__ == "__main__":
    main()
