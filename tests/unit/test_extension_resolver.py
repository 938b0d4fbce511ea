import pytest

from nanobanana import resolve_extension


@pytest.mark.parametrize(
    "mime,ext",
    [
        ("image/png", "png"),
        ("image/jpeg", "jpg"),
        ("image/jpg", "jpg"),
        ("image/webp", "webp"),
        ("image/gif", "gif"),
        ("image/svg+xml", "svg"),
    ],
)
def test_known_types(mime, ext):
    assert resolve_extension(mime) == ext


def test_case_insensitive():
    assert resolve_extension("IMAGE/PNG") == "png"
    assert resolve_extension("Image/Jpeg") == "jpg"


@pytest.mark.parametrize("mime", ["", None, "image/tiff", "application/octet-stream", "text/plain", "png"])
def test_unknown_types_are_bin(mime):
    assert resolve_extension(mime) == "bin"
