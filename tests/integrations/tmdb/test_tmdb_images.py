from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import requests

from metacache.integrations.tmdb import client as client_mod
from metacache.integrations.tmdb import images as mod


@pytest.fixture(autouse=True)
def _no_sleep(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(client_mod.time, "sleep", lambda _seconds: None)


def _image_response(content: bytes = b"jpeg-bytes", status_code: int = 200) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status_code
    resp.content = content
    resp.text = ""
    return resp


def test_build_image_url_uses_original_rendition() -> None:
    assert mod.build_image_url("/abc.jpg") == "https://image.tmdb.org/t/p/original/abc.jpg"
    assert mod.build_image_url("abc.jpg") == "https://image.tmdb.org/t/p/original/abc.jpg"


@pytest.mark.parametrize("image_path", [None, "", "   "])
def test_missing_reference_fails_without_network(image_path) -> None:  # noqa: ANN001
    session = MagicMock()

    with pytest.raises(mod.InvalidImageReference):
        mod.fetch_image(image_path, session=session)

    session.get.assert_not_called()


def test_fetch_image_returns_bytes_with_timeout() -> None:
    session = MagicMock()
    session.get.return_value = _image_response()

    data = mod.fetch_image("/poster.jpg", session=session)

    assert data == b"jpeg-bytes"
    args, kwargs = session.get.call_args
    assert args[0] == "https://image.tmdb.org/t/p/original/poster.jpg"
    assert kwargs["timeout"] == 8.0


def test_fetch_image_calls_remote_exactly_three_times_before_failing() -> None:
    session = MagicMock()
    session.get.side_effect = requests.Timeout("stalled")

    with pytest.raises(client_mod.FetchError, match="Timeout"):
        mod.fetch_image("/poster.jpg", session=session)

    assert session.get.call_count == 3


def test_fetch_image_rejects_empty_body() -> None:
    session = MagicMock()
    session.get.return_value = _image_response(content=b"")

    with pytest.raises(client_mod.FetchError, match="Empty image"):
        mod.fetch_image("/poster.jpg", session=session)
