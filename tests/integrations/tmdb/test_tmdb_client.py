from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import MagicMock

import pytest
import requests

from metacache.integrations.tmdb import client as mod

FIXTURES = Path(__file__).resolve().parents[2] / "fixtures" / "tmdb"


def _load_fixture(name: str) -> dict:
    return json.loads((FIXTURES / name).read_text(encoding="utf-8"))


def _response(status_code: int = 200, payload=None, text: str = "") -> MagicMock:  # noqa: ANN001
    resp = MagicMock()
    resp.status_code = status_code
    resp.text = text
    resp.json.return_value = payload
    return resp


class _FakeSession:
    """Records GET calls and replays queued outcomes (responses or exceptions)."""

    def __init__(self, outcomes: list) -> None:
        self._outcomes = list(outcomes)
        self.calls: list[dict] = []

    def get(self, url, params=None, headers=None, timeout=None):  # noqa: ANN001
        self.calls.append({"url": url, "params": params, "headers": headers, "timeout": timeout})
        outcome = self._outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture(autouse=True)
def _no_sleep(monkeypatch: pytest.MonkeyPatch) -> list[float]:
    sleeps: list[float] = []
    monkeypatch.setattr(mod.time, "sleep", lambda seconds: sleeps.append(seconds))
    return sleeps


def test_normalize_title_payload_for_movie() -> None:
    record = mod.normalize_title_payload(_load_fixture("movie_details_sample.json"))

    assert record.title == "The Matrix"
    assert record.description == "A hacker learns the true nature of his reality."
    assert record.genres == ["Action", "Science Fiction"]
    assert record.release_date == "1999-03-30"
    assert record.average_vote == 8.2
    assert record.original_language == "en"
    assert record.age_rating == "Not rated"
    assert record.poster_path == "/f89U3ADr1oiB1s9GkdPOEpXUk5H.jpg"
    assert record.backdrop_path == "/fNG7i7RqMErkcqhohV2a6cV1Ehy.jpg"


def test_normalize_title_payload_falls_back_to_tv_fields() -> None:
    record = mod.normalize_title_payload(_load_fixture("tv_details_sample.json"))

    assert record.title == "Breaking Bad"
    assert record.release_date == "2008-01-20"
    assert record.genres == ["Drama"]
    assert record.backdrop_path is None
    assert record.age_rating == "Not rated"


def test_normalize_title_payload_without_genres() -> None:
    record = mod.normalize_title_payload({"name": "Untitled"})
    assert record.genres is None
    assert record.to_dict()["age_rating"] == "Not rated"


def test_normalize_episode_payload() -> None:
    record = mod.normalize_episode_payload(_load_fixture("episode_details_sample.json"))

    assert record.to_dict() == {
        "title": "Pilot",
        "description": "Walter White gets a diagnosis.",
        "air_date": "2008-01-20",
        "average_vote": 8.0,
        "season_number": 1,
        "episode_number": 1,
        "still_path": "/ydlY3iPfeOAvu8gVqrxPoMvzNCn.jpg",
    }


def test_fetch_title_metadata_builds_keyed_url() -> None:
    session = _FakeSession([_response(payload=_load_fixture("movie_details_sample.json"))])

    record = mod.fetch_title_metadata("603", "movie", api_key="secret", session=session)

    assert record.title == "The Matrix"
    assert len(session.calls) == 1
    call = session.calls[0]
    assert call["url"] == "https://api.themoviedb.org/3/movie/603"
    assert call["params"] == {"api_key": "secret", "language": "en-US"}
    assert call["timeout"] == 8.0


def test_fetch_episode_metadata_builds_episode_url() -> None:
    session = _FakeSession([_response(payload=_load_fixture("episode_details_sample.json"))])

    record = mod.fetch_episode_metadata(1396, 1, 1, api_key="secret", session=session)

    assert record.title == "Pilot"
    assert session.calls[0]["url"] == "https://api.themoviedb.org/3/tv/1396/season/1/episode/1"


def test_fetch_title_metadata_uses_env_api_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TMDB_API_KEY", "from-env")
    session = _FakeSession([_response(payload={"title": "x"})])

    mod.fetch_title_metadata(1, "tv", session=session)

    assert session.calls[0]["params"]["api_key"] == "from-env"


def test_fetch_title_metadata_requires_api_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("TMDB_API_KEY", raising=False)
    with pytest.raises(RuntimeError, match="TMDB_API_KEY"):
        mod.fetch_title_metadata(1, "movie", session=_FakeSession([]))


def test_fetch_title_metadata_rejects_unknown_type() -> None:
    with pytest.raises(ValueError):
        mod.fetch_title_metadata(1, "episode", api_key="k", session=_FakeSession([]))


def test_retry_recovers_after_transient_failures(_no_sleep: list[float]) -> None:
    session = _FakeSession(
        [
            requests.ConnectionError("reset"),
            _response(status_code=503, text="busy"),
            _response(payload={"title": "Recovered"}),
        ]
    )

    record = mod.fetch_title_metadata(1, "movie", api_key="k", session=session)

    assert record.title == "Recovered"
    assert len(session.calls) == 3
    assert _no_sleep == [1.0, 1.0]


def test_retry_gives_up_after_three_attempts(_no_sleep: list[float]) -> None:
    session = _FakeSession([_response(status_code=500, text="boom") for _ in range(5)])

    with pytest.raises(mod.FetchError) as excinfo:
        mod.fetch_title_metadata(1, "movie", api_key="k", session=session)

    assert len(session.calls) == 3
    assert _no_sleep == [1.0, 1.0]
    assert excinfo.value.status_code == 500
    assert excinfo.value.body_snippet == "boom"


def test_not_found_is_retried_then_raised() -> None:
    session = _FakeSession([_response(status_code=404) for _ in range(3)])

    with pytest.raises(mod.FetchError, match="HTTP 404"):
        mod.fetch_title_metadata(999999, "tv", api_key="k", session=session)
    assert len(session.calls) == 3


def test_non_json_payload_raises_fetch_error() -> None:
    resp = _response(text="<html>")
    resp.json.side_effect = ValueError("no json")
    session = _FakeSession([resp])

    with pytest.raises(mod.FetchError, match="non-JSON"):
        mod.fetch_title_metadata(1, "movie", api_key="k", session=session)
