import json

import requests

from app.core.twelvelabs.client import TwelveLabsClient
from app.core.twelvelabs.keywords import extract_keywords, summary_keywords, top_terms


def _response(status: int, payload=None) -> requests.Response:
    resp = requests.Response()
    resp.status_code = status
    resp._content = json.dumps(payload).encode("utf-8")
    resp.encoding = "utf-8"
    resp.headers["Content-Type"] = "application/json"
    return resp


def _client(videos, on_post) -> TwelveLabsClient:
    return TwelveLabsClient(
        "tl-key",
        base_url="https://tl.test",
        http_get=lambda url, **_: _response(200, {"data": videos}),
        http_post=lambda url, json=None, **_: on_post(url, json),
    )


def test_top_terms_normalizes_and_orders_by_frequency():
    assert top_terms([" Traffic ", "arrest", "traffic", "", "Arrest", "traffic"], 2) == [
        "traffic",
        "arrest",
    ]


def test_top_terms_ties_keep_first_seen_order():
    assert top_terms(["b", "a", "c"], 2) == ["b", "a"]


def test_summary_keywords_skip_short_and_filler_words():
    words = summary_keywords(
        ["The officer stops the vehicle. The officer checks the license!", "This video shows a vehicle."]
    )

    assert words[:2] == ["officer", "vehicle"]
    assert "video" not in words
    assert "the" not in words


def test_gist_topics_and_hashtags_are_combined():
    gists = {
        "v1": {"topics": ["Traffic Stop", "Arrest"], "hashtags": ["#Police", "#traffic"]},
        "v2": {"topics": ["traffic stop"], "hashtags": ["#police"]},
    }
    videos = [{"_id": "v1"}, {"_id": "v2"}]

    report = extract_keywords(_client(videos, lambda url, body: _response(200, gists[body["video_id"]])), "idx")

    assert report.source == "gist"
    assert report.topics == ["traffic stop", "arrest"]
    assert report.hashtags == ["police", "traffic"]
    assert report.keywords == ["traffic stop", "arrest", "police", "traffic"]
    assert report.to_payload()["videoCount"] == 2


def test_failed_gists_fall_back_to_summaries():
    def on_post(url, body):
        if url.endswith("/gist"):
            return _response(500, {"message": "boom"})
        return _response(200, {"summary": "Suspect vehicle pursuit. Vehicle stops near bridge."})

    report = extract_keywords(_client([{"_id": "v1"}], on_post), "idx")

    assert report.source == "summaries"
    assert report.keywords[0] == "vehicle"
    assert set(report.to_payload()) == {"keywords", "source", "videoCount"}


def test_empty_index_reports_message():
    report = extract_keywords(_client([], lambda url, body: _response(500)), "idx")

    assert report.to_payload() == {"keywords": [], "message": "No videos in index"}
