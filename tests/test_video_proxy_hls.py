from app.core.video_proxy.hls import build_error_manifest, rewrite_manifest


def _proxy_rewrite(u: str) -> str:
    """
    Prefix the given URL with a fake proxy scheme.
    """
    return f"proxy://{u}"


def test_rewrite_matches_stream_directory_example():
    playlist = "#EXTM3U\n#EXT-X-VERSION:3\nseg0.ts\nseg1.ts\n"

    rewritten = rewrite_manifest(
        playlist, manifest_url="https://cdn.example.com/v1/stream/index.m3u8"
    )

    assert rewritten == (
        "#EXTM3U\n"
        "#EXT-X-VERSION:3\n"
        "/api/video-proxy?url=https%3A%2F%2Fcdn.example.com%2Fv1%2Fstream%2Fseg0.ts\n"
        "/api/video-proxy?url=https%3A%2F%2Fcdn.example.com%2Fv1%2Fstream%2Fseg1.ts\n"
    )


def test_directive_and_empty_lines_are_byte_identical():
    playlist = (
        "#EXTM3U\r\n"
        "#EXT-X-TARGETDURATION:6\n"
        '#EXT-X-KEY:METHOD=AES-128,URI="key.bin"\n'
        "\n"
        "   \n"
        "#EXTINF:6.0,\n"
        "seg.ts\n"
        "# free comment with seg.ts\n"
        "#EXT-X-ENDLIST"
    )

    rewritten = rewrite_manifest(
        playlist, manifest_url="https://h/a/index.m3u8", rewrite_url=_proxy_rewrite
    )
    in_lines = playlist.split("\n")
    out_lines = rewritten.split("\n")

    assert len(in_lines) == len(out_lines)
    for before, after in zip(in_lines, out_lines):
        if not before.strip() or before.strip().startswith("#"):
            assert before == after
    assert out_lines[6] == "proxy://https://h/a/seg.ts"


def test_only_segment_lines_are_rewritten():
    playlist = (
        "#EXTM3U\n"
        "#EXT-X-STREAM-INF:BANDWIDTH=800000\n"
        "low/playlist.m3u8\n"
        "init.mp4\n"
        "seg.ts?token=1\n"
        "  part1.m4s  \n"
        "https://cdn.other.net/abs/seg2.ts\n"
    )

    rewritten = rewrite_manifest(
        playlist, manifest_url="https://h/a/master.m3u8", rewrite_url=_proxy_rewrite
    )

    assert rewritten.split("\n") == [
        "#EXTM3U",
        "#EXT-X-STREAM-INF:BANDWIDTH=800000",
        "low/playlist.m3u8",
        "init.mp4",
        "seg.ts?token=1",
        "proxy://https://h/a/part1.m4s",
        "proxy://https://cdn.other.net/abs/seg2.ts",
        "",
    ]


def test_relative_segment_resolves_against_manifest_directory():
    rewritten = rewrite_manifest(
        "seg1.ts", manifest_url="https://host/a/b/index.m3u8", rewrite_url=_proxy_rewrite
    )
    assert rewritten == "proxy://https://host/a/b/seg1.ts"


def test_uppercase_segment_suffix_is_rewritten():
    rewritten = rewrite_manifest(
        "#EXTINF:6.0,\nSEG0.TS\nPart.M4S",
        manifest_url="https://host/a/index.m3u8",
        rewrite_url=_proxy_rewrite,
    )

    assert rewritten.split("\n") == [
        "#EXTINF:6.0,",
        "proxy://https://host/a/SEG0.TS",
        "proxy://https://host/a/Part.M4S",
    ]


def test_malformed_manifest_url_returns_original_body():
    playlist = "#EXTM3U\nseg0.ts\n"

    rewritten = rewrite_manifest(
        playlist, manifest_url="index.m3u8", rewrite_url=_proxy_rewrite
    )

    assert rewritten == playlist


def test_error_manifest_shape():
    body = build_error_manifest("404 Not Found", "line one\nline two " + "x" * 400)
    lines = body.split("\n")

    assert lines[0] == "#EXTM3U"
    assert lines[1] == "#EXT-X-VERSION:3"
    assert lines[2] == "#EXT-X-ERROR:404 Not Found"
    assert lines[3].startswith("# line one line two x")
    assert len(lines) == 4
    assert len(lines[3]) <= 2 + 200
