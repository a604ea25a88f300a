from __future__ import annotations

from typing import Callable

from loguru import logger

from .urls import build_proxy_url, is_segment_reference, manifest_base, resolve_segment_url

_ERROR_DETAIL_LIMIT = 200


def build_error_manifest(title: str, detail: str = "") -> str:
    """
    Build a minimal, syntactically valid HLS playlist that carries an error.

    Players parse this instead of failing on a JSON body and report the error
    through their own error path.

    Parameters:
        title (str): Short error label placed in the `#EXT-X-ERROR` tag (e.g. "404 Not Found").
        detail (str): Free-form detail, collapsed to one line and capped at 200 characters.

    Returns:
        str: Playlist text starting with `#EXTM3U`.
    """
    one_line = " ".join(detail.split())[:_ERROR_DETAIL_LIMIT]
    title_line = " ".join(title.split())
    return (
        "#EXTM3U\n"
        "#EXT-X-VERSION:3\n"
        f"#EXT-X-ERROR:{title_line}\n"
        f"# {one_line}"
    )


def rewrite_manifest(
    playlist_text: str,
    *,
    manifest_url: str,
    rewrite_url: Callable[[str], str] = build_proxy_url,
) -> str:
    """
    Route every segment line of an HLS playlist back through the proxy.

    Empty lines and `#` lines (tags and comments) are kept byte-for-byte. Other
    lines are rewritten only when, once trimmed, they end in `.ts` or `.m4s`;
    relative references are first resolved against the manifest directory.
    Line order and the trailing newline are preserved.

    Parameters:
        playlist_text (str): Raw playlist text from the upstream host.
        manifest_url (str): URL the playlist was fetched from, used to resolve relative segments.
        rewrite_url (Callable[[str], str]): Maps an absolute segment URL to its proxied form.

    Returns:
        str: The rewritten playlist, or `playlist_text` unchanged when the manifest URL cannot be used as a base.
    """
    logger.debug("Rewriting HLS manifest from {}", manifest_url[:150])
    try:
        base = manifest_base(manifest_url)
    except ValueError as exc:
        logger.warning("Manifest base resolution failed, serving unrewritten: {}", exc)
        return playlist_text

    out_lines: list[str] = []
    rewritten = 0
    for line in playlist_text.split("\n"):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            out_lines.append(line)
            continue
        if not is_segment_reference(stripped):
            out_lines.append(line)
            continue
        try:
            absolute = resolve_segment_url(stripped, base)
        except ValueError as exc:
            logger.warning(
                "Segment resolution failed, serving unrewritten manifest: {}", exc
            )
            return playlist_text
        out_lines.append(rewrite_url(absolute))
        rewritten += 1

    logger.debug("Rewrote {} segment lines", rewritten)
    return "\n".join(out_lines)
