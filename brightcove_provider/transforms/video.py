"""
Default video -> catalog video transform.

Normalizes the two image layouts the Brightcove APIs return (CMS
``images.poster.sources`` and playback ``poster_sources``) and the media
renditions into the catalog's ``images`` and ``sources`` arrays. Only
``https`` URLs are kept.
"""

import re
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .collection import PROVIDER_SOURCE

HTTPS_MATCHER = re.compile(r"^https")
MP4_MATCHER = re.compile(r"MP4", re.IGNORECASE)
HLS_MATCHER = re.compile(r"application/x-mpegURL", re.IGNORECASE)

IMAGE_KINDS = ("poster", "thumbnail")


def _is_secure(url: Any) -> bool:
    return isinstance(url, str) and bool(HTTPS_MATCHER.match(url))


def _image_sources(video: Mapping[str, Any], kind: str) -> List[Mapping[str, Any]]:
    images = video.get("images") or {}
    image = images.get(kind) or {}
    sources = list(image.get("sources") or [])
    if not sources and image.get("src"):
        sources = [image]
    if not sources:
        sources = list(video.get(f"{kind}_sources") or [])
    return sources


def format_images(video: Mapping[str, Any]) -> List[Dict[str, Any]]:
    """Map poster then thumbnail variants, secure URLs only."""
    formatted = []
    for kind in IMAGE_KINDS:
        for image in _image_sources(video, kind):
            if not _is_secure(image.get("src")):
                continue
            width = image.get("width")
            height = image.get("height")
            label = f"{kind}-{width or 0}x{height or 0}"
            formatted.append({
                "url": image["src"],
                "height": height or 0,
                "width": width or 0,
                "label": label,
            })
    return formatted


def _mime_type(source: Mapping[str, Any]) -> str:
    if source.get("type"):
        return source["type"]
    if MP4_MATCHER.search(source.get("container") or ""):
        return "video/mp4"
    return ""


def _label(source: Mapping[str, Any], mime_type: str, index: int) -> str:
    if MP4_MATCHER.search(source.get("container") or ""):
        return f"mp4-{source.get('width') or 0}x{source.get('height') or 0}"
    if HLS_MATCHER.search(mime_type):
        return "hls"
    return str(source.get("asset_id") or index)


def format_sources(sources: Optional[Sequence[Mapping[str, Any]]]) -> List[Dict[str, Any]]:
    """Map renditions, dropping src-less and non-https ones; order is kept."""
    secure = [source for source in sources or [] if _is_secure(source.get("src"))]

    formatted = []
    for index, source in enumerate(secure):
        mime_type = _mime_type(source)
        formatted.append({
            "url": source["src"],
            "container": source.get("container"),
            "mimeType": mime_type,
            "width": source.get("width") or 0,
            "height": source.get("height") or 0,
            "maxBitrate": source.get("encoding_rate") or source.get("avg_bitrate") or 0,
            "label": _label(source, mime_type, index),
        })
    return formatted


def video_transform(
    spec: Mapping[str, Any],
    video: Mapping[str, Any],
    sources: Optional[Sequence[Mapping[str, Any]]],
) -> Dict[str, Any]:
    return {
        "id": f"res-{PROVIDER_SOURCE}-video-{video.get('id')}",
        "title": video.get("name") or "",
        "description": video.get("long_description") or video.get("description") or "",
        "images": format_images(video),
        "sources": format_sources(sources),
        "duration": video.get("duration") or 0,
        "releaseDate": video.get("published_at"),
    }
