"""Default playlist -> collection transform."""

from typing import Any, Dict, Mapping

PROVIDER_SOURCE = "brightcove"


def collection_transform(spec: Mapping[str, Any], playlist: Mapping[str, Any]) -> Dict[str, Any]:
    # Brightcove playlists carry no artwork
    return {
        "id": f"res-{PROVIDER_SOURCE}-playlist-{playlist.get('id')}",
        "title": playlist.get("name"),
        "description": playlist.get("description"),
        "images": [],
    }
