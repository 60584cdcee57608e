from __future__ import annotations

import html
import json
from typing import Any, List

from pydantic import BaseModel, ConfigDict


class _MediaItem(BaseModel):
    model_config = ConfigDict(extra="ignore")

    src: str


class ImageItem(_MediaItem):
    caption: str = ""


class VideoItem(_MediaItem):
    type: str
    poster: str = ""


class AudioItem(_MediaItem):
    type: str


class MultimediaCatalog(BaseModel):
    images: List[ImageItem]
    videos: List[VideoItem]
    audios: List[AudioItem]

    @classmethod
    def from_json(cls, text: str) -> "MultimediaCatalog":
        """
        Parse `multimedia.json`: a three-element array `[images, videos, audios]`.

        Raises `ValueError` (or pydantic's `ValidationError`) on malformed input.
        """
        data: Any = json.loads(text)
        if not isinstance(data, list) or len(data) != 3:
            raise ValueError("multimedia catalogue must be a three-element array [images, videos, audios]")
        return cls.model_validate({"images": data[0], "videos": data[1], "audios": data[2]})


def _attr(text: str) -> str:
    return html.escape(str(text or ""), quote=True)


def figure_component(src: str, caption: str) -> str:
    return (
        f'<figure class="text-justify"><img class="icon-media thumbnail" src="{_attr(src)}" alt="{_attr(src)}"/>'
        f"<figcaption>{_attr(caption)}</figcaption></figure>"
    )


def video_component(src: str, type: str, poster: str) -> str:
    return (
        f'<video class="icon-media thumbnail" poster="{_attr(poster)}" controls>'
        f'<source src="{_attr(src)}" type="{_attr(type)}">Vaš Web preglednik ne podržava video!</video>'
    )


def audio_component(src: str, type: str) -> str:
    return f'<audio controls muted><source src="{_attr(src)}" type="{_attr(type)}"/>Vaš Web preglednik ne podržava audio!</audio>'


def render_gallery(template: str, catalog: MultimediaCatalog) -> str:
    page = template
    page = page.replace("@img", "".join(figure_component(i.src, i.caption) for i in catalog.images), 1)
    page = page.replace("@video", "".join(video_component(v.src, v.type, v.poster) for v in catalog.videos), 1)
    page = page.replace("@audio", "".join(audio_component(a.src, a.type) for a in catalog.audios), 1)
    return page
