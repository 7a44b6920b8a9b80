# response_resolver.py
# ------------------------------------------------------------------------------------
#  Turns whatever JSON the video provider answered with into one of:
#    RemoteVideo(url)          -> asset must be downloaded
#    InlineVideo(data_base64)  -> asset came back inline
#    Unrecognized(body)        -> keep the body around for debugging
#  Provider schemas vary between API versions, so each known shape is a
#  separate probe and the first probe that matches wins.
# ------------------------------------------------------------------------------------
import base64
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Union


@dataclass(frozen=True)
class RemoteVideo:
    url: str


@dataclass(frozen=True)
class InlineVideo:
    data_base64: str

    def decode(self) -> bytes:
        # MIME-wrapped payloads carry newlines; anything else non-base64 is rejected.
        return base64.b64decode("".join(self.data_base64.split()), validate=True)


@dataclass(frozen=True)
class Unrecognized:
    body: Any


Resolution = Union[RemoteVideo, InlineVideo, Unrecognized]


def _first(body: dict, field: str) -> Optional[dict]:
    items = body.get(field)
    if isinstance(items, list) and items and isinstance(items[0], dict):
        return items[0]
    return None


def _from_output_list(body: dict) -> Optional[Resolution]:
    # {"output": [{"uri": ...}]} or {"output": [{"content": b64, "contentType": "video/mp4"}]}
    out0 = _first(body, "output")
    if out0 is None:
        return None
    if out0.get("uri"):
        return RemoteVideo(out0["uri"])
    content_type = out0.get("contentType")
    if out0.get("content") and isinstance(content_type, str) and content_type.startswith("video"):
        return InlineVideo(out0["content"])
    return None


def _from_output_uri(body: dict) -> Optional[Resolution]:
    if body.get("outputUri"):
        return RemoteVideo(body["outputUri"])
    return None


def _from_result_list(body: dict) -> Optional[Resolution]:
    res0 = _first(body, "result")
    if res0 is not None and res0.get("uri"):
        return RemoteVideo(res0["uri"])
    return None


PROBES: List[Callable[[dict], Optional[Resolution]]] = [
    _from_output_list,
    _from_output_uri,
    _from_result_list,
]


def resolve(body: Any) -> Resolution:
    if isinstance(body, dict):
        for probe in PROBES:
            found = probe(body)
            if found is not None:
                return found
    return Unrecognized(body)
