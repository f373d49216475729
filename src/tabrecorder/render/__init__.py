"""Finalization of raw captures into encoded, cataloged artifacts."""

from tabrecorder.render.pipeline import RenderOptions, RenderPipeline, RenderResult, TrackReference
from tabrecorder.render.transcoder import CODEC_PROFILES, CodecProfile, SidechainParams, Transcoder

__all__ = [
    "CODEC_PROFILES",
    "CodecProfile",
    "RenderOptions",
    "RenderPipeline",
    "RenderResult",
    "SidechainParams",
    "TrackReference",
    "Transcoder",
]
