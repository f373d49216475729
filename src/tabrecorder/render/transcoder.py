"""ffmpeg command construction and execution for final artifacts."""

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path

from tabrecorder.recordings.exceptions import TranscodeError
from tabrecorder.recordings.models import OutputFormat

logger = logging.getLogger(__name__)

OUTPUT_CHANNELS = 2
OUTPUT_SAMPLE_RATE = 48000

# Mixed track weights: system audio sits under the voice
SYSTEM_MIX_WEIGHT = 0.7
MIC_MIX_WEIGHT = 1.0

STDERR_TAIL_CHARS = 2000


@dataclass(frozen=True)
class CodecProfile:
    """Encoder and bitrate for an output format."""

    codec: str
    bitrate: str


CODEC_PROFILES: dict[OutputFormat, CodecProfile] = {
    OutputFormat.MP3: CodecProfile(codec="libmp3lame", bitrate="320k"),
    OutputFormat.AAC: CodecProfile(codec="aac", bitrate="256k"),
    OutputFormat.OPUS: CodecProfile(codec="libopus", bitrate="256k"),
}


@dataclass(frozen=True)
class SidechainParams:
    """Side-chain compressor settings used to duck system audio under the mic."""

    threshold: float = 0.02  # linear
    ratio: float = 4.0
    attack_ms: float = 50.0
    release_ms: float = 500.0

    def filter_args(self) -> str:
        """Render as ffmpeg ``sidechaincompress`` options."""
        return (
            f"threshold={self.threshold:g}:ratio={self.ratio:g}"
            f":attack={self.attack_ms:g}:release={self.release_ms:g}"
        )


DUCKING = SidechainParams()


def _amix(inputs: str, output: str) -> str:
    return (
        f"{inputs}amix=inputs=2:duration=longest"
        f":weights={SYSTEM_MIX_WEIGHT:g} {MIC_MIX_WEIGHT:g}{output}"
    )


def _output_args(output_format: OutputFormat, output_path: Path) -> list[str]:
    profile = CODEC_PROFILES[output_format]
    return [
        "-ac",
        str(OUTPUT_CHANNELS),
        "-ar",
        str(OUTPUT_SAMPLE_RATE),
        "-c:a",
        profile.codec,
        "-b:a",
        profile.bitrate,
        str(output_path),
    ]


def build_encode_args(
    input_path: Path, output_path: Path, output_format: OutputFormat
) -> list[str]:
    """Arguments encoding a single input as a standalone track."""
    return [
        "-hide_banner",
        "-nostdin",
        "-y",
        "-i",
        str(input_path),
        *_output_args(output_format, output_path),
    ]


def build_mix_filter(duck: bool, sidechain: SidechainParams = DUCKING) -> str:
    """The ``-filter_complex`` graph mixing system (input 0) with mic (input 1).

    With ducking the mic is split so one copy drives a side-chain compressor
    on the system audio while the other is mixed in unmodified.
    """
    if not duck:
        return _amix("[0:a][1:a]", "[out]")
    return ";".join(
        [
            "[1:a]asplit=2[sc][mic]",
            f"[0:a][sc]sidechaincompress={sidechain.filter_args()}[ducked]",
            _amix("[ducked][mic]", "[out]"),
        ]
    )


def build_mix_args(
    system_input: Path,
    mic_input: Path,
    output_path: Path,
    output_format: OutputFormat,
    duck: bool,
) -> list[str]:
    """Arguments producing the mixed track from the two raw inputs."""
    return [
        "-hide_banner",
        "-nostdin",
        "-y",
        "-i",
        str(system_input),
        "-i",
        str(mic_input),
        "-filter_complex",
        build_mix_filter(duck),
        "-map",
        "[out]",
        *_output_args(output_format, output_path),
    ]


class Transcoder:
    """Runs ffmpeg as a subprocess with a bounded timeout and concurrency limit."""

    def __init__(
        self,
        ffmpeg_path: str = "ffmpeg",
        timeout_seconds: float = 600.0,
        max_concurrent: int = 4,
    ) -> None:
        """Initialize the transcoder.

        Args:
            ffmpeg_path: ffmpeg executable name or path
            timeout_seconds: Per-encode wall clock limit; the process is killed when exceeded
            max_concurrent: Maximum ffmpeg processes running at once across all renders
        """
        self.ffmpeg_path = ffmpeg_path
        self.timeout_seconds = timeout_seconds
        self._slots = asyncio.Semaphore(max_concurrent)

    async def encode(
        self, input_path: Path, output_path: Path, output_format: OutputFormat
    ) -> Path:
        """Encode one raw input into a standalone track."""
        args = build_encode_args(input_path, output_path, output_format)
        await self.run(args, CODEC_PROFILES[output_format].codec)
        return output_path

    async def mix(
        self,
        system_input: Path,
        mic_input: Path,
        output_path: Path,
        output_format: OutputFormat,
        duck: bool,
    ) -> Path:
        """Mix the two raw inputs into one track, optionally ducking system audio."""
        args = build_mix_args(system_input, mic_input, output_path, output_format, duck)
        await self.run(args, CODEC_PROFILES[output_format].codec)
        return output_path

    async def run(self, args: list[str], codec: str) -> None:
        """Execute ffmpeg with args.

        Raises:
            TranscodeError: On a non-zero exit, a timeout, or a missing executable
        """
        async with self._slots:
            logger.debug("Running %s %s", self.ffmpeg_path, " ".join(args))
            try:
                process = await asyncio.create_subprocess_exec(
                    self.ffmpeg_path,
                    *args,
                    stdin=asyncio.subprocess.DEVNULL,
                    stdout=asyncio.subprocess.DEVNULL,
                    stderr=asyncio.subprocess.PIPE,
                )
            except FileNotFoundError as e:
                raise TranscodeError(
                    f"ffmpeg executable not found: {self.ffmpeg_path}", codec=codec
                ) from e

            try:
                _, stderr = await asyncio.wait_for(
                    process.communicate(), timeout=self.timeout_seconds
                )
            except TimeoutError as e:
                process.kill()
                await process.wait()
                raise TranscodeError(
                    f"ffmpeg exceeded {self.timeout_seconds:g}s", codec=codec, timed_out=True
                ) from e

        if process.returncode != 0:
            message = stderr.decode(errors="replace")[-STDERR_TAIL_CHARS:] if stderr else ""
            logger.error("ffmpeg failed with exit %s: %s", process.returncode, message.strip())
            raise TranscodeError(
                "ffmpeg failed", codec=codec, returncode=process.returncode, stderr=message
            )
