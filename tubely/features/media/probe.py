"""
➡️ But : Classer une vidéo (landscape / portrait / other) d'après les dimensions de son flux vidéo.

FFProbe lance l'exécutable ffprobe et rend sa sortie JSON.
AspectClassifier reçoit n'importe quel "prober" (async probe(path) -> dict) :
les tests lui passent un faux qui renvoie des métadonnées préparées.

Toute défaillance de la sonde lève ProbeFailure ; c'est une panne de dépendance,
pas un cas de classification.
"""

import asyncio
import json
import logging
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Protocol, Union

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class AspectRatio(str, Enum):
    LANDSCAPE = "landscape"
    PORTRAIT = "portrait"
    OTHER = "other"


class ProbeFailure(Exception):
    """ffprobe absent, en erreur, ou sortie inexploitable."""


class Prober(Protocol):
    async def probe(self, path: PathLike) -> Dict[str, Any]: ...


class FFProbe:
    def __init__(self, binary: str = "ffprobe"):
        self.binary = binary

    def command(self, path: PathLike):
        return [
            self.binary,
            "-v", "error",
            "-print_format", "json",
            "-show_streams",
            str(path),
        ]

    async def probe(self, path: PathLike) -> Dict[str, Any]:
        try:
            process = await asyncio.create_subprocess_exec(
                *self.command(path),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise ProbeFailure(f"cannot run {self.binary}: {e}") from e

        stdout, stderr = await process.communicate()
        if process.returncode != 0:
            raise ProbeFailure(
                f"{self.binary} exited with {process.returncode}: "
                f"{stderr.decode(errors='replace').strip()}"
            )
        try:
            return json.loads(stdout)
        except ValueError as e:
            raise ProbeFailure(f"unparsable {self.binary} output: {e}") from e


def classify_ratio(width: float, height: float, tolerance: float = 0.1) -> AspectRatio:
    """Bandes testées dans l'ordre : landscape, puis portrait ; sinon other."""
    ratio = width / height
    if abs(ratio - 16 / 9) < tolerance:
        return AspectRatio.LANDSCAPE
    if abs(ratio - 9 / 16) < tolerance:
        return AspectRatio.PORTRAIT
    return AspectRatio.OTHER


def video_dimensions(data: Dict[str, Any]):
    streams = data.get("streams") if isinstance(data, dict) else None
    if not isinstance(streams, list):
        raise ProbeFailure("no streams in probe output")

    stream = next(
        (s for s in streams if isinstance(s, dict) and s.get("codec_type") == "video"),
        None,
    )
    if stream is None:
        raise ProbeFailure("no video stream")

    try:
        width, height = int(stream["width"]), int(stream["height"])
    except (KeyError, TypeError, ValueError) as e:
        raise ProbeFailure("could not extract video dimensions") from e
    if width <= 0 or height <= 0:
        raise ProbeFailure(f"invalid video dimensions {width}x{height}")
    return width, height


class AspectClassifier:
    def __init__(self, prober: Prober, *, tolerance: float = 0.1):
        self.prober = prober
        self.tolerance = tolerance

    async def classify(self, path: PathLike) -> AspectRatio:
        data = await self.prober.probe(path)
        width, height = video_dimensions(data)
        result = classify_ratio(width, height, self.tolerance)
        logger.debug("Probed %s: %dx%d -> %s", path, width, height, result.value)
        return result
