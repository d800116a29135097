import logging
import os
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, Iterable, Optional

from fastapi import UploadFile
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.exc import SQLAlchemyError

from tubely.core.config import MediaSettings, StorageSettings
from tubely.core.errors import (
    DependencyFailure,
    Forbidden,
    InvalidRequest,
    NotFound,
    PayloadTooLarge,
    UnsupportedMediaType,
)
from tubely.db.models.base import utcnow
from tubely.db.models.videos import Video
from tubely.db.repositories.videos import VideoRepository
from tubely.features.authentication.services import AuthService
from tubely.features.media.probe import AspectClassifier, ProbeFailure
from tubely.features.media.ranges import parse_range_header
from tubely.features.media.schemas import VideoCreate, VideoOut
from tubely.utils.media_files import generate_video_key
from tubely.utils.s3 import ObjectNotFound, ObjectStoreError, S3ObjectStore
from tubely.utils.staging import StagedFile, StagingArea

logger = logging.getLogger(__name__)


def parse_video_id(video_id: Optional[str]) -> uuid.UUID:
    if not video_id:
        raise InvalidRequest("Invalid video ID")
    try:
        return uuid.UUID(str(video_id))
    except ValueError:
        raise InvalidRequest("Invalid video ID")


def _load_video(repo: VideoRepository, video_id: uuid.UUID) -> Optional[Video]:
    try:
        return repo.get(video_id)
    except SQLAlchemyError as e:
        logger.error("Could not load video %s: %s", video_id, e)
        raise DependencyFailure() from e


def _upload_size(file: UploadFile) -> int:
    if file.size is not None:
        return file.size
    f = file.file
    pos = f.tell()
    f.seek(0, os.SEEK_END)
    size = f.tell()
    f.seek(pos)
    return size


class VideoService:
    """Brouillons de vidéos (métadonnées seules) et mise en forme des réponses."""

    def __init__(self, *, repo: VideoRepository, storage: StorageSettings):
        self.repo = repo
        self.storage = storage

    def create(self, payload: VideoCreate, *, owner_id: uuid.UUID) -> Video:
        try:
            return self.repo.create(
                title=payload.title,
                description=payload.description,
                owner_id=owner_id,
            )
        except SQLAlchemyError as e:
            logger.error("Could not create video for user %s: %s", owner_id, e)
            raise DependencyFailure() from e

    def to_out(self, video: Video) -> VideoOut:
        return VideoOut(
            id=video.id,
            owner_id=video.owner_id,
            title=video.title,
            description=video.description,
            video_key=video.video_key,
            video_url=self.storage.public_url(video.video_key) if video.video_key else None,
            created_at=video.created_at,
            updated_at=video.updated_at,
        )


class VideoUploadService:
    """
    Pipeline d'upload : chaque étape est bloquante, la première erreur arrête tout.

    validation -> auth -> chargement -> propriétaire -> taille -> type
    -> staging -> ffprobe -> clé -> S3 -> DB -> suppression du fichier temporaire.

    Rien n'est écrit (S3 ou DB) avant que le fichier soit analysé. Si la DB échoue
    après l'écriture S3, l'objet reste orphelin dans le bucket : c'est journalisé, pas corrigé.
    """

    def __init__(
        self,
        *,
        repo: VideoRepository,
        auth: AuthService,
        store: S3ObjectStore,
        classifier: AspectClassifier,
        staging: StagingArea,
        media: MediaSettings,
        now_fn: Callable[[], datetime] = utcnow,
    ):
        self.repo = repo
        self.auth = auth
        self.store = store
        self.classifier = classifier
        self.staging = staging
        self.media = media
        self.now_fn = now_fn

    async def upload(
        self,
        video_id: Optional[str],
        access_token: Optional[str],
        file: Optional[UploadFile],
    ) -> Video:
        vid = parse_video_id(video_id)
        user_id = self.auth.authenticate(access_token)

        logger.info("uploading video %s by user %s", vid, user_id)

        video = _load_video(self.repo, vid)
        if not video:
            raise NotFound("Vidéo introuvable")
        if video.owner_id != user_id:
            raise Forbidden("You are not authorized to upload videos for this video")

        if file is None:
            raise InvalidRequest("Invalid video file")

        max_bytes = self.media.max_upload_bytes
        if _upload_size(file) > max_bytes:
            raise PayloadTooLarge(f"File size exceeds {max_bytes} bytes limit")

        content_type = (file.content_type or "").split(";", 1)[0].strip().lower()
        if content_type != self.media.video_content_type:
            raise UnsupportedMediaType(f"Invalid file type. Only {self.media.video_content_type} videos are allowed")

        await file.seek(0)
        try:
            with self.staging.staged() as handle:
                await run_in_threadpool(self.staging.write, handle, file.file)

                try:
                    aspect = await self.classifier.classify(handle.path)
                except ProbeFailure as e:
                    logger.error("Aspect ratio probe failed for video %s: %s", vid, e)
                    raise DependencyFailure("Failed to analyze video aspect ratio") from e

                key = generate_video_key(aspect.value, ext=self.media.video_ext)
                try:
                    await run_in_threadpool(self._put_staged, key, handle)
                except (ObjectStoreError, OSError) as e:
                    logger.error("Upload of video %s to %s failed: %s", vid, key, e)
                    raise DependencyFailure() from e

                try:
                    video = self.repo.update(video, video_key=key, updated_at=self.now_fn())
                except SQLAlchemyError as e:
                    logger.error(
                        "Video %s stored at %s but DB update failed, object is orphaned: %s",
                        vid, key, e,
                    )
                    raise DependencyFailure() from e
        except OSError as e:
            # seules les erreurs disque du staging arrivent ici, les autres sont déjà converties
            logger.error("Could not stage upload for video %s: %s", vid, e)
            raise DependencyFailure() from e

        logger.info("video %s uploaded to %s (%d bytes, %s)", vid, key, handle.size, aspect.value)
        return video

    def _put_staged(self, key: str, handle: StagedFile) -> None:
        with open(handle.path, "rb") as body:
            self.store.put(key, body, self.media.video_content_type)


@dataclass
class VideoStream:
    status_code: int
    headers: Dict[str, str] = field(default_factory=dict)
    # morceaux lus depuis S3 au fil de l'envoi, jamais la vidéo entière en mémoire
    body: Iterable[bytes] = ()


class VideoStreamService:
    """Lecture d'une vidéo depuis S3/MinIO, entière (200) ou sur une plage d'octets (206)."""

    def __init__(self, *, repo: VideoRepository, store: S3ObjectStore, media: MediaSettings):
        self.repo = repo
        self.store = store
        self.media = media

    async def serve(self, video_id: Optional[str], range_header: Optional[str] = None) -> VideoStream:
        vid = parse_video_id(video_id)

        video = _load_video(self.repo, vid)
        if not video or not video.video_key:
            raise NotFound("Vidéo introuvable")

        key = video.video_key
        try:
            return await run_in_threadpool(self._open, key, range_header)
        except ObjectNotFound:
            logger.warning("Video %s references missing object %s", vid, key)
            raise NotFound("Video file not found in storage")
        except ObjectStoreError as e:
            logger.error("Error serving video %s from %s: %s", vid, key, e)
            raise DependencyFailure("Failed to serve video") from e

    def _open(self, key: str, range_header: Optional[str]) -> VideoStream:
        if not self.store.exists(key):
            raise ObjectNotFound(key)
        size = self.store.size(key)

        headers = {
            "Accept-Ranges": "bytes",
            "Content-Type": self.media.video_content_type,
        }

        if not range_header:
            headers["Content-Length"] = str(size)
            return VideoStream(status_code=200, headers=headers, body=self.store.stream(key))

        try:
            byte_range = parse_range_header(range_header, size)
        except ValueError as e:
            raise InvalidRequest(f"Invalid range request: {e}")

        body = self.store.stream(key, byte_range.start, byte_range.end)
        headers["Content-Range"] = byte_range.content_range
        headers["Content-Length"] = str(byte_range.length)
        return VideoStream(status_code=206, headers=headers, body=body)
