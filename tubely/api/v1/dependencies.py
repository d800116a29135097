"""
➡️ But : Centraliser les dépendances réutilisables des routes.

Exemples :

get_video_upload_service() : assemble le pipeline d'upload (repo, auth, S3, ffprobe, staging).

get_object_store() / get_aspect_classifier() : points d'injection remplacés dans les tests
(app.dependency_overrides) par un faux bucket et une fausse sonde.

🔹 Avantages :

Routes plus propres (pas de code dupliqué).

Facile à injecter dans plusieurs endpoints (Depends()).
"""

from functools import lru_cache
from typing import Optional

from fastapi import Depends, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlmodel import Session

from tubely.core.config import jwt_settings, media_settings, storage_settings
from tubely.core.errors import Unauthenticated
from tubely.db.session import get_session

from tubely.db.repositories.videos import VideoRepository
from tubely.features.authentication.services import AuthService
from tubely.features.media.probe import AspectClassifier, FFProbe
from tubely.features.media.services import VideoService, VideoStreamService, VideoUploadService
from tubely.utils.s3 import S3ObjectStore, make_s3_client
from tubely.utils.staging import StagingArea


# -----------------------------
# Auth
# -----------------------------
def get_auth_service() -> AuthService:
    return AuthService(jwt_settings=jwt_settings)


# -----------------------------
# Repositories
# -----------------------------
def get_video_repository(session: Session = Depends(get_session)) -> VideoRepository:
    return VideoRepository(session)


# -----------------------------
# Infra médias (S3, ffprobe, staging)
# -----------------------------
@lru_cache
def _s3_client():
    # un client boto3 est thread-safe : un seul pour tout le process
    return make_s3_client(storage_settings)

def get_object_store() -> S3ObjectStore:
    return S3ObjectStore(_s3_client(), storage_settings.bucket)

def get_aspect_classifier() -> AspectClassifier:
    return AspectClassifier(
        FFProbe(media_settings.ffprobe_bin),
        tolerance=media_settings.aspect_tolerance,
    )

def get_staging_area() -> StagingArea:
    return StagingArea(media_settings.temp_dir, suffix=media_settings.video_ext)


# -----------------------------
# Media services
# -----------------------------
def get_video_service(
    video_repo: VideoRepository = Depends(get_video_repository),
) -> VideoService:
    return VideoService(repo=video_repo, storage=storage_settings)

def get_video_upload_service(
    video_repo: VideoRepository = Depends(get_video_repository),
    auth_svc: AuthService = Depends(get_auth_service),
    store: S3ObjectStore = Depends(get_object_store),
    classifier: AspectClassifier = Depends(get_aspect_classifier),
    staging: StagingArea = Depends(get_staging_area),
) -> VideoUploadService:
    return VideoUploadService(
        repo=video_repo,
        auth=auth_svc,
        store=store,
        classifier=classifier,
        staging=staging,
        media=media_settings,
    )

def get_video_stream_service(
    video_repo: VideoRepository = Depends(get_video_repository),
    store: S3ObjectStore = Depends(get_object_store),
) -> VideoStreamService:
    return VideoStreamService(repo=video_repo, store=store, media=media_settings)


# -----------------------------
# Authentication data
# -----------------------------
# auto_error=False : l'absence de token est traitée par le service (401), à son tour dans le pipeline
bearer_scheme = HTTPBearer(auto_error=False)

def get_optional_access_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
) -> Optional[str]:
    if not credentials:
        return None
    if credentials.scheme.lower() != "bearer":
        raise Unauthenticated("Invalid auth scheme")
    return credentials.credentials
