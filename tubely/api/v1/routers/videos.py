from typing import Optional

from fastapi import APIRouter, Depends, File, Header, Response, UploadFile, status
from fastapi.responses import StreamingResponse

from tubely.api.v1.dependencies import (
    get_auth_service,
    get_optional_access_token,
    get_video_service,
    get_video_stream_service,
    get_video_upload_service,
)
from tubely.features.authentication.services import AuthService
from tubely.features.media.schemas import VideoCreate, VideoOut
from tubely.features.media.services import VideoService, VideoStreamService, VideoUploadService

router = APIRouter(
    prefix="/videos",
    tags=["videos"],
    responses={404: {"description": "Not Found"}},
)

# -----------------------------
# Création (brouillon, sans fichier)
# -----------------------------
@router.post(
    "",
    summary="Créer une vidéo (métadonnées seules)",
    status_code=status.HTTP_201_CREATED,
    response_model=VideoOut,
    responses={401: {"description": "Non authentifié"}},
)
def create_video(
    payload: VideoCreate,
    access_token: Optional[str] = Depends(get_optional_access_token),
    auth_svc: AuthService = Depends(get_auth_service),
    video_svc: VideoService = Depends(get_video_service),
):
    owner_id = auth_svc.authenticate(access_token)
    video = video_svc.create(payload, owner_id=owner_id)
    return video_svc.to_out(video)

# -----------------------------
# Upload du fichier
# -----------------------------
@router.post(
    "/{video_id}/upload",
    summary="Uploader le fichier d'une vidéo (Back → ffprobe → S3 → DB)",
    description="Reçoit un MP4 (champ `video`), le classe par format d'image puis le range dans le bucket.",
    response_model=VideoOut,
    responses={
        400: {"description": "Requête invalide"},
        401: {"description": "Non authentifié"},
        403: {"description": "Interdit"},
        404: {"description": "Introuvable"},
        413: {"description": "Fichier trop volumineux"},
        415: {"description": "Type non supporté"},
        502: {"description": "ffprobe ou stockage indisponible"},
    },
)
async def upload_video(
    video_id: str,
    video: Optional[UploadFile] = File(None),
    access_token: Optional[str] = Depends(get_optional_access_token),
    upload_svc: VideoUploadService = Depends(get_video_upload_service),
    video_svc: VideoService = Depends(get_video_service),
):
    updated = await upload_svc.upload(video_id, access_token, video)
    return video_svc.to_out(updated)

# -----------------------------
# Lecture (avec Range)
# -----------------------------
@router.get(
    "/{video_id}",
    summary="Lire une vidéo (entière ou plage d'octets)",
    response_class=Response,
    responses={
        200: {"content": {"video/mp4": {}}, "description": "Vidéo entière"},
        206: {"content": {"video/mp4": {}}, "description": "Plage d'octets"},
        400: {"description": "Requête ou plage invalide"},
        404: {"description": "Introuvable"},
    },
)
async def serve_video(
    video_id: str,
    range_header: Optional[str] = Header(default=None, alias="Range"),
    stream_svc: VideoStreamService = Depends(get_video_stream_service),
):
    result = await stream_svc.serve(video_id, range_header)
    return StreamingResponse(result.body, status_code=result.status_code, headers=result.headers)
