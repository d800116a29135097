"""
➡️ But : Taxonomie des erreurs exposées par l'API médias.

Chaque erreur est une HTTPException au statut figé : FastAPI la rend
directement en JSON ({"detail": "..."}), sans handler dédié.

Les erreurs internes (ffprobe, S3, SQLAlchemy) sont toujours converties en
l'une de ces classes avant de quitter un service.
"""

from typing import Dict, Optional

from fastapi import HTTPException, status


class MediaError(HTTPException):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail: str = "Internal error"

    def __init__(self, detail: Optional[str] = None, headers: Optional[Dict[str, str]] = None):
        super().__init__(
            status_code=self.status_code,
            detail=detail or self.default_detail,
            headers=headers,
        )


class InvalidRequest(MediaError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid request"


class Unauthenticated(MediaError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Invalid token"

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class Forbidden(MediaError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Forbidden"


class NotFound(MediaError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Vidéo introuvable"


class PayloadTooLarge(MediaError):
    status_code = status.HTTP_413_CONTENT_TOO_LARGE
    default_detail = "Fichier trop volumineux"


class UnsupportedMediaType(MediaError):
    status_code = status.HTTP_415_UNSUPPORTED_MEDIA_TYPE
    default_detail = "Type de fichier non supporté"


class DependencyFailure(MediaError):
    # Message volontairement générique : le détail reste dans les logs serveur
    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = "Service de stockage ou d'analyse indisponible"
