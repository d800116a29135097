import uuid
from typing import Optional
from sqlmodel import Field

from .base import BaseModelDB


class Video(BaseModelDB, table=True):
    """Vidéo d'un utilisateur ; le binaire vit dans le bucket S3/MinIO."""

    title: str = Field(description="Titre de la vidéo")
    description: str = Field(default="", description="Description libre")

    owner_id: uuid.UUID = Field(index=True, description="Propriétaire de la vidéo (sub du JWT)")

    video_key: Optional[str] = Field(
        default=None,
        index=True,
        unique=True,
        description="Clé de l'objet dans le bucket, vide tant qu'aucun upload n'a réussi",
    )
