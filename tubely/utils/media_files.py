import secrets
from typing import Optional

# Schéma de nommage des objets vidéo, versionné.
#   v1 : "<classification>/<64 hex>.mp4", ou "<64 hex>.mp4" sans classification
KEY_SCHEME_VERSION = 1

KEY_RANDOM_BYTES = 32


def generate_video_key(classification: Optional[str] = None, *, ext: str = ".mp4") -> str:
    """
    Construit une clé S3/MinIO imprévisible, rangée par classification.
    Exemple:
      classification="landscape" -> landscape/9f2c...e1.mp4

    Aucune vérification d'existence : l'unicité repose sur les 32 octets aléatoires.
    """
    ext = ext if ext.startswith(".") else f".{ext}"
    name = f"{secrets.token_hex(KEY_RANDOM_BYTES)}{ext}"
    if classification:
        return f"{classification.strip('/')}/{name}"
    return name
