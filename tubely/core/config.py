"""
➡️ But : Centraliser tous les paramètres configurables (nom d'app, chemin DB, secrets, S3, ffprobe...).

Utilise pydantic-settings pour charger automatiquement les variables d'environnement (.env, variables système…).

Fournit un objet settings unique, que tu importes ailleurs :

from tubely.core.config import settings
print(settings.APP_NAME)

Les services ne lisent jamais `settings` directement : ils reçoivent des objets
de configuration figés (JWTSettings, MediaSettings, StorageSettings) construits ici.

🔹 Avantages :

Plus propre que des constantes éparpillées dans le code.

Facilite le passage entre environnements (dev / prod / test).
"""

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from pydantic_settings import BaseSettings
from tubely.security.tokens import JWTSettings


@dataclass(frozen=True)
class MediaSettings:
    """
    Paramètres du pipeline d'upload vidéo.

    - `max_upload_bytes` : plafond de taille d'un upload (1 GiB par défaut)
    - `video_content_type` : seul type MIME accepté à l'upload et servi en lecture
    - `video_ext` : extension des clés générées
    - `temp_dir` : dossier de staging (None -> dossier temporaire système)
    - `ffprobe_bin` : exécutable utilisé pour sonder les flux
    - `aspect_tolerance` : tolérance des bandes landscape / portrait
    """
    max_upload_bytes: int = 1 << 30
    video_content_type: str = "video/mp4"
    video_ext: str = ".mp4"
    temp_dir: Optional[str] = None
    ffprobe_bin: str = "ffprobe"
    aspect_tolerance: float = 0.1


@dataclass(frozen=True)
class StorageSettings:
    """Accès au bucket S3 / MinIO qui contient les vidéos."""
    bucket: str
    region: str = "us-east-1"
    endpoint: Optional[str] = None
    access_key: Optional[str] = None
    secret_key: Optional[str] = None
    public_base_url: Optional[str] = None

    def public_url(self, key: str) -> str:
        base = self.public_base_url or f"https://{self.bucket}.s3.{self.region}.amazonaws.com"
        return f"{base.rstrip('/')}/{key}"


class Settings(BaseSettings):
    # -----------------------------
    # App
    # -----------------------------
    APP_NAME: str = "Tubely"
    ENV: str = "dev"  # dev | prod | test
    LOG_LEVEL: Optional[str] = None  # auto selon ENV si None

    # -----------------------------
    # DB
    # -----------------------------
    SQLITE_PATH: str = "tubely.db"  # fichier SQLite
    # Si tu veux forcer une URL différente (ex: Postgres), définis DATABASE_URL dans l'env.
    DATABASE_URL: Optional[str] = None

    # -----------------------------
    # JWT / Auth
    # -----------------------------
    JWT_SECRET_KEY: str = "CHANGE_ME"     # ⚠️ change en prod
    JWT_ISSUER: str = "tubely"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TTL_MINUTES: int = 60

    # -----------------------------
    # Stockage objet (S3 / MinIO)
    # -----------------------------
    S3_BUCKET: str = "tubely-videos"
    S3_REGION: str = "us-east-1"
    S3_ENDPOINT: Optional[str] = None        # ex: http://localhost:9000 pour MinIO
    S3_KEY: Optional[str] = None
    S3_SECRET: Optional[str] = None
    S3_PUBLIC_BASE_URL: Optional[str] = None  # ex: https://cdn.example.com

    # -----------------------------
    # Médias
    # -----------------------------
    MAX_UPLOAD_BYTES: int = 1 << 30       # 1 GiB
    UPLOAD_TMP_DIR: Optional[str] = None
    FFPROBE_BIN: str = "ffprobe"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
    }

    # -----------------------------
    # Post-process values
    # -----------------------------
    def model_post_init(self, __context): # appelée automatiquement
        # DATABASE_URL par défaut depuis SQLITE_PATH si non fourni
        if not self.DATABASE_URL:
            object.__setattr__(self, "DATABASE_URL", f"sqlite:///{self.SQLITE_PATH}")

        # niveau de log auto : DEBUG en dev, INFO sinon
        if self.LOG_LEVEL is None:
            object.__setattr__(self, "LOG_LEVEL", "DEBUG" if self.ENV == "dev" else "INFO")


# Instance globale importable partout
settings = Settings()

# Objets de configuration prêts à l'emploi pour les services
jwt_settings = JWTSettings(
    secret=settings.JWT_SECRET_KEY,
    issuer=settings.JWT_ISSUER,
    algorithm=settings.JWT_ALGORITHM,
    access_ttl=timedelta(minutes=settings.ACCESS_TTL_MINUTES),
)

media_settings = MediaSettings(
    max_upload_bytes=settings.MAX_UPLOAD_BYTES,
    temp_dir=settings.UPLOAD_TMP_DIR,
    ffprobe_bin=settings.FFPROBE_BIN,
)

storage_settings = StorageSettings(
    bucket=settings.S3_BUCKET,
    region=settings.S3_REGION,
    endpoint=settings.S3_ENDPOINT,
    access_key=settings.S3_KEY,
    secret_key=settings.S3_SECRET,
    public_base_url=settings.S3_PUBLIC_BASE_URL,
)
