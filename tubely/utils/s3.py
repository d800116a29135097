import logging
from typing import BinaryIO, Iterator, Optional, Union

import boto3
from botocore.client import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from tubely.core.config import StorageSettings

logger = logging.getLogger(__name__)

_MISSING_CODES = {"404", "NoSuchKey", "NotFound"}
# morceaux envoyés au client pendant la lecture d'une vidéo
STREAM_CHUNK_BYTES = 1 << 20


class ObjectStoreError(Exception):
    """Échec S3/MinIO inattendu (réseau, droits, bucket absent...)."""


class ObjectNotFound(ObjectStoreError):
    """L'objet demandé n'existe pas (ou plus) dans le bucket."""


def make_s3_client(cfg: StorageSettings):
    boto_cfg = BotoConfig(
        signature_version="s3v4",
        s3={"addressing_style": "path" if cfg.endpoint else "auto"},
    )
    return boto3.client(
        "s3",
        endpoint_url=cfg.endpoint,
        region_name=cfg.region,
        aws_access_key_id=cfg.access_key,
        aws_secret_access_key=cfg.secret_key,
        config=boto_cfg,
    )


def _is_missing(e: ClientError) -> bool:
    return str(e.response.get("Error", {}).get("Code")) in _MISSING_CODES


class S3ObjectStore:
    """
    Accès minimal au bucket vidéo : put / exists / size / get et stream (avec plage) / delete.
    Toutes les erreurs botocore sont converties en ObjectStoreError / ObjectNotFound.
    """

    def __init__(self, client, bucket: str):
        self.s3 = client
        self.bucket = bucket

    def put(self, key: str, body: Union[bytes, BinaryIO], content_type: str) -> None:
        try:
            self.s3.put_object(Bucket=self.bucket, Key=key, Body=body, ContentType=content_type)
        except (ClientError, BotoCoreError) as e:
            raise ObjectStoreError(f"put_object {key} failed: {e}") from e

    def _head(self, key: str) -> Optional[dict]:
        try:
            return self.s3.head_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            if _is_missing(e):
                return None
            raise ObjectStoreError(f"head_object {key} failed: {e}") from e
        except BotoCoreError as e:
            raise ObjectStoreError(f"head_object {key} failed: {e}") from e

    def exists(self, key: str) -> bool:
        return self._head(key) is not None

    def size(self, key: str) -> int:
        head = self._head(key)
        if head is None:
            raise ObjectNotFound(key)
        return int(head["ContentLength"])

    def _get_object(self, key: str, start: Optional[int], end: Optional[int]) -> dict:
        params = {"Bucket": self.bucket, "Key": key}
        if start is not None:
            params["Range"] = f"bytes={start}-{'' if end is None else end}"
        try:
            return self.s3.get_object(**params)
        except ClientError as e:
            if _is_missing(e):
                raise ObjectNotFound(key) from e
            raise ObjectStoreError(f"get_object {key} failed: {e}") from e
        except BotoCoreError as e:
            raise ObjectStoreError(f"get_object {key} failed: {e}") from e

    def get(self, key: str, start: Optional[int] = None, end: Optional[int] = None) -> bytes:
        """Lit l'objet entier, ou seulement les octets [start, end] (bornes incluses)."""
        resp = self._get_object(key, start, end)
        try:
            return resp["Body"].read()
        except (ClientError, BotoCoreError) as e:
            raise ObjectStoreError(f"get_object {key} failed: {e}") from e

    def stream(
        self,
        key: str,
        start: Optional[int] = None,
        end: Optional[int] = None,
        chunk_size: int = STREAM_CHUNK_BYTES,
    ) -> Iterator[bytes]:
        """
        Comme get(), mais renvoie le corps par morceaux.
        La requête get_object part tout de suite : objet absent ou bucket en panne
        lèvent ici, avant que la réponse HTTP ne commence.
        """
        resp = self._get_object(key, start, end)
        return self._iter_body(key, resp["Body"], chunk_size)

    @staticmethod
    def _iter_body(key: str, body, chunk_size: int) -> Iterator[bytes]:
        try:
            yield from body.iter_chunks(chunk_size)
        except (ClientError, BotoCoreError) as e:
            raise ObjectStoreError(f"get_object {key} interrupted: {e}") from e
        finally:
            body.close()

    def delete(self, key: str) -> None:
        try:
            self.s3.delete_object(Bucket=self.bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            raise ObjectStoreError(f"delete_object {key} failed: {e}") from e
