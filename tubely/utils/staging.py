"""
➡️ But : Copier un upload dans un fichier temporaire local, le temps d'un traitement.

Chaque requête possède son propre fichier (nom aléatoire), dans un dossier partagé.
Le fichier doit être supprimé à la fin, succès, échec ou annulation :

    with staging.staged() as handle:
        await run_in_threadpool(staging.write, handle, file.file)
        analyse(handle.path)

Le fichier est réservé (créé vide) avant l'écriture : si la requête est annulée
pendant la copie, la sortie du bloc le supprime quand même.
"""

import logging
import os
import secrets
import shutil
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Iterator, Optional, Union

logger = logging.getLogger(__name__)

Payload = Union[bytes, BinaryIO]


@dataclass
class StagedFile:
    path: Path
    size: int = 0
    released: bool = False


class StagingArea:
    def __init__(self, temp_dir: Optional[str] = None, *, prefix: str = "upload_", suffix: str = ".mp4"):
        self.temp_dir = Path(temp_dir or tempfile.gettempdir())
        self.prefix = prefix
        self.suffix = suffix

    def _new_path(self) -> Path:
        # 16 octets d'entropie : pas de collision entre uploads concurrents
        return self.temp_dir / f"{self.prefix}{secrets.token_hex(16)}{self.suffix}"

    def allocate(self) -> StagedFile:
        """Réserve un fichier vide. Rapide, peut tourner sur la boucle d'événements."""
        self.temp_dir.mkdir(parents=True, exist_ok=True)
        path = self._new_path()
        # "xb" : échoue plutôt que d'écraser le fichier d'une autre requête
        with open(path, "xb"):
            pass
        return StagedFile(path=path)

    def write(self, handle: StagedFile, payload: Payload) -> StagedFile:
        """Écrit tout le payload dans un fichier réservé avant de rendre la main."""
        # "r+b" ne recrée jamais un fichier déjà libéré
        with open(handle.path, "r+b") as out:
            if isinstance(payload, (bytes, bytearray, memoryview)):
                out.write(payload)
            else:
                shutil.copyfileobj(payload, out)
            out.truncate()
            out.flush()
            os.fsync(out.fileno())
            handle.size = out.tell()
        logger.debug("Staged %d bytes to %s", handle.size, handle.path)
        return handle

    def stage(self, payload: Payload) -> StagedFile:
        handle = self.allocate()
        try:
            return self.write(handle, payload)
        except BaseException:
            self.release(handle)
            raise

    @contextmanager
    def staged(self, payload: Optional[Payload] = None) -> Iterator[StagedFile]:
        """
        Réserve un fichier, l'écrit si un payload est donné, et le supprime
        à la sortie du bloc, quelle qu'elle soit.
        """
        handle = self.allocate()
        try:
            if payload is not None:
                self.write(handle, payload)
            yield handle
        finally:
            self.release(handle)

    def release(self, handle: StagedFile) -> None:
        """Idempotent. Un échec de suppression est journalisé, jamais levé."""
        if handle.released:
            return
        try:
            handle.path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("Could not remove staged file %s: %s", handle.path, e)
            return
        handle.released = True
