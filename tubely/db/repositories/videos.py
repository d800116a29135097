from tubely.db.repositories.base import BaseRepository
from tubely.db.models.videos import Video


class VideoRepository(BaseRepository[Video]):
    """CRUD Vidéos. Écritures mono-ligne : le dernier upload gagne."""
    model = Video
