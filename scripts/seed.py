"""
Crée une vidéo brouillon pour un utilisateur et affiche un access token utilisable
avec POST /api/v1/videos/{id}/upload.

    python -m scripts.seed --title "Demo" [--user-id <uuid>]
"""

import argparse
import uuid

from tubely.core.config import jwt_settings
from tubely.db.repositories.videos import VideoRepository
from tubely.db.session import Session, engine, init_db
from tubely.security.tokens import create_access_token


def run_seed(title: str, user_id: uuid.UUID) -> None:
    init_db()
    with Session(engine) as session:
        video = VideoRepository(session).create(title=title, owner_id=user_id)
        print(f"video_id     = {video.id}")
    print(f"user_id      = {user_id}")
    print(f"access_token = {create_access_token(user_id=user_id, settings=jwt_settings)}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed a draft video")
    parser.add_argument("--title", default="Demo video")
    parser.add_argument("--user-id", type=uuid.UUID, default=None)
    args = parser.parse_args()
    run_seed(args.title, args.user_id or uuid.uuid4())
