"""
➡️ But : Personnaliser la documentation Swagger/OpenAPI.

custom_openapi(app) modifie le schéma généré par FastAPI pour :

ajouter un titre, une description détaillée,

centraliser la personnalisation du Swagger.
"""

from fastapi.openapi.utils import get_openapi

def custom_openapi(app):
    if app.openapi_schema:
        return app.openapi_schema
    openapi_schema = get_openapi(
        title=app.title,
        version=app.version,
        description=(
            "API d'upload et de diffusion de vidéos (FastAPI + SQLite + S3/MinIO).\n\n"
            "### Conventions\n"
            "- Toutes les heures sont en UTC.\n"
            "- Upload : MP4 uniquement, 1 GiB max, champ multipart `video`.\n"
            "- Lecture : en-tête `Range: bytes=<start>-<end>` (une seule plage).\n"
            "- Les clés d'objets sont rangées par format : `landscape/`, `portrait/`, `other/`.\n"
        ),
        routes=app.routes,
        tags=app.openapi_tags,
    )
    app.openapi_schema = openapi_schema
    return app.openapi_schema
