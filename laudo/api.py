"""FastAPI front end for packaging and root-hash retrieval.

Routes and JSON keys follow the contract the existing browser frontend
expects (``caminho`` in, ``rootHash``/``nomeZip``/... out).

Run server:
    laudo serve            # or: uvicorn laudo.api:create_app --factory --port 3001
"""
from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from . import __version__
from .config import Settings, load_settings
from .errors import (
    ArchiveNotFoundError,
    FolderNotFoundError,
    LaudoError,
    PathContainmentError,
)
from .locator import PROBE_INVALID
from .service import list_folder, package_folder, probe_archive, retrieve_root_hash


logger = logging.getLogger(__name__)


# Request/Response Models
class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class FolderItemResponse(_WireModel):
    """One child of a listed folder."""
    name: str = Field(..., alias="nome")
    is_dir: bool = Field(..., alias="ehDiretorio")
    relative_path: str = Field(..., alias="caminhoRelativo")


class PackageRequest(_WireModel):
    """Request body for packaging a folder."""
    path: str = Field(..., alias="caminho", description="Folder path relative to the source root")


class PackageResponse(_WireModel):
    """Where the archive was written and its root hash."""
    success: bool = True
    location: str = Field(..., alias="local")
    root_hash: str = Field(..., alias="rootHash")
    process_id: str = Field(..., alias="processo")


class RootHashResponse(_WireModel):
    root_hash: str = Field(..., alias="rootHash")


class ProbeResponse(_WireModel):
    """Archive existence status; name and year only when an archive exists."""
    status: str
    archive_name: Optional[str] = Field(None, alias="nomeZip")
    year: Optional[str] = Field(None, alias="anoEncontrado")


def _error(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, **extra})


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create the FastAPI application.

    Args:
        settings: Explicit settings; loaded from the environment when omitted.

    Returns:
        FastAPI application instance
    """
    if settings is None:
        settings = load_settings()

    app = FastAPI(
        title="laudo",
        description="Integrity-manifest packaging for process folders",
        version=__version__,
    )
    app.state.settings = settings
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    def health_check():
        """Health check endpoint."""
        return {"status": "ok"}

    @app.get("/api/pastas", response_model=List[FolderItemResponse])
    def list_endpoint(caminho: str = Query("", description="Folder path relative to the source root")):
        try:
            items = list_folder(settings, caminho)
        except PathContainmentError as e:
            return _error(403, str(e))
        except FolderNotFoundError as e:
            return _error(404, str(e))
        except (LaudoError, OSError) as e:
            logger.error("Listing %r failed: %s", caminho, e)
            return _error(500, "Could not access the folder")
        return [
            FolderItemResponse(name=i.name, is_dir=i.is_dir, relative_path=i.relative_path)
            for i in items
        ]

    @app.post("/api/mkzip", response_model=PackageResponse)
    def package_endpoint(request: PackageRequest):
        try:
            result = package_folder(settings, request.path)
        except PathContainmentError as e:
            return _error(403, str(e))
        except (LaudoError, OSError) as e:
            logger.error("Packaging %r failed: %s", request.path, e)
            return _error(500, str(e))
        return PackageResponse(
            location=result.archive_path,
            root_hash=result.root_hash,
            process_id=result.process_id,
        )

    @app.get("/api/get-hash", response_model=RootHashResponse)
    def root_hash_endpoint(caminho: str = Query("", description="Folder path relative to the source root")):
        try:
            root_hash = retrieve_root_hash(settings, caminho)
        except ArchiveNotFoundError as e:
            return _error(404, str(e))
        except PathContainmentError as e:
            return _error(403, str(e))
        except (LaudoError, OSError) as e:
            logger.error("Root hash lookup for %r failed: %s", caminho, e)
            return _error(500, str(e))
        return RootHashResponse(root_hash=root_hash)

    @app.get("/api/has-zip", response_model=ProbeResponse, response_model_exclude_none=True)
    def probe_endpoint(caminho: str = Query("", description="Folder path relative to the source root")):
        try:
            result = probe_archive(settings, caminho)
        except PathContainmentError as e:
            return _error(403, str(e), status=PROBE_INVALID)
        except (LaudoError, OSError) as e:
            logger.error("Probe for %r failed: %s", caminho, e)
            return _error(500, str(e), status=PROBE_INVALID)
        return ProbeResponse(status=result.status, archive_name=result.archive_name, year=result.year)

    return app
