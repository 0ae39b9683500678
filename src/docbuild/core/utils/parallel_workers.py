# file: src/docbuild/core/utils/parallel_workers.py
import logging
from typing import Any, Dict, Optional

from docbuild.core.services.json_service import document_to_json, to_json
from docbuild.core.utils.configure_logging import configure_from_settings
from docbuild.model import BuildSettings, SourceDocument
from docbuild.services.document_build_service import DocumentBuildService

logger = logging.getLogger(__name__)

# Per-process pipeline, set once by init_build_worker.
_SERVICE = None


def init_build_worker(index, settings: Dict[str, Any], strings, image_prober=None) -> None:
    """
    Process-pool initializer: receives the shared read-only state once per
    worker process instead of once per document, and installs the configured
    log handler in the new process.
    """
    global _SERVICE
    build_settings = BuildSettings.model_validate(settings)
    configure_from_settings(build_settings)
    _SERVICE = DocumentBuildService(
        index,
        build_settings,
        strings,
        image_prober=image_prober,
    )
    logger.debug(f"Build worker initialized with {len(index)} index entries.")


def build_document_worker(source_json: str) -> Optional[str]:
    """
    Worker function building one document.
    Returns a JSON string: {"doc", "html"} on success, {"url", "error"} on failure.
    """
    if _SERVICE is None:
        raise RuntimeError("Build worker used before init_build_worker() ran.")

    source = SourceDocument.model_validate_json(source_json)
    try:
        built = _SERVICE.build(source)
        # Serialize to JSON to avoid complex pickling on spawn
        return document_to_json(built, indent=None)
    except Exception as e:
        logger.error(f"WORKER ERROR building {source.url}: {e}", exc_info=True)
        return to_json({"url": source.url, "error": f"{type(e).__name__}: {e}"}, indent=None)
