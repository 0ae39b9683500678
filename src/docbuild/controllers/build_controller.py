from __future__ import annotations

import json
import logging
import pickle
import time
from concurrent.futures import ProcessPoolExecutor, as_completed
from typing import Any, Dict, Iterable, List, Optional, Tuple

from pydantic import ValidationError
from tqdm.auto import tqdm

from auditor.context.audit_context import ImageProber
from corpus.services.url_index_service import UrlIndex
from docbuild.core.managers.config_manager import config_manager
from docbuild.core.services.l10n_service import LocaleStrings
from docbuild.core.utils.parallel_workers import build_document_worker, init_build_worker
from docbuild.exceptions import IndexUnavailable
from docbuild.model import (
    BuildFailure, BuildReport, BuildSettings, BuiltDocument, Document, SourceDocument,
)
from docbuild.services.document_build_service import DocumentBuildService

logger = logging.getLogger(__name__)


class BuildController:
    """
    Orchestrates a corpus build in two phases.

    Phase 1 builds the URL index from the whole corpus; without it nothing can
    be resolved, so a failure there ends the build. Phase 2 builds every
    document against the frozen index, serially or in a process pool. A
    document that fails is recorded and the others carry on.
    """

    def __init__(
            self,
            settings: Optional[BuildSettings] = None,
            strings: Optional[LocaleStrings] = None,
            image_prober: Optional[ImageProber] = None,
    ) -> None:
        self.settings = settings or BuildSettings.from_config(config_manager)
        self.strings = strings or LocaleStrings.load(self.settings.strings_file, self.settings.default_locale)
        self.image_prober = image_prober

    # --- Phase 1 ---

    def build_index(self, corpus: Iterable, redirects: Iterable = ()) -> UrlIndex:
        """
        Raises:
            IndexUnavailable: If the index cannot be built from the corpus.
        """
        try:
            return UrlIndex.build(
                corpus,
                redirects,
                default_locale=self.settings.default_locale,
                max_redirect_depth=self.settings.max_redirect_depth,
            )
        except IndexUnavailable:
            raise
        except Exception as e:
            raise IndexUnavailable(f"URL index could not be built: {e}") from e

    # --- Phase 2 ---

    @staticmethod
    def _load_sources(sources: Iterable, failures: List[BuildFailure]) -> List[SourceDocument]:
        """Validates the input documents; invalid ones are recorded as failures."""
        loaded: List[SourceDocument] = []
        for raw in sources:
            if isinstance(raw, SourceDocument):
                loaded.append(raw)
                continue
            try:
                loaded.append(SourceDocument.model_validate(raw))
            except ValidationError as e:
                if isinstance(raw, dict):
                    url = f"/{raw.get('locale', '?')}/docs/{raw.get('slug', '?')}"
                else:
                    url = repr(raw)
                logger.error(f"Invalid source document {url}: {e}")
                failures.append(BuildFailure(url=url, error=f"ValidationError: {e}"))
        return loaded

    def _build_serial(
            self, index: UrlIndex, sources: List[SourceDocument], show_progress: bool,
    ) -> Tuple[List[BuiltDocument], List[BuildFailure]]:
        service = DocumentBuildService(index, self.settings, self.strings, image_prober=self.image_prober)
        built: List[BuiltDocument] = []
        failures: List[BuildFailure] = []

        iterator = sources if not show_progress else tqdm(sources, desc="Building documents", unit=" doc")
        for source in iterator:
            try:
                built.append(service.build(source))
            except Exception as e:
                logger.error(f"Failed to build {source.url}: {e}", exc_info=True)
                failures.append(BuildFailure(url=source.url, error=f"{type(e).__name__}: {e}"))
        return built, failures

    def _prober_is_picklable(self) -> bool:
        try:
            pickle.dumps(self.image_prober)
        except (pickle.PicklingError, AttributeError, TypeError) as e:
            logger.warning(f"Image prober cannot be sent to worker processes, building serially: {e}")
            return False
        return True

    def _build_parallel(
            self, index: UrlIndex, sources: List[SourceDocument], workers: int, show_progress: bool,
    ) -> Tuple[List[BuiltDocument], List[BuildFailure]]:
        results: Dict[int, BuiltDocument] = {}
        failures: List[BuildFailure] = []

        with ProcessPoolExecutor(
                max_workers=workers,
                initializer=init_build_worker,
                initargs=(index, self.settings.model_dump(), self.strings, self.image_prober),
        ) as pool:
            futures = {
                pool.submit(build_document_worker, source.model_dump_json()): (position, source.url)
                for position, source in enumerate(sources)
            }
            iterator = as_completed(futures)
            if show_progress:
                iterator = tqdm(iterator, total=len(futures), desc="Building documents", unit=" doc")

            for fut in iterator:
                position, url = futures[fut]
                try:
                    payload: Dict[str, Any] = json.loads(fut.result())
                    if "error" in payload:
                        failures.append(BuildFailure(url=url, error=payload["error"]))
                        continue
                    results[position] = BuiltDocument(
                        doc=Document.model_validate(payload["doc"]),
                        html=payload["html"],
                    )
                except Exception as e:
                    logger.error(f"Failed to process {url}: {e}", exc_info=True)
                    failures.append(BuildFailure(url=url, error=f"{type(e).__name__}: {e}"))

        # Report documents in input order, not completion order
        return [results[p] for p in sorted(results)], failures

    def build(
            self,
            corpus: Iterable,
            redirects: Iterable,
            sources: Iterable,
            *,
            workers: Optional[int] = None,
            show_progress: Optional[bool] = None,
    ) -> BuildReport:
        """
        Builds every source document against an index of the whole corpus.

        Args:
            corpus: Known documents (CorpusDocument objects or dicts).
            redirects: Redirect records.
            sources: The documents to build (SourceDocument objects or dicts).
            workers: Process count; 1 or less builds in-process. A parallel build
                needs a picklable image prober (a module-level function, not a
                lambda or closure); otherwise it falls back to building in-process.
            show_progress: Show a tqdm progress bar.

        Returns:
            BuildReport: Built documents, per-document failures and timing.

        Raises:
            IndexUnavailable: If phase 1 fails.
        """
        start = time.perf_counter()
        index = self.build_index(corpus, redirects)

        n_workers = int(workers if workers is not None else self.settings.workers)
        progress = self.settings.show_progress if show_progress is None else show_progress

        failures: List[BuildFailure] = []
        loaded = self._load_sources(sources, failures)

        if n_workers <= 1 or len(loaded) <= 1 or not self._prober_is_picklable():
            built, build_failures = self._build_serial(index, loaded, progress)
        else:
            built, build_failures = self._build_parallel(index, loaded, n_workers, progress)
        failures.extend(build_failures)

        report = BuildReport(documents=built, failures=failures, duration_s=round(time.perf_counter() - start, 3))
        logger.info(
            f"Build finished: {len(built)} document(s), {len(failures)} failure(s), "
            f"{report.total_flaws} flaw(s) in {report.duration_s}s."
        )
        return report
