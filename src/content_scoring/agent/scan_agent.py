"""Scan agent - control plane for the content scoring pipeline."""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Callable, Optional

from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..config.loader import Config
from ..models.parser_output import ParserOutput
from ..models.scan_result import ScanRecord, ScanState, StoredScan
from ..models.validated_counts import ValidatedCounts
from ..tools.parse_tool import content_hash, parse_tool
from ..tools.render_tool import RenderPool, RenderResult
from ..tools.score_tool import score_tool
from ..tools.storage_tool import init_storage, store_result
from ..tools.validate_tool import build_validator_client, validate_tool

logger = logging.getLogger(__name__)


class TransientRenderError(RuntimeError):
    """Render failure worth retrying; carries the last RenderResult."""

    def __init__(self, result: RenderResult):
        super().__init__(result.error)
        self.result = result


class ScanAgent:
    """
    Orchestrates render -> parse -> validate -> score -> store for each URL.
    Does NOT parse HTML or apply scoring rules itself.
    """

    def __init__(
        self,
        config: Config,
        render_fn: Optional[Callable[[str], RenderResult]] = None,
        validator_client: Any = None,
    ):
        self.config = config
        self.pool = RenderPool(config.render_policy)
        self.render_fn = render_fn or self.pool.render
        self.validator_client = validator_client
        self.model_version = config.validator.model
        self.fetch_mode = "render" if config.render_policy.use_browser else "http"

    def run(self, urls: list[str] | None = None) -> list[StoredScan]:
        """Scan every URL, at most max_concurrent_pages at a time. Results keep input order."""
        urls = list(dict.fromkeys(urls or self.config.scan_urls))
        out_config = self.config.output_config
        init_storage(out_config.storage_path, out_config.export_format or "jsonl")
        if not urls:
            logger.warning("No URLs to scan")
            return []

        # One validator client for the whole run unless the caller injected one
        owned_client = None
        if self.validator_client is None:
            owned_client = self.validator_client = build_validator_client(self.config)

        results: dict[str, StoredScan] = {}
        workers = min(self.pool.max_concurrent, len(urls))
        try:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                futures = {executor.submit(self.scan, url): url for url in urls}
                for idx, future in enumerate(as_completed(futures), 1):
                    url = futures[future]
                    try:
                        results[url] = future.result()
                        logger.info(
                            "[%d/%d] %s -> %s", idx, len(urls), url, _describe(results[url])
                        )
                    except Exception as e:
                        logger.exception("Failed URL %s: %s", url, e)
        finally:
            if owned_client is not None:
                owned_client.close()
                self.validator_client = None

        stored = [results[u] for u in urls if u in results]
        logger.info(
            "Scanned %d/%d pages. Results saved to %s",
            len(stored), len(urls), out_config.storage_path,
        )
        return stored

    def scan(self, url: str) -> StoredScan:
        """Process a single URL through the pipeline and store the result."""
        rec = ScanRecord(url=url)

        render = self._render_with_retry(url)
        if render.error or not render.html:
            rec = rec.advance(ScanState.FAILED, error=render.error or "Empty page")
            return self._store(self._failed(rec, render, f"Render failed: {rec.error}"))
        rec = rec.advance(
            ScanState.RENDERED, final_url=render.final_url, http_status=render.http_status
        )

        parsed = parse_tool(render.html, render.final_url or url)
        if not parsed.success:
            rec = rec.advance(ScanState.FAILED, error=parsed.error)
            return self._store(self._failed(rec, render, f"Parse failed: {parsed.error}"))
        rec = rec.advance(ScanState.PARSED)

        validated = self._validate(parsed)
        rec = rec.advance(ScanState.VALIDATED)

        score = score_tool(validated, parsed.counts)
        rec = rec.advance(ScanState.SCORED)
        logger.info(
            "Scored %s: %d/100 (GRAAF: %d, CRAFT: %d, Technical: %d)%s",
            url, score.total, score.graaf.total, score.craft.total, score.technical.total,
            " [unvalidated]" if validated.fallback else "",
        )

        result = StoredScan(
            url=url,
            final_url=rec.final_url or url,
            http_status=rec.http_status,
            success=True,
            fetch_mode=self.fetch_mode,
            score=score,
            validation_fallback=validated.fallback,
            validation_fallback_reason=validated.fallback_reason,
            rejections=validated.rejections,
            counts=parsed.counts,
            model_version=self.model_version,
            content_hash=content_hash(render.html),
        )
        return self._store(result)

    def _validate(self, parsed: ParserOutput) -> ValidatedCounts:
        return validate_tool(parsed, self.config, client=self.validator_client)

    def _failed(self, rec: ScanRecord, render: RenderResult, reason: str) -> StoredScan:
        logger.warning("Scan failed for %s: %s", rec.url, reason)
        return StoredScan(
            url=rec.url,
            final_url=render.final_url or rec.url,
            http_status=render.http_status,
            success=False,
            error=reason,
            fetch_mode=self.fetch_mode,
            model_version=self.model_version,
            content_hash=content_hash(render.html) if render.html else None,
        )

    def _store(self, result: StoredScan) -> StoredScan:
        out_config = self.config.output_config
        try:
            store_result(result, out_config.storage_path, out_config.export_format or "jsonl")
        except Exception as e:
            logger.error("Failed to store result for %s: %s", result.url, e, exc_info=True)
            raise
        return result

    def _render_once(self, url: str) -> RenderResult:
        result = self.render_fn(url)
        # Client errors will not improve on retry
        if result.error and not (result.http_status and 400 <= result.http_status < 500):
            raise TransientRenderError(result)
        return result

    def _render_with_retry(self, url: str) -> RenderResult:
        """Render with exponential backoff for transient failures."""
        policy = self.config.retry_policy
        retrying = Retrying(
            stop=stop_after_attempt(policy.max_attempts),
            wait=wait_exponential(
                multiplier=policy.backoff_seconds, min=policy.backoff_seconds, max=30
            ),
            retry=retry_if_exception_type(TransientRenderError),
            reraise=True,
        )
        try:
            return retrying(self._render_once, url)
        except TransientRenderError as e:
            logger.warning("Render failed for %s after %d attempts: %s", url, policy.max_attempts, e)
            return e.result


def _describe(result: StoredScan) -> str:
    if not result.success:
        return f"FAILED ({result.error})"
    flag = " (unvalidated)" if result.validation_fallback else ""
    return f"{result.total}/100 {result.quality}{flag}"
