# ============================================================================
# src/bloodwork_analysis/extractors/ocr_extractor.py
# ============================================================================
"""
Multi-Pass OCR Engine

Runs Tesseract once per page segmentation strategy and keeps the pass with
the highest mean word confidence:
- "document" (PSM 3): automatic layout, prose-like reports
- "table"    (PSM 6): one uniform block, tabular result sheets

Each pass owns a RecognitionContext (private image copy + Tesseract config)
that is released when the pass ends, whether it succeeded or not.
A pass that raises, times out, or reads nothing is a failed pass; when all
passes fail, OCRFailureError is raised. Low confidence is not a failure.
"""

import asyncio
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Dict, List, Optional, Tuple

import pytesseract
from PIL import Image

from ..config.ocr_config import OCRSettings, ocr_settings
from ..core.context import OCRResult
from ..utils.exceptions import OCRFailureError
from ..utils.logging import log_performance

logger = logging.getLogger(__name__)

# Thread pool shared by every recognition pass
_executor = ThreadPoolExecutor(max_workers=ocr_settings.OCR_MAX_WORKERS)

# Errors that fail a single pass; anything else propagates
PASS_ERRORS = (
    pytesseract.TesseractError,
    pytesseract.TesseractNotFoundError,
    RuntimeError,  # pytesseract raises this when its subprocess times out
    OSError,
    ValueError,
)


class RecognitionContext:
    """
    One recognition pass worth of state.

    Usage:
        with RecognitionContext(image, "table", 6) as context:
            result = context.recognize()
    """

    def __init__(
        self,
        image: Image.Image,
        strategy: str,
        page_segmentation_mode: int,
        settings: OCRSettings = ocr_settings,
    ):
        self.strategy = strategy
        self.page_segmentation_mode = page_segmentation_mode
        self.settings = settings
        self._source = image
        self._image: Optional[Image.Image] = None
        self.config = ""

    @property
    def active(self) -> bool:
        return self._image is not None

    def __enter__(self) -> "RecognitionContext":
        self._image = self._source.copy()
        self.config = (
            f"--oem 1 --psm {self.page_segmentation_mode} "
            f'-c tessedit_char_whitelist="{self.settings.OCR_CHAR_WHITELIST}" '
            f"-c preserve_interword_spaces=1"
        )
        logger.debug(f"Recognition context opened: {self.strategy} (psm {self.page_segmentation_mode})")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._image is not None:
            self._image.close()
            self._image = None
        logger.debug(f"Recognition context released: {self.strategy}")
        return False

    def recognize(self) -> OCRResult:
        if not self.active:
            raise RuntimeError(f"Recognition context '{self.strategy}' is not open")

        data = pytesseract.image_to_data(
            self._image,
            lang=self.settings.OCR_LANGUAGE,
            config=self.config,
            output_type=pytesseract.Output.DICT,
            timeout=self.settings.OCR_PASS_TIMEOUT,
        )
        text, confidence = assemble_text(data)
        return OCRResult(text=text, confidence=confidence, strategy=self.strategy)


def assemble_text(data: Dict[str, list]) -> Tuple[str, float]:
    """
    Rebuild text lines from Tesseract word data.

    Words are grouped by (block, paragraph, line) so report rows stay on
    their own line. Confidence is the mean over recognized words (0-100).
    """
    lines: Dict[Tuple[int, int, int], List[str]] = {}
    confidences = []

    for i, word in enumerate(data.get("text", [])):
        word = (word or "").strip()
        confidence = float(data["conf"][i])
        if not word or confidence < 0:
            continue
        key = (data["block_num"][i], data["par_num"][i], data["line_num"][i])
        lines.setdefault(key, []).append(word)
        confidences.append(confidence)

    text = "\n".join(" ".join(words) for words in lines.values())
    mean_confidence = sum(confidences) / len(confidences) if confidences else 0.0
    return text, round(mean_confidence, 2)


class MultiPassOCREngine:
    """
    Confidence-ranked multi-pass recognition.

    Strategies run in configured order; on equal confidence the earlier
    strategy wins.
    """

    def __init__(
        self,
        settings: OCRSettings = ocr_settings,
        strategies: Optional[Dict[str, int]] = None,
    ):
        self.settings = settings
        self.strategies = dict(strategies or settings.OCR_PAGE_SEGMENTATION_MODES)
        if not self.strategies:
            raise ValueError("At least one OCR strategy is required")

    @log_performance(logger, "OCR pass")
    def run_pass(self, image: Image.Image, strategy: str, page_segmentation_mode: int) -> OCRResult:
        with RecognitionContext(image, strategy, page_segmentation_mode, self.settings) as context:
            return context.recognize()

    def recognize(self, image: Image.Image) -> OCRResult:
        """Run every pass in the calling thread."""
        results: List[OCRResult] = []
        failures: List[Tuple[str, str]] = []

        for strategy, mode in self.strategies.items():
            try:
                result = self.run_pass(image, strategy, mode)
            except PASS_ERRORS as e:
                self._record_failure(failures, strategy, f"{type(e).__name__}: {e}")
                continue
            self._collect(result, results, failures)

        return self._select(results, failures)

    async def recognize_async(self, image: Image.Image) -> OCRResult:
        """
        Run every pass on the shared worker pool with a per-pass deadline.

        A pass that misses its deadline counts as failed. Passes never
        overlap: a late pass that already started is waited out before the
        next one begins, one that never started is cancelled.
        """
        results: List[OCRResult] = []
        failures: List[Tuple[str, str]] = []

        for strategy, mode in self.strategies.items():
            future = _executor.submit(self.run_pass, image, strategy, mode)
            try:
                result = await asyncio.wait_for(
                    asyncio.wrap_future(future), timeout=self.settings.OCR_PASS_TIMEOUT
                )
            except (asyncio.TimeoutError, TimeoutError):
                await self._drain(future, strategy)
                self._record_failure(
                    failures, strategy, f"timed out after {self.settings.OCR_PASS_TIMEOUT}s"
                )
                continue
            except PASS_ERRORS as e:
                self._record_failure(failures, strategy, f"{type(e).__name__}: {e}")
                continue
            self._collect(result, results, failures)

        return self._select(results, failures)

    @staticmethod
    async def _drain(future: Future, strategy: str) -> None:
        """Wait for an abandoned pass to release its context; its result is discarded."""
        if future.cancel():
            return
        try:
            await asyncio.wrap_future(future)
        except PASS_ERRORS as e:
            logger.debug(f"Abandoned OCR pass '{strategy}' ended with {type(e).__name__}", extra={"strategy": strategy})

    @staticmethod
    def _record_failure(failures: List[Tuple[str, str]], strategy: str, reason: str) -> None:
        logger.warning(f"OCR pass '{strategy}' failed: {reason}", extra={"strategy": strategy})
        failures.append((strategy, reason))

    def _collect(self, result: OCRResult, results: List[OCRResult], failures: List[Tuple[str, str]]) -> None:
        if not result.text.strip():
            self._record_failure(failures, result.strategy, "no text recognized")
            return
        logger.info(f"OCR pass '{result.strategy}': {len(result.text)} chars, confidence {result.confidence:.1f}")
        results.append(result)

    def _select(self, results: List[OCRResult], failures: List[Tuple[str, str]]) -> OCRResult:
        if not results:
            raise OCRFailureError(
                f"All {len(self.strategies)} OCR passes failed", attempts=failures
            )

        best = results[0]
        for result in results[1:]:
            if result.confidence > best.confidence:
                best = result

        if best.confidence < self.settings.OCR_CONFIDENCE_FLOOR:
            logger.warning(
                f"Best OCR confidence {best.confidence:.1f} is below the "
                f"{self.settings.OCR_CONFIDENCE_FLOOR:.0f} floor ({best.strategy})"
            )
        return best
