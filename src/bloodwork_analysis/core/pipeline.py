# ============================================================================
# src/bloodwork_analysis/core/pipeline.py
# ============================================================================
"""
Analysis Pipeline

Entry points for one request:
- extract_document(): document bytes -> normalized parameters + OCR confidence
- analyze(): manual values -> classified panel analysis
- analyze_document(): both, plus an optional LLM narrative

Processing stages:
1. Preprocess (rasterize PDF / decode image, grayscale, contrast)
2. Multi-pass OCR, best confidence wins
3. Text normalization
4. Pattern extraction
5. Unit normalization
6. Merge with manual values, validate, relationship analysis, assemble
7. Narrative (optional; failure keeps the rule-based summary)

Fatal problems raise typed errors carrying a recovery hint. Everything
non-fatal is attached to the result as a PipelineWarning.
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional, Sequence, Union

from .assembler import ResultAssembler
from .context import (
    BilingualText,
    ExtractionResult,
    ManualEntry,
    PanelAnalysis,
    PatientContext,
    PipelineWarning,
    WarningCode,
)
from .reference_data import ReferenceDataStore, get_reference_data
from ..config.ocr_config import OCRSettings, ocr_settings
from ..extractors.ocr_extractor import MultiPassOCREngine
from ..extractors.parameter_extractor import ParameterExtractor, extract_demographics
from ..narrative.base import NarrativeGenerator, NarrativeRequest
from ..normalizers.unit_normalizer import UnitNormalizer
from ..preprocessors.image_preprocessor import ImagePreprocessor
from ..utils.exceptions import NarrativeGenerationError, NoParametersExtractedError
from ..utils.text_normalizer import normalize_text

logger = logging.getLogger(__name__)

DocumentSource = Union[bytes, str, Path]


class AnalysisPipeline:
    """
    Request-scoped orchestration of extraction and validation.

    Components are built once and hold only immutable tables, so a single
    pipeline can serve concurrent requests.
    """

    def __init__(
        self,
        store: Optional[ReferenceDataStore] = None,
        preprocessor: Optional[ImagePreprocessor] = None,
        ocr_engine: Optional[MultiPassOCREngine] = None,
        extractor: Optional[ParameterExtractor] = None,
        unit_normalizer: Optional[UnitNormalizer] = None,
        assembler: Optional[ResultAssembler] = None,
        settings: OCRSettings = ocr_settings,
    ):
        self.settings = settings
        self.store = store or get_reference_data()
        self.preprocessor = preprocessor or ImagePreprocessor(settings)
        self.ocr_engine = ocr_engine or MultiPassOCREngine(settings)
        self.unit_normalizer = unit_normalizer or UnitNormalizer(self.store)
        self.extractor = extractor or ParameterExtractor(self.store, self.unit_normalizer)
        self.assembler = assembler or ResultAssembler(self.store, self.unit_normalizer)

    async def extract_document(
        self,
        data: DocumentSource,
        panel: str,
        require_parameters: bool = True,
    ) -> ExtractionResult:
        """
        Read a report and pull out the panel's values in canonical units.

        Args:
            data: PDF or image bytes, or a path to one
            panel: Panel id (e.g. "cbc")
            require_parameters: raise when nothing is found

        Returns:
            ExtractionResult; LOW_OCR_CONFIDENCE warns that values need checking

        Raises:
            UnknownPanelError: panel is not defined
            DocumentDecodeError: document cannot be decoded (retry)
            OCRFailureError: every OCR pass failed (manual entry)
            NoParametersExtractedError: text was read but no values found (manual entry)
        """
        self.store.panel_parameters(panel)

        loop = asyncio.get_running_loop()
        image = await loop.run_in_executor(None, self.preprocessor.preprocess, data)
        try:
            ocr_result = await self.ocr_engine.recognize_async(image)
        finally:
            image.close()

        text = normalize_text(ocr_result.text)
        extracted = self.extractor.extract(text, panel)
        parameters = [self.unit_normalizer.normalize(p) for p in extracted]

        if not parameters and require_parameters:
            raise NoParametersExtractedError(
                f"No {panel} parameters found in the document "
                f"(OCR confidence {ocr_result.confidence:.1f}); please enter the values manually",
                panel,
                ocr_result.confidence,
            )

        warnings = []
        if ocr_result.confidence < self.settings.OCR_CONFIDENCE_FLOOR:
            warnings.append(PipelineWarning(
                WarningCode.LOW_OCR_CONFIDENCE,
                f"OCR confidence {ocr_result.confidence:.1f} is below {self.settings.OCR_CONFIDENCE_FLOOR:.0f}; "
                f"please verify the extracted values",
            ))
        for parameter in parameters:
            if not parameter.unit_recognized:
                warnings.append(PipelineWarning(
                    WarningCode.UNIT_UNVERIFIED,
                    f"Unit '{parameter.raw_unit}' for {parameter.parameter_id} is not recognized",
                    parameter.parameter_id,
                ))

        logger.info(
            f"Extracted {len(parameters)} {panel} parameters "
            f"(OCR {ocr_result.strategy}, confidence {ocr_result.confidence:.1f})",
            extra={"panel": panel, "strategy": ocr_result.strategy},
        )
        return ExtractionResult(
            panel=panel,
            parameters=parameters,
            ocr_confidence=ocr_result.confidence,
            ocr_strategy=ocr_result.strategy,
            raw_text=text,
            warnings=warnings,
            demographics=extract_demographics(text),
        )

    def analyze(
        self,
        panel: str,
        patient: PatientContext,
        entries: Sequence[ManualEntry],
    ) -> PanelAnalysis:
        """
        Classify manually entered values.

        Raises:
            UnknownPanelError: panel is not defined
            InvalidValueError: a value is not a usable number
        """
        return self.assembler.assemble(panel, patient, manual_entries=entries)

    def analyze_extraction(
        self,
        extraction: ExtractionResult,
        patient: PatientContext,
        manual_entries: Sequence[ManualEntry] = (),
    ) -> PanelAnalysis:
        """Classify an extraction, manual values overriding extracted ones."""
        analysis = self.assembler.assemble(
            extraction.panel, patient, extraction.parameters, manual_entries
        )
        # Per-parameter warnings are rebuilt by the assembler after the merge
        document_warnings = [w for w in extraction.warnings if w.parameter_id is None]
        analysis.warnings = document_warnings + analysis.warnings
        analysis.ocr_confidence = extraction.ocr_confidence
        return analysis

    async def analyze_document(
        self,
        data: DocumentSource,
        panel: str,
        patient: PatientContext,
        manual_entries: Sequence[ManualEntry] = (),
        narrative: Optional[NarrativeGenerator] = None,
    ) -> PanelAnalysis:
        """
        Full path: document (plus optional manual values) to analysis.

        An empty extraction is only fatal when no manual values were given.
        """
        extraction = await self.extract_document(
            data, panel, require_parameters=not manual_entries
        )
        analysis = self.analyze_extraction(extraction, patient, manual_entries)
        if narrative is not None:
            await self.narrate(analysis, narrative)
        return analysis

    async def narrate(self, analysis: PanelAnalysis, generator: NarrativeGenerator) -> PanelAnalysis:
        """
        Replace the rule-based summary with a generated narrative.

        On NarrativeGenerationError the rule-based summary stays and a
        NARRATIVE_UNAVAILABLE warning is attached.
        """
        request = NarrativeRequest(
            panel=analysis.panel,
            panel_name=BilingualText(
                en=self.store.panel_name(analysis.panel, "en"),
                ur=self.store.panel_name(analysis.panel, "ur"),
            ),
            patient=analysis.patient,
            results=analysis.results,
            relationship_flags=analysis.relationship_flags,
        )
        try:
            report = await generator.generate_report(request)
        except NarrativeGenerationError as e:
            logger.warning(
                f"Narrative generation failed ({generator.name}), keeping rule-based summary: {e}",
                extra={"panel": analysis.panel, "provider": generator.name},
            )
            analysis.warnings.append(PipelineWarning(
                WarningCode.NARRATIVE_UNAVAILABLE,
                f"Narrative summary unavailable ({generator.name}); showing the standard summary",
            ))
            return analysis

        analysis.summary = report.summary
        analysis.summary_source = generator.name
        if report.key_insights:
            analysis.key_insights = list(report.key_insights)
        if report.recommendations is not None:
            analysis.recommendations = report.recommendations
        return analysis
