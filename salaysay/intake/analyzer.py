"""Turns a searchable PDF into a ``DocumentInfo`` record."""

from collections.abc import Callable
from datetime import date

from salaysay.analysis.language import LanguageDetector
from salaysay.classification.violation import ViolationClassifier
from salaysay.extraction.field_extractor import extractor_for
from salaysay.models import DocumentInfo, Language
from salaysay.pdf.text_layout import TextLayoutExtractor
from salaysay.translation.translator import IdentityTranslator, Translator
from salaysay.utils.config import ExtractionConfig
from salaysay.utils.logger import get_logger

logger = get_logger(__name__)


class DocumentAnalyzer:
    """Runs text extraction, language detection, field extraction,
    translation and classification over one PDF.

    Args:
        text_extractor: Layout-aware PDF text extractor.
        language_detector: Template-language detector.
        translator: Translator for Tagalog excuse summaries.
        classifier: Violation classifier.
        config: Extraction settings for the field extractors.
        clock: Source of the processing date used when no date is found.
    """

    def __init__(
        self,
        text_extractor: TextLayoutExtractor | None = None,
        language_detector: LanguageDetector | None = None,
        translator: Translator | None = None,
        classifier: ViolationClassifier | None = None,
        config: ExtractionConfig | None = None,
        clock: Callable[[], date] = date.today,
    ) -> None:
        self.config = config or ExtractionConfig()
        self.text_extractor = text_extractor or TextLayoutExtractor(
            self.config.y_threshold
        )
        self.language_detector = language_detector or LanguageDetector(
            self.config.min_language_markers
        )
        self.translator = translator or IdentityTranslator()
        self.classifier = classifier or ViolationClassifier()
        self.clock = clock

    async def analyze(self, pdf_bytes: bytes) -> DocumentInfo:
        """Analyze a searchable PDF.

        Args:
            pdf_bytes: Raw PDF file content.

        Returns:
            The recovered document information, excuse summary in English.

        Raises:
            ExtractionError: If the PDF cannot be parsed.
        """
        extracted = await self.text_extractor.extract_async(pdf_bytes)
        language = self.language_detector.detect(extracted.text)

        extractor = extractor_for(
            language, self.config.max_sentences, self.config.summary_char_limit
        )
        fields = extractor.extract(extracted.text)

        excuse = fields.nature_of_excuse
        if language == Language.TAGALOG and excuse:
            excuse = await self.translator.translate(excuse)

        violation_type = self.classifier.classify(excuse, extracted.text)

        if fields.submission_date is None:
            logger.info("No letter date found, using processing date")

        return DocumentInfo(
            extracted_text=extracted.text,
            student_id=fields.student_id,
            student_name=fields.student_name,
            course_code=fields.course_code,
            section=fields.section,
            addressee=fields.addressee,
            submission_date=fields.submission_date or self.clock(),
            nature_of_excuse=excuse,
            violation_type=violation_type,
            language=language,
            page_count=extracted.page_count,
        )
