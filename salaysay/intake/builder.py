"""Wires the intake components from configuration."""

from functools import partial
from pathlib import Path

from salaysay.analysis.language import LanguageDetector
from salaysay.classification.violation import ViolationClassifier
from salaysay.intake.analyzer import DocumentAnalyzer
from salaysay.intake.pipeline import IntakePipeline
from salaysay.intake.session import IntakeSession
from salaysay.ocr.tesseract_engine import TesseractEngine
from salaysay.pdf.image_normalizer import ImageNormalizer
from salaysay.pdf.text_layout import TextLayoutExtractor
from salaysay.records import SubmissionSink
from salaysay.translation.translator import (
    IdentityTranslator,
    MyMemoryTranslator,
    Translator,
)
from salaysay.utils.config import AppConfig, TranslationConfig, load_config
from salaysay.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)


def build_translator(config: TranslationConfig) -> Translator:
    if not config.enabled:
        logger.info("Translation disabled, excuse summaries stay untranslated")
        return IdentityTranslator()
    return MyMemoryTranslator(
        base_url=config.base_url,
        source_lang=config.source_lang,
        target_lang=config.target_lang,
        timeout_seconds=config.timeout_seconds,
    )


def build_session(
    sink: SubmissionSink,
    config: AppConfig | None = None,
    config_path: Path | None = None,
) -> IntakeSession:
    """Build an intake session with every stage configured.

    Args:
        sink: Destination for finished submissions.
        config: Application configuration. Loaded from ``config_path``
            (or the default location) when omitted.
        config_path: YAML file to load when ``config`` is not given.

    Returns:
        An empty session whose pipelines share the configured components.
    """
    if config is None:
        config = load_config(config_path)
    setup_logging(config.log_level)

    engine = TesseractEngine(
        tesseract_cmd=config.ocr.tesseract_cmd,
        default_lang=config.ocr.default_lang,
        psm=config.ocr.psm,
    )
    normalizer = ImageNormalizer(
        engine, config.conversion, ocr_lang=config.ocr.default_lang
    )
    analyzer = DocumentAnalyzer(
        text_extractor=TextLayoutExtractor(config.extraction.y_threshold),
        language_detector=LanguageDetector(config.extraction.min_language_markers),
        translator=build_translator(config.translation),
        classifier=ViolationClassifier(),
        config=config.extraction,
    )

    factory = partial(
        IntakePipeline, normalizer=normalizer, analyzer=analyzer, sink=sink
    )
    return IntakeSession(factory)
