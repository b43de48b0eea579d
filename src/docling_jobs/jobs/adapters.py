import logging
from typing import Optional

from .interfaces import ConversionFailed, ConversionOutcome, Converted, ConverterGateway, PageRange
from .errors import describe_exception

logger = logging.getLogger(__name__)


class DoclingConverter(ConverterGateway):
    """Converter gateway backed by docling's DocumentConverter.

    docling is imported on first use; it pulls in heavy model dependencies
    that the rest of the service does not need.
    """

    def convert(self, source: str, page_range: Optional[PageRange] = None) -> ConversionOutcome:
        try:
            from docling.document_converter import DocumentConverter  # type: ignore

            converter = DocumentConverter()
            if page_range is not None:
                result = converter.convert(source=source, page_range=page_range.as_tuple())
            else:
                result = converter.convert(source=source)
            doc = result.document  # type: ignore[attr-defined]
            return Converted(self._to_markdown(doc))
        except Exception as e:
            logger.debug("docling conversion of %s failed", source, exc_info=True)
            return ConversionFailed(describe_exception(e))

    @staticmethod
    def _to_markdown(doc: object) -> str:
        # markdown methods variants
        for m in ("export_to_markdown", "to_markdown", "as_markdown"):
            fn = getattr(doc, m, None)
            if callable(fn):
                return fn()
        raise RuntimeError("Doc object does not provide a markdown export method")
