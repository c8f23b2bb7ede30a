from __future__ import annotations

import logging
from pathlib import Path

from ebooklib import epub
import pymupdf
import pytest

from nebula.ingestion import DocumentIngestor, ErrorKind, IngestionError, detect_format, paginate
from nebula.ingestion.adapters import build_default_adapters
from nebula.ingestion.config import IngestionSettings
from nebula.ingestion.models import DocumentFormat, ExtractedText, SourceDocument


class _RecordingAdapter:
    def __init__(self, result: ExtractedText | Exception | None = None) -> None:
        self.calls: list[SourceDocument] = []
        self._result = result

    def extract(self, document: SourceDocument) -> ExtractedText:
        self.calls.append(document)
        if isinstance(self._result, Exception):
            raise self._result
        return self._result or ExtractedText(text="stub text", format=DocumentFormat.TXT)


def _pdf_bytes() -> bytes:
    doc = pymupdf.open()
    page = doc.new_page()
    page.insert_text((72, 72), "Chapter 1")
    page.insert_text((72, 110), "PDF pipeline content sample.")
    payload = doc.tobytes()
    doc.close()
    return payload


def _epub_bytes(path: Path) -> bytes:
    book = epub.EpubBook()
    book.set_identifier("pipeline-epub")
    book.set_title("Pipeline EPUB")
    book.set_language("zh")
    chapter = epub.EpubHtml(title="第一章", file_name="c1.xhtml", lang="zh")
    chapter.content = "<html><body>\n<p>第一章 开端</p>\n<p>EPUB pipeline content sample.</p>\n</body></html>"
    book.add_item(chapter)
    book.add_item(epub.EpubNcx())
    book.add_item(epub.EpubNav())
    book.spine = [chapter]
    book.toc = (chapter,)
    epub.write_epub(str(path), book)
    return path.read_bytes()


@pytest.mark.parametrize(
    ("name", "mime", "expected"),
    [
        ("book.PDF", None, DocumentFormat.PDF),
        ("book.epub", "application/pdf", DocumentFormat.PDF),
        ("scan.bin", "application/pdf; charset=binary", DocumentFormat.PDF),
        ("novel.Epub", "application/epub+zip", DocumentFormat.EPUB),
        ("novel.mobi", None, DocumentFormat.MOBI),
        ("notes.md", "text/markdown", DocumentFormat.MD),
        ("data.json", "application/json", DocumentFormat.TXT),
        ("README", None, DocumentFormat.TXT),
        ("archive.tar.gz", None, DocumentFormat.TXT),
    ],
)
def test_detect_format(name: str, mime: str | None, expected: DocumentFormat) -> None:
    assert detect_format(name, mime) is expected


def test_default_registry_covers_every_format() -> None:
    adapters = build_default_adapters()

    assert set(adapters) == set(DocumentFormat)
    assert adapters[DocumentFormat.TXT] is adapters[DocumentFormat.MD]


def test_bare_ingestor_starts_with_default_adapters() -> None:
    ingestor = DocumentIngestor(IngestionSettings(pdf_page_limit=3))

    assert set(ingestor.adapter_map) == set(DocumentFormat)
    assert ingestor.ingest(b"plain words", "notes.txt").text == "plain words"


def test_ingestion_pipeline_handles_every_format(tmp_path: Path) -> None:
    ingestor = DocumentIngestor()

    results = [
        ingestor.ingest(_pdf_bytes(), "sample.pdf", "application/pdf"),
        ingestor.ingest(_epub_bytes(tmp_path / "sample.epub"), "sample.epub"),
        ingestor.ingest(b"\x00\x00".join([b"MOBI pipeline sample"] * 8), "sample.mobi"),
        ingestor.ingest("# 标题\n正文内容".encode("gbk"), "notes.md"),
        ingestor.ingest("Plain text body".encode("utf-8"), "notes.weird"),
    ]

    assert [result.format for result in results] == [
        DocumentFormat.PDF,
        DocumentFormat.EPUB,
        DocumentFormat.MOBI,
        DocumentFormat.MD,
        DocumentFormat.TXT,
    ]
    assert "PDF pipeline content sample." in results[0].text
    assert "EPUB pipeline content sample." in results[1].text
    assert "MOBI pipeline sample" in results[2].text
    assert results[3].text == "# 标题\n正文内容"
    assert results[4].text == "Plain text body"

    pdf_toc = paginate(results[0].text).toc
    assert [entry.title for entry in pdf_toc] == ["Chapter 1"]
    epub_toc = paginate(results[1].text).toc
    assert [entry.title for entry in epub_toc] == ["第一章 开端"]


def test_oversized_input_is_rejected_before_extraction() -> None:
    adapter = _RecordingAdapter()
    ingestor = DocumentIngestor(IngestionSettings(max_input_bytes=10))
    ingestor.register_adapter(DocumentFormat.TXT, adapter)

    with pytest.raises(IngestionError) as excinfo:
        ingestor.ingest(b"x" * 11, "big.txt")

    assert excinfo.value.kind is ErrorKind.OVERSIZED_INPUT
    assert "MB" in excinfo.value.message
    assert adapter.calls == []


@pytest.mark.parametrize("payload", [b"", b"   \n\t  \r\n"])
def test_blank_text_fails_as_empty_content(payload: bytes) -> None:
    with pytest.raises(IngestionError) as excinfo:
        DocumentIngestor().ingest(payload, "empty.txt")

    assert excinfo.value.kind is ErrorKind.EMPTY_CONTENT


def test_blank_adapter_output_fails_for_any_format() -> None:
    ingestor = DocumentIngestor()
    ingestor.register_adapter(DocumentFormat.MOBI, _RecordingAdapter(ExtractedText(text=" \n", format=DocumentFormat.MOBI)))

    with pytest.raises(IngestionError) as excinfo:
        ingestor.ingest(b"payload", "book.mobi")

    assert excinfo.value.kind is ErrorKind.EMPTY_CONTENT


def test_unexpected_adapter_errors_become_unsupported_format() -> None:
    failure = RuntimeError("decoder exploded")
    ingestor = DocumentIngestor()
    ingestor.register_adapter(DocumentFormat.EPUB, _RecordingAdapter(failure))

    with pytest.raises(IngestionError) as excinfo:
        ingestor.ingest(b"payload", "book.epub")

    assert excinfo.value.kind is ErrorKind.UNSUPPORTED_FORMAT
    assert "decoder exploded" in str(excinfo.value)
    assert excinfo.value.__cause__ is failure


def test_typed_adapter_errors_propagate_unchanged() -> None:
    failure = IngestionError(ErrorKind.PASSWORD_PROTECTED, "locked", "book.pdf")
    ingestor = DocumentIngestor()
    ingestor.register_adapter(DocumentFormat.PDF, _RecordingAdapter(failure))

    with pytest.raises(IngestionError) as excinfo:
        ingestor.ingest(b"payload", "book.pdf")

    assert excinfo.value is failure


def test_unregistered_format_is_unsupported() -> None:
    with pytest.raises(IngestionError) as excinfo:
        DocumentIngestor(adapters={}).ingest(b"payload", "book.epub")

    assert excinfo.value.kind is ErrorKind.UNSUPPORTED_FORMAT


def test_register_adapter_requires_document_format() -> None:
    with pytest.raises(ValueError):
        DocumentIngestor().register_adapter("txt", _RecordingAdapter())  # type: ignore[arg-type]


def test_warnings_are_logged_and_returned(caplog: pytest.LogCaptureFixture) -> None:
    extracted = ExtractedText(text="body", format=DocumentFormat.EPUB, warnings=["chapter 3 missing"])
    ingestor = DocumentIngestor()
    ingestor.register_adapter(DocumentFormat.EPUB, _RecordingAdapter(extracted))

    with caplog.at_level(logging.INFO, logger="nebula.ingestion.ingestor"):
        result = ingestor.ingest(b"payload", "book.epub")

    assert result.warnings == ["chapter 3 missing"]
    assert "book.epub: chapter 3 missing" in caplog.text
    assert "Ingested book.epub as epub" in caplog.text


def test_each_ingestion_gets_its_own_source_document() -> None:
    adapter = _RecordingAdapter()
    ingestor = DocumentIngestor()
    ingestor.register_adapter(DocumentFormat.TXT, adapter)

    ingestor.ingest(bytearray(b"first"), "a.txt")
    ingestor.ingest(b"second", "b.txt", "text/plain")

    assert adapter.calls == [
        SourceDocument(b"first", "a.txt", None),
        SourceDocument(b"second", "b.txt", "text/plain"),
    ]
