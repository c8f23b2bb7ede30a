"""EPUB adapter emitting chapter text in spine reading order."""

from __future__ import annotations

from io import BytesIO
import posixpath
from urllib.parse import unquote
from zipfile import BadZipFile, ZipFile

from bs4 import BeautifulSoup
from lxml import etree

from nebula.ingestion.errors import ErrorKind, IngestionError
from nebula.ingestion.models import DocumentFormat, ExtractedText, SourceDocument

CONTAINER_PATH = "META-INF/container.xml"
CHAPTER_SEPARATOR = "\n\n"


def _parse_xml(payload: bytes) -> etree._Element:
    parser = etree.XMLParser(resolve_entities=False, no_network=True, load_dtd=False, huge_tree=False)
    return etree.fromstring(payload, parser=parser)


def _first(nodes: list[object]) -> etree._Element | None:
    for node in nodes:
        if isinstance(node, etree._Element):
            return node
    return None


def chapter_text(markup: bytes) -> str:
    """Strip XHTML markup, keeping only the text nodes of the body."""

    # The HTML parser knows named entities such as &nbsp; without a DTD.
    soup = BeautifulSoup(markup, "lxml")
    for node in soup.find_all(["script", "style"]):
        node.decompose()
    body = soup.body or soup
    return body.get_text().strip()


def resolve_href(base_dir: str, href: str) -> str:
    """Turn a manifest href into an archive member name."""

    path = unquote(href.split("#", 1)[0])
    return posixpath.normpath(posixpath.join(base_dir, path)) if base_dir else posixpath.normpath(path)


class EPUBAdapter:
    """Extract text from EPUB content documents following the spine."""

    def extract(self, document: SourceDocument) -> ExtractedText:
        try:
            archive = ZipFile(BytesIO(document.data), "r")
        except BadZipFile as exc:
            raise IngestionError(ErrorKind.INVALID_CONTAINER, f"Invalid EPUB archive: {exc}", document.name) from exc

        with archive:
            opf_path = self._package_path(archive, document.name)
            manifest, spine = self._read_package(archive, opf_path, document.name)
            base_dir = posixpath.dirname(opf_path)

            parts: list[str] = []
            warnings: list[str] = []
            for idref in spine:
                href = manifest.get(idref)
                if not href:
                    warnings.append(f"Spine item '{idref}' has no manifest entry; skipped")
                    continue

                member = resolve_href(base_dir, href)
                try:
                    markup = archive.read(member)
                except KeyError:
                    warnings.append(f"Spine item '{idref}' points to missing file '{member}'; skipped")
                    continue
                except BadZipFile as exc:
                    warnings.append(f"Spine item '{idref}' could not be decompressed ({exc}); skipped")
                    continue

                text = chapter_text(markup)
                if text:
                    parts.append(text + CHAPTER_SEPARATOR)

        full_text = "".join(parts)
        if not full_text.strip():
            raise IngestionError(ErrorKind.EMPTY_CONTENT, "EPUB content appears empty", document.name)

        return ExtractedText(text=full_text, format=DocumentFormat.EPUB, warnings=warnings)

    def _package_path(self, archive: ZipFile, source: str) -> str:
        try:
            container = _parse_xml(archive.read(CONTAINER_PATH))
        except KeyError as exc:
            raise IngestionError(ErrorKind.INVALID_CONTAINER, "Invalid EPUB: missing container.xml", source) from exc
        except etree.XMLSyntaxError as exc:
            raise IngestionError(ErrorKind.INVALID_CONTAINER, f"Invalid EPUB container.xml: {exc}", source) from exc

        rootfile = _first(container.xpath("//*[local-name()='rootfile'][@full-path]"))
        opf_path = rootfile.get("full-path", "").strip() if rootfile is not None else ""
        if not opf_path:
            raise IngestionError(ErrorKind.INVALID_CONTAINER, "Invalid EPUB: cannot find package document path", source)
        return opf_path

    def _read_package(self, archive: ZipFile, opf_path: str, source: str) -> tuple[dict[str, str], list[str]]:
        try:
            package = _parse_xml(archive.read(opf_path))
        except KeyError as exc:
            raise IngestionError(ErrorKind.INVALID_CONTAINER, f"Invalid EPUB: missing package file {opf_path}", source) from exc
        except etree.XMLSyntaxError as exc:
            raise IngestionError(ErrorKind.INVALID_CONTAINER, f"Invalid EPUB package document: {exc}", source) from exc

        manifest_node = _first(package.xpath("//*[local-name()='manifest']"))
        spine_node = _first(package.xpath("//*[local-name()='spine']"))
        if manifest_node is None or spine_node is None:
            raise IngestionError(ErrorKind.MISSING_MANIFEST, "EPUB package has no manifest or spine", source)

        manifest: dict[str, str] = {}
        for item in manifest_node.xpath("./*[local-name()='item']"):
            item_id = item.get("id")
            href = item.get("href")
            if item_id and href:
                manifest[item_id] = href

        spine = [
            itemref.get("idref")
            for itemref in spine_node.xpath("./*[local-name()='itemref']")
            if itemref.get("idref")
        ]
        return manifest, spine
