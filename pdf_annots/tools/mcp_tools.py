import dataclasses
import json
import logging
from typing import Optional

from mcp.server.fastmcp import FastMCP

from pdf_annots.backends.pdf_document import PdfDocument, extract_annotations as backend_extract_annotations
from pdf_annots.core.config import ExtractionConfig
from pdf_annots.core.dates import parse_cutoff
from pdf_annots.core.errors import AnnotationError
from pdf_annots.core.labels import label_for, page_label_map
from pdf_annots.core.paths import ALLOWED_EXTENSIONS, SearchRoots

logger = logging.getLogger(__name__)


def create_server(roots: SearchRoots, config: Optional[ExtractionConfig] = None) -> FastMCP:
    """Build the MCP server exposing annotation extraction over `roots`."""
    base_config = config or ExtractionConfig(write_images=False)
    mcp = FastMCP("PDF Annotations")

    @mcp.tool()
    async def extract_annotations(
        file_path: str,
        page_range: Optional[str] = None,
        ignore_before: Optional[str] = None,
    ) -> str:
        """Extract highlights, underlines, strikeouts, notes and rectangles from a PDF.

        Parameters
        ----------
        file_path: str
            Filename (relative) or absolute path to the PDF inside the accessible directories.
        page_range: Optional[str]
            `first`, `last`, `N`, `S-E`, a comma list of those, or `None` for all pages.
        ignore_before: Optional[str]
            ISO 8601 date; annotations modified before it are left out.
        """
        path = roots.find(file_path)
        if not path:
            return f"Error: Could not find file '{file_path}'."
        try:
            cutoff = parse_cutoff(ignore_before) if ignore_before else None
            cfg = dataclasses.replace(base_config, page_range=page_range, ignore_before=cutoff)
            items = backend_extract_annotations(path, cfg)
        except (AnnotationError, ValueError) as e:
            return f"Error: {e}"
        result = {
            "file_name": path.name,
            "path": str(path),
            "page_range": page_range or "all",
            "total_annotations": len(items),
            "annotations": items,
        }
        return json.dumps(result, indent=2, ensure_ascii=False)

    @mcp.tool()
    async def get_page_labels(file_path: str) -> str:
        """Return the display label of every page (e.g. "iv", "A-3")."""
        path = roots.find(file_path)
        if not path:
            return f"Error: Could not find file '{file_path}'."
        try:
            with PdfDocument(path) as doc:
                total = doc.page_count()
                labels = page_label_map(total, doc.page_labels())
        except AnnotationError as e:
            return f"Error: {e}"
        pages = [{"page": i + 1, "label": label_for(labels, i)} for i in range(total)]
        return json.dumps({"file_name": path.name, "has_labels": labels is not None, "pages": pages}, indent=2)

    @mcp.tool()
    async def list_pdf_files(directory: str = "all", depth: int = 0, limit: int = 50) -> str:
        """List PDFs under the accessible directories, most recent first.

        `directory` is "all" or a substring of a root's name or path; `depth`
        is how many subdirectory levels to include (max 5).
        """
        listing = roots.list_pdfs(directory, depth, limit)
        if not listing:
            return f"Error: No accessible directory matched '{directory}'."
        return json.dumps(listing, indent=2, ensure_ascii=False)

    @mcp.tool()
    async def show_accessible_directories() -> str:
        """Return the current directory/configuration constraints as JSON."""
        info = {
            "accessible_directories": roots.directories,
            "directory_count": len(roots.directories),
            "max_file_size_mb": roots.max_file_size // (1024 * 1024),
            "allowed_extensions": ALLOWED_EXTENSIONS,
        }
        return json.dumps(info, indent=2, ensure_ascii=False)

    return mcp
