import logging
import os
from pathlib import Path
from typing import Iterable, Iterator, List, Optional

logger = logging.getLogger(__name__)

MAX_FILE_SIZE = 100 * 1024 * 1024  # 100MB
ALLOWED_EXTENSIONS = [".pdf"]
MAX_DEPTH = 5


def _real(path: str) -> str:
    return os.path.realpath(os.path.abspath(os.path.expanduser(path)))


def _is_within(base: str, target: str) -> bool:
    base = os.path.join(os.path.realpath(base), "")  # ensure trailing separator
    target = os.path.realpath(target)
    return target.startswith(base) or target == base[:-1]


class SearchRoots:
    """Directories the MCP server may read PDFs from."""

    def __init__(self, directories: Iterable[str], max_file_size: int = MAX_FILE_SIZE):
        self.max_file_size = int(max_file_size)
        self.directories: List[str] = []
        for d in directories:
            real_path = _real(d)
            if not os.path.isdir(real_path):
                logger.warning(f"Not a directory, skipped: {d} -> {real_path}")
                continue
            if not os.access(real_path, os.R_OK):
                logger.warning(f"Unreadable directory, skipped: {d} -> {real_path}")
                continue
            if real_path not in self.directories:
                self.directories.append(real_path)
        if not self.directories:
            raise ValueError("At least one readable directory must be given")
        logger.info(f"Accessible directories: {self.directories}")

    def resolve(self, file_path: str) -> Optional[Path]:
        """Return the real path of an allowed PDF, or None."""
        real_path = _real(file_path)
        if ".." in Path(file_path).parts or not any(_is_within(d, real_path) for d in self.directories):
            logger.warning(f"Path outside allowed directories: {file_path}")
            return None
        resolved = Path(real_path)
        if not resolved.is_file():
            return None
        if resolved.suffix.lower() not in ALLOWED_EXTENSIONS:
            logger.warning(f"Disallowed file extension: {file_path}")
            return None
        if resolved.stat().st_size > self.max_file_size:
            logger.warning(f"File too large: {file_path}")
            return None
        return resolved

    def find(self, file_name: str) -> Optional[Path]:
        """Resolve an absolute path, or look the name up (exact, then substring) in each root."""
        if os.path.isabs(file_name) or file_name.startswith("~"):
            return self.resolve(file_name)
        for directory in self.directories:
            path = self.resolve(os.path.join(directory, file_name))
            if path:
                return path
            for pdf in sorted(Path(directory).glob("*.pdf")):
                if file_name.lower() in pdf.name.lower():
                    path = self.resolve(str(pdf))
                    if path:
                        return path
        logger.warning(f"File not found: {file_name}")
        return None

    def iter_pdfs(self, root: str, depth: int = 0) -> Iterator[Path]:
        """PDFs under `root` down to `depth` directory levels (0 = root only)."""
        depth = max(0, min(int(depth), MAX_DEPTH))
        for dirpath, dirnames, filenames in os.walk(root, topdown=True, followlinks=False):
            rel = os.path.relpath(dirpath, root)
            level = 0 if rel == "." else rel.count(os.sep) + 1
            if level >= depth:
                dirnames[:] = []
            for fn in filenames:
                if fn.lower().endswith(".pdf"):
                    yield Path(dirpath) / fn

    def list_pdfs(self, directory: str = "all", depth: int = 0, limit: int = 50) -> dict:
        """PDFs per matching root, most recently modified first."""
        roots = self.directories
        if directory != "all":
            roots = [
                d for d in self.directories
                if directory.lower() in os.path.basename(d).lower() or directory in d
            ]
        limit = max(1, min(int(limit), 200))
        listing = {}
        for root in roots:
            files = sorted(self.iter_pdfs(root, depth), key=lambda p: p.stat().st_mtime, reverse=True)
            listing[root] = {
                "total": len(files),
                "files": [
                    {"path": str(p.relative_to(root)), "size_mb": round(p.stat().st_size / 1024**2, 2)}
                    for p in files[:limit]
                ],
            }
        return listing
