"""Expansion of uploaded files (including zip archives) into materializable files."""

import io
import logging
import zipfile
import zlib
from typing import Iterable, List

from common.config.config import MAX_ARCHIVE_ENTRIES, MAX_EXTRACTED_BYTES
from application.services.upload.errors import FileProcessingError
from application.services.upload.types import InputFile, MaterializedFile

logger = logging.getLogger(__name__)

ZIP_CONTENT_TYPES = {
    "zip",
    "application/zip",
    "application/x-zip",
    "application/x-zip-compressed",
}
MACOS_RESOURCE_FORK_MARKER = "__MACOSX"


def is_zip_file(file: InputFile) -> bool:
    content_type = (file.content_type or "").split(";", 1)[0].strip().lower()
    return content_type in ZIP_CONTENT_TYPES or file.name.lower().endswith(".zip")


def _should_skip_entry(info: zipfile.ZipInfo) -> bool:
    return (
        info.is_dir()
        or MACOS_RESOURCE_FORK_MARKER in info.filename
        or info.filename.startswith(".")
    )


def _check_archive_limits(
    file: InputFile, entries: List[zipfile.ZipInfo], max_entries: int, max_total_bytes: int
) -> None:
    # file_size is the declared size; ZipFile.read never returns more than that
    total = sum(info.file_size for info in entries if not _should_skip_entry(info))
    if len(entries) > max_entries or total > max_total_bytes:
        raise FileProcessingError(
            f"Failed to process file {file.name}: archive exceeds extraction limits",
            details=(
                f"{len(entries)} entries, {total} bytes uncompressed; "
                f"limits are {max_entries} entries, {max_total_bytes} bytes"
            ),
        )


def extract_archive(
    file: InputFile,
    max_entries: int = MAX_ARCHIVE_ENTRIES,
    max_total_bytes: int = MAX_EXTRACTED_BYTES,
) -> List[MaterializedFile]:
    """Return every regular, non-hidden entry of a zip upload.

    All-or-nothing: a corrupt entry, or an archive over the entry-count or
    uncompressed-size limits, fails the whole archive before anything is kept.
    """
    logger.info(f"Processing ZIP file: {file.name}")
    extracted: List[MaterializedFile] = []
    try:
        with zipfile.ZipFile(io.BytesIO(file.content)) as archive:
            entries = archive.infolist()
            _check_archive_limits(file, entries, max_entries, max_total_bytes)
            for info in entries:
                if _should_skip_entry(info):
                    continue
                extracted.append(
                    MaterializedFile(path=info.filename, content=archive.read(info))
                )
    except (zipfile.BadZipFile, zlib.error, RuntimeError, NotImplementedError, EOFError, ValueError) as e:
        logger.error(f"Error processing file {file.name}: {e}")
        raise FileProcessingError(
            f"Failed to process file {file.name}: {e}", details=f"{type(e).__name__}: {e}"
        ) from e

    logger.info(f"Extracted {len(extracted)} of {len(entries)} entries from {file.name}")
    return extracted


def expand_files(files: Iterable[InputFile]) -> List[MaterializedFile]:
    """Flatten uploads into (relative path, content) pairs, expanding zips."""
    processed: List[MaterializedFile] = []
    for file in files:
        if is_zip_file(file):
            processed.extend(extract_archive(file))
        else:
            processed.append(MaterializedFile(path=file.name, content=file.content))

    logger.info(f"Total processed files: {len(processed)}")
    return processed
