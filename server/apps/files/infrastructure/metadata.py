"""Metadata extraction utilities for uploaded documents."""

import hashlib
import mimetypes
import re
import secrets
import time
from pathlib import Path
from typing import BinaryIO, Final

_CHUNK_SIZE: Final = 8192  # 8KB chunks for checksum calculation
_STEM_MAX_LENGTH: Final = 50
_RANDOM_BYTES: Final = 16  # 32 hex characters
_UNSAFE_CHARS: Final = re.compile('[^a-zA-Z0-9]')

# Leading bytes of formats whose declared type is checked against content
FILE_SIGNATURES: Final[dict[str, bytes]] = {
    'application/pdf': b'%PDF',
    'image/jpeg': b'\xff\xd8\xff',
    'image/png': b'\x89PNG',
    'image/gif': b'GIF8',
}
_HEADER_LENGTH: Final = max(len(sig) for sig in FILE_SIGNATURES.values())


def detect_mime_type(filename: str) -> str:
    """Guess MIME type from the filename extension.

    Used when the client does not declare a content type.

    Args:
        filename: Filename with extension.

    Returns:
        MIME type string (e.g., 'image/jpeg', 'application/pdf').
        Returns 'application/octet-stream' if type cannot be determined.
    """
    mime_type, _ = mimetypes.guess_type(filename)
    if mime_type is None:
        return 'application/octet-stream'
    return mime_type


def calculate_checksum(file_obj: BinaryIO) -> str:
    """Calculate SHA256 checksum of file.

    Reads file in chunks and resets the file pointer afterwards.

    Args:
        file_obj: File-like object to checksum.

    Returns:
        Hex-encoded SHA256 hash string.
    """
    sha256_hash = hashlib.sha256()
    file_obj.seek(0)
    for chunk in iter(lambda: file_obj.read(_CHUNK_SIZE), b''):
        sha256_hash.update(chunk)
    file_obj.seek(0)
    return sha256_hash.hexdigest()


def get_file_extension(filename: str) -> str:
    """Get file extension from filename.

    Args:
        filename: Filename (e.g., 'document.PDF').

    Returns:
        Extension without dot, lowercase (e.g., 'pdf').
        Returns empty string if no extension.
    """
    extension = Path(filename).suffix
    return extension.lstrip('.').lower()


def sanitize_stem(filename: str) -> str:
    """Make the part of a filename before its first dot key-safe.

    Every character outside ``[a-zA-Z0-9]`` becomes ``_``, and the
    result is truncated to 50 characters.

    Args:
        filename: Original filename (e.g., 'My CV (final).pdf').

    Returns:
        Sanitized stem (e.g., 'My_CV__final_'), ``file`` when empty.
    """
    stem = Path(filename).name.split('.')[0]
    sanitized = _UNSAFE_CHARS.sub('_', stem)[:_STEM_MAX_LENGTH]
    return sanitized or 'file'


def generate_storage_key(
    original_name: str,
    entity_type: str,
    entity_id: int,
    category: str,
) -> str:
    """Build a fresh storage key for an upload.

    Format:
    {entity_type}/{entity_id}/{category}/{ms_timestamp}_{32 hex}_{stem}.{ext}

    The random component makes two calls with identical arguments
    produce different keys.

    Args:
        original_name: Filename supplied by the uploader.
        entity_type: Owner kind.
        entity_id: Owner primary key.
        category: Document category.

    Returns:
        Storage key.
    """
    timestamp = time.time_ns() // 1_000_000
    random_part = secrets.token_hex(_RANDOM_BYTES)
    stored_name = '{0}_{1}_{2}'.format(
        timestamp,
        random_part,
        sanitize_stem(original_name),
    )
    extension = get_file_extension(original_name)
    if extension:
        stored_name = f'{stored_name}.{extension}'
    return f'{entity_type}/{entity_id}/{category}/{stored_name}'


def extract_filename(storage_key: str) -> str:
    """Extract the stored name (last segment) from a storage key."""
    return Path(storage_key).name


def validate_file_header(content: BinaryIO | bytes, mime_type: str) -> bool:
    """Check that content starts with the signature of its declared type.

    Only PDF, JPEG, PNG and GIF are checked; any other type passes.
    File objects are rewound after reading.

    Args:
        content: File-like object or leading bytes of the file.
        mime_type: Declared MIME type.

    Returns:
        True if the header matches or the type is not checked.
    """
    signature = FILE_SIGNATURES.get(mime_type)
    if signature is None:
        return True

    if isinstance(content, (bytes, bytearray)):
        header = bytes(content[:_HEADER_LENGTH])
    else:
        content.seek(0)
        header = content.read(_HEADER_LENGTH)
        content.seek(0)
    return header.startswith(signature)
