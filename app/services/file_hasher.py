"""
app/services/file_hasher.py

Content digests for exact-duplicate detection.
"""

from __future__ import annotations

import hashlib
from collections.abc import Sequence

from app.domain.report_import import FileHashInfo, UploadedFile


class FileHasher:
    """
    SHA-256 over raw file bytes. One differing byte is a different file.
    """

    def hash_bytes(self, content: bytes) -> str:
        return hashlib.sha256(content).hexdigest()

    def describe(self, upload: UploadedFile) -> FileHashInfo:
        return FileHashInfo(
            file_hash=self.hash_bytes(upload.content),
            file_name=upload.file_name,
            file_size=upload.file_size,
        )

    def find_identical(self, uploads: Sequence[UploadedFile]) -> list[list[FileHashInfo]]:
        """
        Groups of byte-identical files within one batch, in upload order.
        Only groups with more than one member are returned.
        """

        groups: dict[str, list[FileHashInfo]] = {}
        for upload in uploads:
            info = self.describe(upload)
            groups.setdefault(info.file_hash, []).append(info)
        return [members for members in groups.values() if len(members) > 1]
