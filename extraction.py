import asyncio
import logging
import os
import uuid
from concurrent.futures import ThreadPoolExecutor
from typing import List

from fastapi import UploadFile
from langchain_community.document_loaders import Docx2txtLoader, PyPDFLoader, TextLoader
from langchain_core.documents import Document

logger = logging.getLogger(__name__)

PDF = "application/pdf"
DOC = "application/msword"
DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
TXT = "text/plain"
ALLOWED_TYPES = (PDF, DOC, DOCX, TXT)

CHUNK_SIZE = 1024 * 1024


class FileTooLarge(Exception):
    pass


class UnsupportedFileType(Exception):
    pass


class AsyncDocumentExtractor:
    """Turns uploaded PDF / Word / text files into plain transcript text."""

    def __init__(self, upload_dir: str, max_workers: int = 4):
        self.upload_dir = upload_dir
        os.makedirs(upload_dir, exist_ok=True)
        # loaders are blocking
        self.executor = ThreadPoolExecutor(max_workers=max_workers)

    def _load_document_sync(self, file_path: str, content_type: str) -> List[Document]:
        if content_type == PDF:
            loader = PyPDFLoader(file_path)
        elif content_type in (DOC, DOCX):
            loader = Docx2txtLoader(file_path)
        elif content_type == TXT:
            loader = TextLoader(file_path, encoding="utf-8")
        else:
            raise UnsupportedFileType(f"Unsupported file type: {content_type}")
        return loader.load()

    async def save_upload(self, file: UploadFile, max_bytes: int) -> str:
        """Copy the upload to a temporary file, refusing anything over ``max_bytes``."""
        dest_path = os.path.join(self.upload_dir, f"{uuid.uuid4()}_{os.path.basename(file.filename or 'upload')}")
        size = 0
        try:
            with open(dest_path, "wb") as out_f:
                while True:
                    chunk = await file.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    size += len(chunk)
                    if size > max_bytes:
                        raise FileTooLarge(f"File exceeds {max_bytes} bytes")
                    out_f.write(chunk)
        except BaseException:
            self.discard(dest_path)
            raise
        finally:
            await file.close()
        return dest_path

    async def extract_text_async(self, file_path: str, content_type: str) -> str:
        loop = asyncio.get_running_loop()
        documents = await loop.run_in_executor(
            self.executor,
            self._load_document_sync,
            file_path,
            content_type,
        )
        logger.debug("Loaded %d pages from %s", len(documents), file_path)
        return "\n".join(doc.page_content for doc in documents)

    def discard(self, file_path: str) -> None:
        if os.path.exists(file_path):
            os.remove(file_path)

    def shutdown(self) -> None:
        self.executor.shutdown(wait=False)
