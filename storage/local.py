import os
import re
import time
import uuid
import shutil
import logging
from typing import Optional
from fastapi import UploadFile

# Configure logging
logger = logging.getLogger(__name__)

# Extensions are kept only when they are plain alphanumerics, e.g. ".png"
SAFE_EXTENSION = re.compile(r"^\.[A-Za-z0-9]+$")

class LocalUploadStore:
    """Filesystem storage for uploaded images, served back as static files."""

    def __init__(self, upload_dir: str, url_path: str = "uploads"):
        self.upload_dir = os.path.abspath(upload_dir)
        self.url_path = url_path.strip("/")

    def initialize(self) -> None:
        """Create the upload directory if it does not exist yet."""
        os.makedirs(self.upload_dir, exist_ok=True)
        logger.info(f"Upload directory ready: {self.upload_dir}")

    @staticmethod
    def generate_filename(original_filename: str) -> str:
        """Millisecond timestamp plus a random suffix, keeping a safe original extension."""
        file_extension = os.path.splitext(original_filename)[1]
        if not SAFE_EXTENSION.match(file_extension):
            file_extension = ""
        return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}{file_extension.lower()}"

    def save(self, file: Optional[UploadFile]) -> Optional[str]:
        """
        Write an uploaded file into the upload directory.

        Args:
            file: The uploaded file, or None when the request carried no file

        Returns:
            The relative reference (e.g. "uploads/1700000000000-1a2b3c4d.png"),
            or None when there was nothing to store
        """
        # Browsers send an empty part with no filename when the field is left blank
        if file is None or not file.filename:
            return None

        filename = self.generate_filename(file.filename)

        with open(os.path.join(self.upload_dir, filename), "wb") as buffer:
            shutil.copyfileobj(file.file, buffer)
            size_bytes = buffer.tell()

        logger.info(f"Stored upload {file.filename} as {filename} ({size_bytes} bytes)")
        return f"{self.url_path}/{filename}"

    def resolve(self, reference: str) -> str:
        """Map a stored reference to its absolute path inside the upload directory."""
        # Only the last component is trusted so a reference cannot escape the directory
        return os.path.join(self.upload_dir, os.path.basename(reference))

    def delete(self, reference: str) -> bool:
        """Remove the file behind a reference; a missing file is a no-op."""
        file_path = self.resolve(reference)
        try:
            os.remove(file_path)
        except FileNotFoundError:
            logger.info(f"Upload already gone: {file_path}")
            return False
        logger.info(f"Deleted upload: {file_path}")
        return True
