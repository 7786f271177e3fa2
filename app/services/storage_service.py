"""스토리지 서비스 — S3 또는 로컬 파일 저장.

Storage Service — S3 or local file storage for uploaded artifacts
(payment proofs). AWS 키가 비어있으면 자동으로 로컬 모드로 전환됩니다.
The core only keeps the returned relative reference; files are write-once.
"""

import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path

from fastapi import UploadFile

from app.config import settings
from app.utils.exceptions import ValidationError

logger = logging.getLogger(__name__)

# 서버 루트 — LOCAL_UPLOADS_DIR 미설정 시 <root>/uploads 사용
_SERVER_ROOT: Path = Path(__file__).resolve().parent.parent.parent

# 허용 확장자 — Accepted proof file extensions
ALLOWED_EXTENSIONS: frozenset[str] = frozenset({"jpg", "jpeg", "png", "pdf", "webp", "heic"})
MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024


def uploads_dir() -> Path:
    """로컬 업로드 디렉토리 — resolved at call time so tests can redirect it."""
    return Path(settings.LOCAL_UPLOADS_DIR) if settings.LOCAL_UPLOADS_DIR else _SERVER_ROOT / "uploads"


class StorageService:
    """파일 업로드 서비스 — S3 또는 로컬 모드 자동 선택."""

    def __init__(self) -> None:
        self._client = None

    @property
    def is_local(self) -> bool:
        return not settings.AWS_ACCESS_KEY_ID or not settings.AWS_S3_BUCKET

    @property
    def client(self):
        if self.is_local:
            return None
        if self._client is None:
            import boto3
            from botocore.config import Config as BotoConfig

            self._client = boto3.client(
                "s3",
                region_name=settings.AWS_S3_REGION,
                aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
                aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
                config=BotoConfig(signature_version="s3v4"),
            )
        return self._client

    def _generate_key(self, filename: str, folder: str) -> str:
        ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else "bin"
        date_prefix = datetime.now(timezone.utc).strftime("%Y/%m/%d")
        return f"{folder}/{date_prefix}/{uuid.uuid4().hex}.{ext}"

    async def save_upload(self, upload: UploadFile, folder: str) -> str:
        """업로드 파일을 저장하고 상대 참조를 반환합니다.

        Store an uploaded file and return its stable relative reference
        (the storage key).

        Args:
            upload: 업로드 파일 (Uploaded file)
            folder: 저장 폴더 (Destination folder, e.g. "payment-proofs")

        Returns:
            str: 저장 키 (Relative storage reference)

        Raises:
            ValidationError: 빈 파일, 허용되지 않는 형식, 크기 초과
                             (Empty file, disallowed type, or too large)
        """
        filename: str = upload.filename or "upload.bin"
        ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError("Unsupported file type for payment proof", field="payment_proof")
        data: bytes = await upload.read()
        if not data:
            raise ValidationError("Uploaded file is empty", field="payment_proof")
        if len(data) > MAX_UPLOAD_BYTES:
            raise ValidationError("Uploaded file is too large", field="payment_proof")

        key: str = self._generate_key(filename, folder)
        if self.is_local:
            path = uploads_dir() / key
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        else:
            self.client.put_object(
                Bucket=settings.AWS_S3_BUCKET,
                Key=key,
                Body=data,
                ContentType=upload.content_type or "application/octet-stream",
            )
        logger.info("Stored upload %s (%d bytes)", key, len(data))
        return key


storage_service: StorageService = StorageService()
