"""S3-compatible multipart upload sink.

Supports AWS S3, MinIO, and any S3-compatible object storage through boto3.
Chunks are buffered up to ``part_size`` and uploaded as multipart parts, so
memory stays bounded by one part regardless of object size. Objects that
never fill a part are written with a single ``put_object`` on finalize.

Transient part failures (throttling, 5xx, connection errors) are retried by
this sink with tenacity. The orchestrator itself never retries.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional

import boto3
import tenacity
from botocore.exceptions import BotoCoreError, ClientError

from ingestion.exceptions import ConfigurationError, SinkError

logger = logging.getLogger(__name__)

MIN_PART_SIZE = 5 * 1024 * 1024
DEFAULT_PART_SIZE = 8 * 1024 * 1024
DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BACKOFF_SECONDS = 1.0


def is_transient_s3_error(exc: BaseException) -> bool:
    """Determine if an S3 exception should trigger a retry."""
    if isinstance(exc, BotoCoreError):
        return True
    if isinstance(exc, ClientError):
        response = getattr(exc, "response", {}) or {}
        try:
            status = int(response.get("ResponseMetadata", {}).get("HTTPStatusCode", 0))
        except (TypeError, ValueError):
            status = 0
        code = response.get("Error", {}).get("Code")
        return status == 429 or status >= 500 or code in {"SlowDown", "RequestLimitExceeded"}
    return False


class S3Sink:
    """Stream accepted chunks into ``s3://bucket/key``."""

    sink_type = "s3"

    def __init__(
        self,
        bucket: str,
        key: str,
        part_size: int = DEFAULT_PART_SIZE,
        client: Optional[Any] = None,
        endpoint_url: Optional[str] = None,
        region_name: Optional[str] = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        backoff_seconds: float = DEFAULT_BACKOFF_SECONDS,
    ) -> None:
        if not bucket:
            raise ConfigurationError("bucket is required for the s3 sink", key="bucket")
        if not key:
            raise ConfigurationError("key is required for the s3 sink", key="key")
        if part_size < MIN_PART_SIZE:
            raise ConfigurationError(
                f"part_size must be at least {MIN_PART_SIZE} bytes", key="part_size"
            )
        if max_attempts < 1:
            raise ConfigurationError("max_attempts must be at least 1", key="max_attempts")

        self.bucket = bucket
        self.key = key
        self.part_size = part_size
        self.max_attempts = max_attempts
        self.backoff_seconds = backoff_seconds
        self.client = client or boto3.client(
            "s3", endpoint_url=endpoint_url, region_name=region_name
        )
        self.bytes_uploaded = 0
        self._buffer = bytearray()
        self._upload_id: Optional[str] = None
        self._parts: List[Dict[str, Any]] = []
        self._finalized = False
        self._aborted = False

    @property
    def uri(self) -> str:
        return f"s3://{self.bucket}/{self.key}"

    @property
    def upload_id(self) -> Optional[str]:
        return self._upload_id

    def _log_retry(self, retry_state: tenacity.RetryCallState) -> None:
        exception = retry_state.outcome.exception() if retry_state.outcome else None
        logger.warning(
            "S3 call attempt %d/%d for %s failed: %s. Retrying in %.1fs...",
            retry_state.attempt_number,
            self.max_attempts,
            self.uri,
            exception,
            retry_state.next_action.sleep if retry_state.next_action else 0,
        )

    async def _call(self, operation: str, fn: Callable[..., Any], **kwargs: Any) -> Any:
        """Run a blocking boto3 call in a worker thread with transient-error retry."""
        retrying = tenacity.AsyncRetrying(
            stop=tenacity.stop_after_attempt(self.max_attempts),
            wait=tenacity.wait_exponential(
                multiplier=self.backoff_seconds, min=self.backoff_seconds
            )
            + tenacity.wait_random(0, self.backoff_seconds * 0.5),
            retry=tenacity.retry_if_exception(is_transient_s3_error),
            before_sleep=self._log_retry,
            reraise=True,
        )
        response = None
        try:
            async for attempt in retrying:
                with attempt:
                    response = await asyncio.to_thread(fn, **kwargs)
        except (BotoCoreError, ClientError) as exc:
            raise SinkError(
                f"S3 {operation} failed for {self.uri}",
                sink_type=self.sink_type,
                operation=operation,
                location=self.uri,
                original_error=exc,
            ) from exc
        return response

    def _check_open(self, operation: str) -> None:
        if self._finalized or self._aborted:
            raise SinkError(
                f"{operation}() called on a closed s3 sink",
                sink_type=self.sink_type,
                operation=operation,
                location=self.uri,
            )

    async def _upload_part(self, body: bytes) -> None:
        if self._upload_id is None:
            response = await self._call(
                "create_multipart_upload",
                self.client.create_multipart_upload,
                Bucket=self.bucket,
                Key=self.key,
            )
            self._upload_id = response["UploadId"]
            logger.debug("Started multipart upload %s for %s", self._upload_id, self.uri)

        part_number = len(self._parts) + 1
        response = await self._call(
            "upload_part",
            self.client.upload_part,
            Bucket=self.bucket,
            Key=self.key,
            UploadId=self._upload_id,
            PartNumber=part_number,
            Body=body,
        )
        self._parts.append({"PartNumber": part_number, "ETag": response["ETag"]})
        self.bytes_uploaded += len(body)
        logger.debug("Uploaded part %d (%d bytes) of %s", part_number, len(body), self.uri)

    async def accept(self, chunk: bytes) -> None:
        self._check_open("accept")
        self._buffer.extend(chunk)
        while len(self._buffer) >= self.part_size:
            body = bytes(self._buffer[: self.part_size])
            del self._buffer[: self.part_size]
            await self._upload_part(body)

    async def finalize(self) -> None:
        self._check_open("finalize")
        self._finalized = True
        if self._upload_id is None:
            body = bytes(self._buffer)
            await self._call(
                "put_object", self.client.put_object, Bucket=self.bucket, Key=self.key, Body=body
            )
            self.bytes_uploaded += len(body)
        else:
            if self._buffer:
                await self._upload_part(bytes(self._buffer))
            await self._call(
                "complete_multipart_upload",
                self.client.complete_multipart_upload,
                Bucket=self.bucket,
                Key=self.key,
                UploadId=self._upload_id,
                MultipartUpload={"Parts": self._parts},
            )
        self._buffer.clear()
        logger.info("Uploaded %d bytes to %s", self.bytes_uploaded, self.uri)

    async def abort(self, error: BaseException) -> None:
        if self._aborted:
            return
        self._aborted = True
        self._buffer.clear()
        if self._upload_id is None:
            return
        upload_id, self._upload_id = self._upload_id, None
        logger.warning("Aborting multipart upload %s for %s: %s", upload_id, self.uri, error)
        await self._call(
            "abort_multipart_upload",
            self.client.abort_multipart_upload,
            Bucket=self.bucket,
            Key=self.key,
            UploadId=upload_id,
        )
