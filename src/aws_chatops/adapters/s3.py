"""S3 bucket operations."""

from __future__ import annotations

import logging

from botocore.exceptions import BotoCoreError, ClientError

from aws_chatops.adapters.errors import (
    MALFORMED_RESPONSE_ERRORS,
    aws_error_suffix,
    classify,
    error_code,
    malformed_response_message,
)
from aws_chatops.domain.commands import CommandResult, ErrorKind
from aws_chatops.execution.aws_client import ClientFactory, call_aws_api_async
from aws_chatops.utils.time import iso_date

logger = logging.getLogger(__name__)

_AWS_ERRORS = (ClientError, BotoCoreError)

# S3 reports the classic region as an empty constraint and some legacy buckets as "EU".
_LEGACY_LOCATIONS = {None: "us-east-1", "": "us-east-1", "EU": "eu-west-1"}

_NO_ENCRYPTION_CODE = "ServerSideEncryptionConfigurationNotFoundError"


class S3Adapter:
    def __init__(self, get_client: ClientFactory, default_region: str) -> None:
        self._get_client = get_client
        self._default_region = default_region

    async def list_buckets(self) -> CommandResult:
        try:
            client = self._get_client("s3", self._default_region)
            response = await call_aws_api_async(client, "list_buckets")
            buckets = [
                {"name": bucket["Name"], "created": iso_date(bucket.get("CreationDate"))}
                for bucket in response.get("Buckets") or []
            ]
        except _AWS_ERRORS as exc:
            logger.warning("Listing S3 buckets failed: %s", exc)
            return CommandResult.fail(
                classify(exc),
                f"An error occurred while fetching S3 data.\n{aws_error_suffix(exc)}",
            )
        except MALFORMED_RESPONSE_ERRORS as exc:
            logger.exception("Unexpected ListBuckets response")
            return CommandResult.fail(
                ErrorKind.ADAPTER_FAILURE, malformed_response_message("ListBuckets", exc)
            )

        if not buckets:
            return CommandResult.ok("No S3 buckets found on this AWS account.")
        return CommandResult.ok(f"Found {len(buckets)} S3 buckets.", data=buckets)

    async def bucket_info(self, name: str) -> CommandResult:
        if not name:
            return CommandResult.fail(ErrorKind.VALIDATION, "A bucket name is required.")

        try:
            client = self._get_client("s3", self._default_region)
            await call_aws_api_async(client, "head_bucket", Bucket=name)
        except _AWS_ERRORS as exc:
            kind = classify(exc)
            if kind is ErrorKind.RESOURCE_NOT_FOUND:
                return CommandResult.fail(
                    kind,
                    f"Bucket `{name}` does not exist or is not accessible.\n"
                    f"{aws_error_suffix(exc)}",
                )
            logger.warning("Existence check for bucket %s failed: %s", name, exc)
            return CommandResult.fail(
                kind,
                f"Failed to fetch information for bucket `{name}`.\n{aws_error_suffix(exc)}",
            )

        region = await self._bucket_location(client, name)
        versioning = await self._bucket_versioning(client, name)
        encryption = await self._bucket_encryption(client, name)
        return CommandResult.ok(
            f"🪣 Details for bucket `{name}`:\n"
            f"*Region:* {region}\n"
            f"*Versioning:* {versioning}\n"
            f"*Encryption:* {encryption}"
        )

    async def _bucket_location(self, client, name: str) -> str:
        try:
            response = await call_aws_api_async(client, "get_bucket_location", Bucket=name)
        except _AWS_ERRORS as exc:
            logger.info("Location lookup for %s failed: %s", name, exc)
            return "N/A"
        constraint = response.get("LocationConstraint")
        return _LEGACY_LOCATIONS.get(constraint, constraint)

    async def _bucket_versioning(self, client, name: str) -> str:
        try:
            response = await call_aws_api_async(client, "get_bucket_versioning", Bucket=name)
        except _AWS_ERRORS as exc:
            logger.info("Versioning lookup for %s failed: %s", name, exc)
            return "Disabled"
        return response.get("Status") or "Disabled"

    async def _bucket_encryption(self, client, name: str) -> str:
        try:
            response = await call_aws_api_async(client, "get_bucket_encryption", Bucket=name)
        except _AWS_ERRORS as exc:
            if error_code(exc) != _NO_ENCRYPTION_CODE:
                logger.info("Encryption lookup for %s failed: %s", name, exc)
            return "Disabled"
        rules = response.get("ServerSideEncryptionConfiguration", {}).get("Rules") or []
        for rule in rules:
            algorithm = rule.get("ApplyServerSideEncryptionByDefault", {}).get("SSEAlgorithm")
            if algorithm:
                return algorithm
        return "Disabled"

    async def create_bucket(
        self, name: str, region: str, enable_versioning: bool = False
    ) -> CommandResult:
        if not name or not region:
            return CommandResult.fail(
                ErrorKind.VALIDATION, "Both a bucket name and a region are required."
            )

        params: dict[str, object] = {"Bucket": name}
        if region != "us-east-1":
            params["CreateBucketConfiguration"] = {"LocationConstraint": region}

        try:
            client = self._get_client("s3", region)
            response = await call_aws_api_async(client, "create_bucket", **params)
        except _AWS_ERRORS as exc:
            kind = classify(exc)
            if kind is ErrorKind.RESOURCE_CONFLICT:
                return CommandResult.fail(
                    kind, f"Bucket *{name}* already exists and is owned by you."
                )
            logger.warning("Creating bucket %s in %s failed: %s", name, region, exc)
            return CommandResult.fail(
                kind,
                f"Failed to create or configure bucket *{name}*.\n{aws_error_suffix(exc)}",
            )

        location = response.get("Location") or f"/{name}"
        message = f"Bucket *{name}* was created successfully. Location: `{location}`"
        if not enable_versioning:
            return CommandResult.ok(message)

        try:
            await call_aws_api_async(
                client,
                "put_bucket_versioning",
                Bucket=name,
                VersioningConfiguration={"Status": "Enabled"},
            )
        except _AWS_ERRORS as exc:
            logger.warning("Enabling versioning on %s failed: %s", name, exc)
            return CommandResult.fail(
                ErrorKind.ADAPTER_FAILURE,
                f"{message}\nBut enabling versioning failed, so the bucket exists "
                f"without versioning.\n{aws_error_suffix(exc)}",
            )
        return CommandResult.ok(f"{message}\n*Versioning:* Enabled")
