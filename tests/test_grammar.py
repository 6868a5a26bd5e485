from __future__ import annotations

import pytest

from aws_chatops.commands.grammar import match, strip_mention
from aws_chatops.domain.commands import CommandKind


@pytest.mark.parametrize(
    "text",
    ["list s3 buckets", "LIST S3 BUCKETS", "  list   buckets  ", "please list s3"],
)
def test_list_buckets_variants(text: str) -> None:
    assert match(text).kind is CommandKind.LIST_BUCKETS


def test_create_bucket_extracts_parameters() -> None:
    command = match("create bucket My-Data in region EU-WEST-1", actor_id="U1")

    assert command.kind is CommandKind.CREATE_BUCKET
    assert command.param("name") == "My-Data"
    assert command.param("region") == "eu-west-1"
    assert command.param("versioning") == "false"
    assert command.actor_id == "U1"


def test_create_bucket_short_form_with_versioning() -> None:
    command = match("create bucket logs-archive in us-east-1 with versioning enabled")

    assert command.kind is CommandKind.CREATE_BUCKET
    assert command.param("name") == "logs-archive"
    assert command.param("region") == "us-east-1"
    assert command.param("versioning") == "true"


def test_create_bucket_wins_over_other_patterns() -> None:
    # Contains "info" and "list buckets" too; create-bucket is checked first.
    command = match("create bucket info-list-buckets in eu-central-1")
    assert command.kind is CommandKind.CREATE_BUCKET
    assert command.param("name") == "info-list-buckets"


def test_bucket_info_keeps_name_case() -> None:
    command = match("bucket info My-Bucket")
    assert command.kind is CommandKind.BUCKET_INFO
    assert command.param("name") == "My-Bucket"

    assert match("info reports").param("name") == "reports"


def test_bucket_info_without_name_is_unknown() -> None:
    command = match("bucket info")
    assert command.kind is CommandKind.UNKNOWN
    assert command.param("originalText") == "bucket info"


@pytest.mark.parametrize("text", ["list ec2 instances", "ec2 status", "List EC2"])
def test_list_instances_defaults_region(text: str) -> None:
    command = match(text)
    assert command.kind is CommandKind.LIST_INSTANCES
    assert "region" not in command.params


def test_list_instances_with_region() -> None:
    command = match("list ec2 instances in US-EAST-1")
    assert command.kind is CommandKind.LIST_INSTANCES
    assert command.param("region") == "us-east-1"


def test_show_instances() -> None:
    assert match("show ec2 instances").kind is CommandKind.SHOW_INSTANCES


def test_stop_and_reboot_text_commands() -> None:
    stop = match("stop instance i-0123456789abcdef0 in region eu-west-1")
    assert stop.kind is CommandKind.STOP_INSTANCE
    assert stop.param("instance_id") == "i-0123456789abcdef0"
    assert stop.param("region") == "eu-west-1"

    reboot = match("reboot instance i-0abc12345")
    assert reboot.kind is CommandKind.REBOOT_INSTANCE
    assert reboot.param("instance_id") == "i-0abc12345"
    assert reboot.param("region") == ""


@pytest.mark.parametrize("text", ["hello", "Hello bot", "well hello there"])
def test_greeting(text: str) -> None:
    command = match(text, actor_id="U1")
    assert command.kind is CommandKind.GREETING
    assert dict(command.params) == {}


def test_commands_win_over_greeting() -> None:
    assert match("hello, list s3 buckets").kind is CommandKind.LIST_BUCKETS
    assert match("bucket info hello-world").kind is CommandKind.BUCKET_INFO


@pytest.mark.parametrize("text", ["help", "HELP me", "pomoc"])
def test_help(text: str) -> None:
    assert match(text).kind is CommandKind.HELP


def test_unknown_echoes_collapsed_text() -> None:
    command = match("  delete   everything ")
    assert command.kind is CommandKind.UNKNOWN
    assert command.param("originalText") == "delete everything"
    assert command.raw_text == "delete everything"


def test_empty_text_is_unknown() -> None:
    command = match("")
    assert command.kind is CommandKind.UNKNOWN
    assert command.param("originalText") == ""


def test_match_is_deterministic() -> None:
    assert match("bucket info foo") == match("bucket info foo")


def test_command_params_are_read_only() -> None:
    command = match("bucket info foo")
    with pytest.raises(TypeError):
        command.params["name"] = "bar"  # type: ignore[index]


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("<@U012ABC> list s3 buckets", "list s3 buckets"),
        ("<@U012ABC|bot>: help", "help"),
        ("help", "help"),
        ("", ""),
    ],
)
def test_strip_mention(raw: str, expected: str) -> None:
    assert strip_mention(raw) == expected
