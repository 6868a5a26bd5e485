import pytest

from aws_chatops.domain.commands import CommandKind
from aws_chatops.policy.loader import load_policy


def test_load_policy(tmp_path):
    path = tmp_path / "policy.yaml"
    path.write_text(
        """
version: 1
defaults:
  allow_unlisted: false
rules:
  deny_actors:
commands:
  StopInstance:
    allow_actors:
      - "^UOPS"
  Help:
""",
        encoding="utf-8",
    )

    config = load_policy(str(path))

    assert config.defaults.allow_unlisted is False
    assert config.rules.deny_actors == []
    assert config.commands[CommandKind.STOP_INSTANCE].allow_actors == ["^UOPS"]
    assert config.commands[CommandKind.HELP].allow_actors == []


def test_empty_policy_file_uses_defaults(tmp_path):
    path = tmp_path / "policy.yaml"
    path.write_text("", encoding="utf-8")

    config = load_policy(str(path))

    assert config.defaults.allow_unlisted is True
    assert config.commands == {}


def test_missing_policy_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_policy(str(tmp_path / "absent.yaml"))


def test_unknown_command_kind_is_rejected(tmp_path):
    path = tmp_path / "policy.yaml"
    path.write_text("commands:\n  TerminateInstance: {}\n", encoding="utf-8")

    with pytest.raises(ValueError):
        load_policy(str(path))


def test_malformed_yaml_names_the_file(tmp_path):
    path = tmp_path / "policy.yaml"
    path.write_text("commands: [unclosed\n", encoding="utf-8")

    with pytest.raises(ValueError, match="not valid YAML"):
        load_policy(str(path))


def test_non_mapping_document_is_rejected(tmp_path):
    path = tmp_path / "policy.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ValueError, match="must contain a mapping"):
        load_policy(str(path))
