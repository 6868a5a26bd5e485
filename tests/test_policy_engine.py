import pytest

from aws_chatops.domain.commands import CommandKind
from aws_chatops.policy.engine import AllowAllPolicy, PolicyEngine
from aws_chatops.policy.models import CommandRule, PolicyConfig, PolicyDefaults, PolicyRules


@pytest.fixture
def policy_config():
    return PolicyConfig(
        rules=PolicyRules(deny_actors=[r"^UBANNED$"]),
        commands={
            CommandKind.STOP_INSTANCE: CommandRule(allow_actors=[r"^UOPS"]),
            CommandKind.CREATE_BUCKET: CommandRule(allow_actors=[]),
        },
    )


@pytest.fixture
def engine(policy_config):
    return PolicyEngine(policy_config)


def test_deny_wins(engine):
    decision = engine.evaluate("UBANNED", CommandKind.HELP)
    assert not decision.allowed
    assert "Actor denied by policy rule" in decision.reasons[0]


def test_allowlisted_actor(engine):
    decision = engine.evaluate("UOPS42", CommandKind.STOP_INSTANCE)
    assert decision.allowed
    assert decision.reasons == ["Allowed by policy rule: ^UOPS"]


def test_actor_not_in_allowlist(engine):
    assert not engine.is_authorized("UDEV1", CommandKind.STOP_INSTANCE)
    assert not engine.is_authorized("UOPS1", CommandKind.CREATE_BUCKET)


def test_unlisted_kind_follows_default(policy_config):
    assert PolicyEngine(policy_config).is_authorized("UDEV1", CommandKind.LIST_BUCKETS)

    policy_config.defaults = PolicyDefaults(allow_unlisted=False)
    decision = PolicyEngine(policy_config).evaluate("UDEV1", CommandKind.LIST_BUCKETS)
    assert not decision.allowed
    assert decision.reasons == ["No policy entry for ListBuckets"]


def test_allow_all_policy():
    assert AllowAllPolicy().is_authorized("anyone", CommandKind.REBOOT_INSTANCE)


@pytest.mark.parametrize(
    ("pattern", "message"),
    [
        ("(a+)+$", "nested quantifiers"),
        (r"(a)\1", "backreferences"),
        ("(?<=U)X", "look-behind"),
        ("U" * 300, "exceeds"),
    ],
)
def test_unsafe_patterns_are_rejected(pattern, message):
    config = PolicyConfig(rules=PolicyRules(deny_actors=[pattern]))
    with pytest.raises(ValueError, match=message):
        PolicyEngine(config)


def test_invalid_regex_is_rejected():
    config = PolicyConfig(rules=PolicyRules(deny_actors=["[unclosed"]))
    with pytest.raises(ValueError, match="Invalid regex"):
        PolicyEngine(config)
