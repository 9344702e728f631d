"""Entry point configuration tests."""

import pytest

from stacks.environment import deploy_env, service_name_from_env
from stacks.errors import BootstrapInputError


class FakeSTS:

  class meta:
    region_name = "eu-central-1"

  def __init__(self):
    self.calls = 0

  def get_caller_identity(self):
    self.calls += 1
    return {"Account": "333333333333"}


def test_service_name_from_env():
  assert service_name_from_env({"SERVICE_NAME": " orders-api "}) == "orders-api"


@pytest.mark.parametrize("environ", [{}, {"SERVICE_NAME": ""}, {"SERVICE_NAME": "   "}])
def test_service_name_from_env_missing(environ):
  with pytest.raises(BootstrapInputError, match="SERVICE_NAME"):
    service_name_from_env(environ)


def test_deploy_env_prefers_cdk_defaults():
  sts = FakeSTS()
  env = deploy_env({"CDK_DEFAULT_ACCOUNT": "111111111111", "CDK_DEFAULT_REGION": "us-east-1"}, sts_client=sts)
  assert env.account == "111111111111"
  assert env.region == "us-east-1"
  assert sts.calls == 0


def test_deploy_env_falls_back_to_sts():
  sts = FakeSTS()
  env = deploy_env({}, sts_client=sts)
  assert env.account == "333333333333"
  assert env.region == "eu-central-1"


def test_deploy_env_fills_only_missing_values():
  env = deploy_env({"CDK_DEFAULT_REGION": "us-west-2"}, sts_client=FakeSTS())
  assert env.account == "333333333333"
  assert env.region == "us-west-2"
