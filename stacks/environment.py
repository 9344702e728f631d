##############################################################
#
# environment.py
#
# Reads the inputs of the bootstrap app from the process
# environment, falling back to STS for account and region.
#
##############################################################

import os

import boto3
from aws_cdk import Environment

from stacks.errors import BootstrapInputError


def service_name_from_env(environ=None) -> str:
  environ=os.environ if environ is None else environ

  service_name=environ.get("SERVICE_NAME", "").strip()
  if not service_name:
    raise BootstrapInputError("SERVICE_NAME is not set")
  return service_name


def deploy_env(environ=None, sts_client=None) -> Environment:
  """Account and region to deploy into.

  The cdk CLI sets CDK_DEFAULT_ACCOUNT and CDK_DEFAULT_REGION, when they are
  missing (e.g. running app.py directly) the current credentials are asked.
  """
  environ=os.environ if environ is None else environ

  account_id=environ.get("CDK_DEFAULT_ACCOUNT")
  region=environ.get("CDK_DEFAULT_REGION")

  if not account_id or not region:
    client=sts_client or boto3.client('sts')
    region=region or client.meta.region_name
    account_id=account_id or client.get_caller_identity()["Account"]

  return Environment(account=account_id, region=region)
