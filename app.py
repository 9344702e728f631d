#!/usr/bin/env python3

###################################################################
#
# Serverless Deploy Bootstrap
#
#   <SERVICE_NAME>-deploy-bootstrap
#     - CloudFormation service role
#     - deployer user and group
#     - bootstrap version parameter
#
# Usage:
#   SERVICE_NAME=orders-api cdk deploy
#
###################################################################

import logging

from aws_cdk import App

from stacks.bootstrap_stack import ServiceDeployBootstrapStack, stack_name_for
from stacks.environment import deploy_env, service_name_from_env
from stacks.errors import BootstrapInputError

logging.basicConfig(level=logging.INFO)
LOG = logging.getLogger("serverless-deploy-bootstrap")

try:
  service_name=service_name_from_env()
  stack_name=stack_name_for(service_name)
except BootstrapInputError as e:
  print("*********************************************")
  print("* !!!!!!!! ERROR !!!!!!!!")
  print("* "+str(e))
  print("* Set SERVICE_NAME to the serverless service name")
  print("*********************************************")
  raise

my_env=deploy_env()
LOG.info("synthesizing %s for %s/%s", stack_name, my_env.account, my_env.region)

app = App()

ServiceDeployBootstrapStack(app, stack_name,
  env=my_env,
  description="This stack includes IAM resources needed to deploy Serverless apps into this environment"
)

app.synth()
