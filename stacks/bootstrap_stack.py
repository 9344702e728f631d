##############################################################
#
# bootstrap_stack.py
#
# Resources:
#   CloudFormation Service Role
#   Deploy User
#   Deploy Group
#   SSM Parameter (bootstrap version)
#
# Outputs:
#  DeployUserName
#  DeployRoleArn
#  BootstrapVersion
#
##############################################################

import logging

from aws_cdk import (
  aws_iam as iam,
  aws_ssm as ssm,
  CfnOutput,
  RemovalPolicy,
  Stack
)
from constructs import Construct

from stacks.errors import BootstrapInputError
from stacks.resource_scopes import ServiceScopes

LOG = logging.getLogger(__name__)

STACK_SUFFIX="-deploy-bootstrap"
PARAMETER_PATH_PREFIX="/serverless-deploy-bootstrap"

# Bump when the policies below change, used for auditing which role projects use
BOOTSTRAP_VERSION="1"


def service_name_from_stack_name(stack_name: str) -> str:
  if not stack_name.endswith(STACK_SUFFIX):
    raise BootstrapInputError(
      "stack name '{}' does not end with '{}'".format(stack_name, STACK_SUFFIX))

  service_name=stack_name[:-len(STACK_SUFFIX)]
  if not service_name:
    raise BootstrapInputError(
      "stack name '{}' has no service name before '{}'".format(stack_name, STACK_SUFFIX))
  return service_name


def stack_name_for(service_name: str) -> str:
  if not service_name:
    raise BootstrapInputError("service name must not be empty")
  return service_name+STACK_SUFFIX


def version_parameter_name(service_name: str) -> str:
  return "{}/{}/version".format(PARAMETER_PATH_PREFIX, service_name)


class ServiceDeployBootstrapStack(Stack):

  def __init__(self, scope: Construct, construct_id: str, **kwargs) -> None:
    super().__init__(scope, construct_id, **kwargs)

    version=BOOTSTRAP_VERSION

    # fail before any resource is added, a wrong name means wrong scopes
    self._service_name=service_name_from_stack_name(self.stack_name)
    self._scopes=ServiceScopes.build(self._service_name, self.region, self.account)
    scopes=self._scopes

    LOG.debug("building bootstrap v%s for service %s", version, self._service_name)

    # role used by cloudformation when deploying the service stack
    self._service_role=iam.Role(self,"ServiceRole-v"+version,
      assumed_by=iam.ServicePrincipal("cloudformation.amazonaws.com")
    )

    # S3 objects
    self._service_role.add_to_policy(iam.PolicyStatement(
      effect=iam.Effect.ALLOW,
      resources=[scopes.s3_objects.arn],
      actions=[
        "s3:PutObject",
        "s3:DeleteObject",
      ]
    ))

    # S3 buckets
    self._service_role.add_to_policy(iam.PolicyStatement(
      effect=iam.Effect.ALLOW,
      resources=[scopes.s3_buckets.arn],
      actions=[
        "s3:*",
      ]
    ))

    # CloudWatch logs
    self._service_role.add_to_policy(iam.PolicyStatement(
      effect=iam.Effect.ALLOW,
      resources=[scopes.log_groups.arn],
      actions=[
        "logs:CreateLogGroup",
        "logs:DescribeLogGroup",
        "logs:DeleteLogGroup",
        "logs:CreateLogStream",
        "logs:DescribeLogStreams",
        "logs:DeleteLogStream",
        "logs:FilterLogEvents"
      ]
    ))

    # Lambda
    self._service_role.add_to_policy(iam.PolicyStatement(
      effect=iam.Effect.ALLOW,
      resources=[scopes.lambda_functions.arn],
      actions=[
        "lambda:GetFunction",
        "lambda:CreateFunction",
        "lambda:DeleteFunction",
        "lambda:UpdateFunctionConfiguration",
        "lambda:UpdateFunctionCode",
        "lambda:ListVersionsByFunction",
        "lambda:PublishVersion",
        "lambda:CreateAlias",
        "lambda:DeleteAlias",
        "lambda:UpdateAlias",
        "lambda:GetFunctionConfiguration",
        "lambda:AddPermission",
        "lambda:RemovePermission",
        "lambda:InvokeFunction"
      ]
    ))

    # IAM roles for the service functions
    self._service_role.add_to_policy(iam.PolicyStatement(
      effect=iam.Effect.ALLOW,
      resources=[scopes.iam_roles.arn],
      actions=[
        "iam:PassRole",
        "iam:CreateRole",
        "iam:GetRole",
        "iam:DeleteRole",
        "iam:GetRolePolicy",
        "iam:DeleteRolePolicy",
        "iam:PutRolePolicy",
      ]
    ))

    # DynamoDB
    # FIXME: scoped to the state machine ARNs, so these actions never match a
    # table. Move to arn:aws:dynamodb:<region>:<account>:table/<service>* and
    # bump BOOTSTRAP_VERSION once the intended table access is confirmed.
    self._service_role.add_to_policy(iam.PolicyStatement(
      effect=iam.Effect.ALLOW,
      resources=[scopes.state_machines.arn],
      actions=[
        "dynamodb:CreateTable",
        "dynamodb:UpdateTable",
        "dynamodb:DeleteTable",
      ]
    ))

    # Step Functions
    self._service_role.add_to_policy(iam.PolicyStatement(
      effect=iam.Effect.ALLOW,
      resources=[scopes.state_machines.arn],
      actions=[
        "states:CreateStateMachine",
        "states:DeleteStateMachine",
        "states:DescribeStateMachine",
        "states:TagResource",
      ]
    ))

    self._deploy_user=iam.User(self,"DeployUser",
      user_name=self._service_name+"-deployer"
    )

    self._deploy_group=iam.Group(self,self._service_name+"-deployers")

    self._deploy_group.add_to_policy(iam.PolicyStatement(
      effect=iam.Effect.ALLOW,
      resources=["*"],
      actions=[
        "cloudformation:ValidateTemplate",
      ]
    ))

    self._deploy_group.add_to_policy(iam.PolicyStatement(
      effect=iam.Effect.ALLOW,
      resources=[scopes.cloudformation.arn],
      actions=[
        "cloudformation:CreateStack",
        "cloudformation:DescribeStacks",
        "cloudformation:DeleteStack",
        "cloudformation:DescribeStackEvents",
        "cloudformation:UpdateStack",
        "cloudformation:ListStackResources",
        "cloudformation:DescribeStackResource"
      ]
    ))

    # serverless uses this to skip functions which have not changed
    self._deploy_group.add_to_policy(iam.PolicyStatement(
      effect=iam.Effect.ALLOW,
      resources=[scopes.lambda_functions.arn],
      actions=[
        "lambda:GetFunction",
      ]
    ))

    # only the service role, never a wildcard
    self._deploy_group.add_to_policy(iam.PolicyStatement(
      effect=iam.Effect.ALLOW,
      resources=[self._service_role.role_arn],
      actions=[
        "iam:PassRole"
      ]
    ))

    # deployer manages the serverless deployment bucket
    self._deploy_group.add_to_policy(iam.PolicyStatement(
      effect=iam.Effect.ALLOW,
      resources=[scopes.deployment_bucket.arn],
      actions=[
        "s3:*",
      ]
    ))

    self._deploy_user.add_to_group(self._deploy_group)

    CfnOutput(self,"DeployUserName",
      description="PublisherUser",
      value=self._deploy_user.user_name
    )

    CfnOutput(self,"DeployRoleArn",
      value=self._service_role.role_arn,
      description="The ARN of the CloudFormation service role",
      export_name="DeployRoleArn"
    )

    CfnOutput(self,"BootstrapVersion",
      value=version,
      description="The version of the bootstrap resources that are currently provisioned in this stack",
      export_name="BootstrapVersion"
    )

    # lives outside the stack lifecycle for auditing
    self._version_parameter=ssm.StringParameter(self,"ServerlessDeployBootstrapVersion",
      parameter_name=version_parameter_name(self._service_name),
      description="The version of the serverless-deploy-bootstrap resources",
      string_value=version
    )
    self._version_parameter.apply_removal_policy(RemovalPolicy.RETAIN)

  # Exports
  @property
  def service_name(self) -> str:
    return self._service_name

  @property
  def scopes(self) -> ServiceScopes:
    return self._scopes

  @property
  def service_role(self) -> iam.IRole:
    return self._service_role

  @property
  def deploy_user(self) -> iam.IUser:
    return self._deploy_user

  @property
  def deploy_group(self) -> iam.IGroup:
    return self._deploy_group

  @property
  def version_parameter(self) -> ssm.IStringParameter:
    return self._version_parameter
