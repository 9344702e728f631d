##############################################################
#
# resource_scopes.py
#
# Resource ARN patterns that scope the bootstrap policies.
# Every pattern matches resources whose name starts with
# the service name.
#
##############################################################

from dataclasses import dataclass

from stacks.errors import BootstrapInputError

PARTITION="aws"


@dataclass(frozen=True)
class ResourceScope:
  service: str
  resource: str
  region: str = ""
  account: str = ""

  @property
  def arn(self) -> str:
    return "arn:{}:{}:{}:{}:{}".format(
      PARTITION, self.service, self.region, self.account, self.resource)

  def __str__(self) -> str:
    return self.arn


@dataclass(frozen=True)
class ServiceScopes:
  cloudformation: ResourceScope
  s3_buckets: ResourceScope
  s3_objects: ResourceScope
  log_groups: ResourceScope
  lambda_functions: ResourceScope
  state_machines: ResourceScope
  iam_roles: ResourceScope
  deployment_bucket: ResourceScope

  @classmethod
  def build(cls, service_name: str, region: str, account: str) -> "ServiceScopes":
    # service name is used verbatim, IAM does its own validation
    if not service_name:
      raise BootstrapInputError("service name must not be empty")

    return cls(
      cloudformation=ResourceScope("cloudformation", f"stack/{service_name}*", region, account),
      s3_buckets=ResourceScope("s3", f"{service_name}*"),
      s3_objects=ResourceScope("s3", f"{service_name}*/*"),
      log_groups=ResourceScope("logs", f"log-group:/aws/lambda/{service_name}*", region, account),
      lambda_functions=ResourceScope("lambda", f"function:{service_name}*", region, account),
      state_machines=ResourceScope("states", f"stateMachine:{service_name}*", region, account),
      iam_roles=ResourceScope("iam", f"role/{service_name}*", account=account),
      # serverless names its bucket <service>-<stage>-serverlessdeploymentbucket-<id>
      deployment_bucket=ResourceScope("s3", f"{service_name}*deploymentbucket*"),
    )
