"""CloudFormation fragment generators (AWS only).

Fragment names are template logical IDs; bodies are complete resource
entries (``Type``/``Properties``). Components without an AWS binding fall
back to the default SKU of their service type.
"""

from ...models import CloudProvider, IaCFormat, ServiceType
from ..registry import MappingTable, resource
from .defaults import sku

CLOUDFORMATION = MappingTable(IaCFormat.CLOUDFORMATION)

AWS = CloudProvider.AWS


def cfn_tags(component, extra_name=None):
    return [
        {"Key": "Name", "Value": extra_name or component.name},
        {"Key": "Environment", "Value": {"Ref": "Environment"}},
        {"Key": "ManagedBy", "Value": "CloudFormation"},
    ]


def _lower(name: str) -> str:
    return name.lower()


@CLOUDFORMATION.register(ServiceType.COMPUTE, AWS)
def ec2_instance(component, config, name):
    return [
        resource(
            "AWS::EC2::Instance",
            f"{name}Instance",
            {
                "Type": "AWS::EC2::Instance",
                "Properties": {
                    "ImageId": {"Ref": "LatestAmiId"},
                    "InstanceType": sku(component, AWS),
                    "Tags": cfn_tags(component),
                },
            },
        )
    ]


@CLOUDFORMATION.register(ServiceType.DATABASE, AWS)
def rds_instance(component, config, name):
    return [
        resource(
            "AWS::RDS::DBInstance",
            f"{name}Database",
            {
                "Type": "AWS::RDS::DBInstance",
                "DeletionPolicy": "Snapshot",
                "UpdateReplacePolicy": "Snapshot",
                "Properties": {
                    "DBInstanceIdentifier": f"{_lower(name)}-db"[:63],
                    "DBInstanceClass": sku(component, AWS),
                    "Engine": "postgres",
                    "EngineVersion": "14",
                    "MasterUsername": {"Ref": "DBUsername"},
                    "MasterUserPassword": {"Ref": "DBPassword"},
                    "AllocatedStorage": "20",
                    "StorageType": "gp2",
                    "PubliclyAccessible": False,
                    "Tags": cfn_tags(component),
                },
            },
        )
    ]


@CLOUDFORMATION.register(ServiceType.CACHE, AWS)
def elasticache_cluster(component, config, name):
    return [
        resource(
            "AWS::ElastiCache::CacheCluster",
            f"{name}Cache",
            {
                "Type": "AWS::ElastiCache::CacheCluster",
                "Properties": {
                    "ClusterName": f"{_lower(name)}-cache"[:40],
                    "CacheNodeType": sku(component, AWS),
                    "Engine": "redis",
                    "NumCacheNodes": 1,
                    "Port": 6379,
                    "Tags": cfn_tags(component),
                },
            },
        )
    ]


def _bucket(component, logical_id, name, suffix=""):
    return resource(
        "AWS::S3::Bucket",
        logical_id,
        {
            "Type": "AWS::S3::Bucket",
            "Properties": {
                "BucketName": {"Fn::Sub": f"${{AWS::StackName}}-{_lower(name)}{suffix}"},
                "VersioningConfiguration": {"Status": "Enabled"},
                "Tags": cfn_tags(component),
            },
        },
    )


@CLOUDFORMATION.register(ServiceType.STORAGE, AWS)
def s3_bucket(component, config, name):
    return [_bucket(component, f"{name}Bucket", name)]


@CLOUDFORMATION.register(ServiceType.CDN, AWS)
def cloudfront_distribution(component, config, name):
    origin = f"{name}OriginBucket"
    origin_id = f"S3-{name}"
    return [
        resource(
            "AWS::CloudFront::Distribution",
            f"{name}Distribution",
            {
                "Type": "AWS::CloudFront::Distribution",
                "Properties": {
                    "DistributionConfig": {
                        "Enabled": True,
                        "DefaultRootObject": "index.html",
                        "Origins": [
                            {
                                "Id": origin_id,
                                "DomainName": {"Fn::GetAtt": [origin, "RegionalDomainName"]},
                                "S3OriginConfig": {"OriginAccessIdentity": ""},
                            }
                        ],
                        "DefaultCacheBehavior": {
                            "TargetOriginId": origin_id,
                            "ViewerProtocolPolicy": "redirect-to-https",
                            "AllowedMethods": ["GET", "HEAD"],
                            "CachedMethods": ["GET", "HEAD"],
                            "ForwardedValues": {
                                "QueryString": False,
                                "Cookies": {"Forward": "none"},
                            },
                        },
                    },
                    "Tags": cfn_tags(component),
                },
            },
        ),
        _bucket(component, origin, name, "-origin"),
    ]


@CLOUDFORMATION.register(ServiceType.QUEUE, AWS)
def sqs_queue(component, config, name):
    return [
        resource(
            "AWS::SQS::Queue",
            f"{name}Queue",
            {
                "Type": "AWS::SQS::Queue",
                "Properties": {
                    "QueueName": f"{_lower(name)}-queue"[:80],
                    "MessageRetentionPeriod": 345600,
                    "VisibilityTimeout": 30,
                    "Tags": cfn_tags(component),
                },
            },
        )
    ]


@CLOUDFORMATION.register(ServiceType.NETWORKING, AWS)
def vpc(component, config, name):
    return [
        resource(
            "AWS::EC2::VPC",
            f"{name}VPC",
            {
                "Type": "AWS::EC2::VPC",
                "Properties": {
                    "CidrBlock": "10.0.0.0/16",
                    "EnableDnsHostnames": True,
                    "EnableDnsSupport": True,
                    "Tags": cfn_tags(component),
                },
            },
        ),
        resource(
            "AWS::EC2::Subnet",
            f"{name}PublicSubnet",
            {
                "Type": "AWS::EC2::Subnet",
                "Properties": {
                    "VpcId": {"Ref": f"{name}VPC"},
                    "CidrBlock": "10.0.1.0/24",
                    "MapPublicIpOnLaunch": True,
                    "Tags": cfn_tags(component, f"{component.name}-public"),
                },
            },
        ),
    ]
