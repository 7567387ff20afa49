# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""File containing constants."""

MYSQL_API_GROUP = "mysql.oracle.com"
MYSQL_API_VERSION = "v1alpha1"

# The default MySQL version to use if not specified explicitly by user
DEFAULT_VERSION = "8.0.11"
DEFAULT_REPLICAS = 1
DEFAULT_BASE_SERVER_ID = 1000

# Maximum number of members supported by InnoDB group replication
MAX_INNODB_CLUSTER_MEMBERS = 9

# Group replication channel names limit the length of a Cluster name.
# See: https://bugs.mysql.com/bug.php?id=90601
CLUSTER_NAME_MAX_LEN = 28

MAX_SERVER_ID = 2**32 - 1
# Leaves room for a full replication group above the base id
MAX_BASE_SERVER_ID = MAX_SERVER_ID - MAX_INNODB_CLUSTER_MEMBERS

OPERATOR_VERSION_LABEL = "v1alpha1.mysql.oracle.com/version"
BACKUP_SCHEDULE_LABEL = "v1alpha1.mysql.oracle.com/backupschedule"

# Backup executors, mapped to whether they need an explicit list of databases
BACKUP_EXECUTORS = {
    "mysqldump": True,
}

S3_STORAGE_PROVIDER = "s3"
BACKUP_STORAGE_PROVIDERS = {S3_STORAGE_PROVIDER}

ENV_BUILD_VERSION = "MYSQL_OPERATOR_BUILD_VERSION"
ENV_DEFAULT_VERSION = "MYSQL_OPERATOR_DEFAULT_VERSION"
ENV_SUPPORTED_VERSIONS = "MYSQL_OPERATOR_SUPPORTED_VERSIONS"

K8S_CHECK_ATTEMPTS = 15
K8S_CHECK_DELAY = 2
K8S_CHECK_OBSERVATIONS = 1

BACKUP_NAME_TIME_FORMAT = "%Y%m%d%H%M%S"
