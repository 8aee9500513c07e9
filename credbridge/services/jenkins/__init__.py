"""Jenkins 凭据接口相关服务."""

from credbridge.services.jenkins.client import JenkinsClient, get_jenkins_client, init_jenkins_client
from credbridge.services.jenkins.content_parser import parse_credential_content

__all__ = ["JenkinsClient", "get_jenkins_client", "init_jenkins_client", "parse_credential_content"]
