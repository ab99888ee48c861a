"""Stack configuration"""
import re
import subprocess
from dataclasses import dataclass, field
from typing import Optional, Tuple

import pulumi

DEFAULT_ENV = 'production'
DEFAULT_REGION = 'us-central1'
DEFAULT_MANIFESTS = ('deploy/external-dns.yaml',)
DEFAULT_WORKLOAD_IDENTITIES = (
    {'workload': 'cert-manager', 'workloadNamespace': 'cert-manager', 'projectRoles': ['roles/dns.admin']},
    {'workload': 'external-dns', 'workloadNamespace': 'external-dns', 'projectRoles': ['roles/dns.admin']},
)


@dataclass(frozen=True)
class WorkloadIdentitySpec:
    workload: str
    workload_namespace: str
    project_roles: Tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data):
        try:
            return cls(
                workload=data['workload'],
                workload_namespace=data['workloadNamespace'],
                project_roles=tuple(data.get('projectRoles') or ()),
            )
        except (KeyError, TypeError) as e:
            raise pulumi.RunError(f'invalid workloadIdentities entry {data!r}: {e}') from e


@dataclass(frozen=True)
class WorkloadsConfig:
    gcp_project: str
    dns_name: str
    user: str
    env: str = DEFAULT_ENV
    purpose: str = ''
    region: str = DEFAULT_REGION
    dns_project: str = ''
    kubeconfig: Optional[pulumi.Input[str]] = None
    ingress_ip: Optional[str] = None
    manifests: Tuple[str, ...] = DEFAULT_MANIFESTS
    workload_identities: Tuple[WorkloadIdentitySpec, ...] = field(default_factory=tuple)

    @property
    def user_name(self):
        return self.user.split('@')[0]

    @property
    def labels(self):
        return {'env': self.env, 'purpose': self.purpose, 'user': self.user_name}

    @property
    def dns_domain(self):
        return self.dns_name.rstrip('.')

    @classmethod
    def from_config(cls, config, gcp_config):
        gcp_project = gcp_config.require('project')
        purpose = config.get('purpose') or re.sub(r'-cluster$', '', gcp_project)
        identities = config.get_object('workloadIdentities') or DEFAULT_WORKLOAD_IDENTITIES
        return cls(
            gcp_project=gcp_project,
            dns_name=config.require('dnsName'),
            user=config.get('user') or gcloud_account(),
            env=config.get('env') or DEFAULT_ENV,
            purpose=purpose,
            region=gcp_config.get('region') or DEFAULT_REGION,
            dns_project=config.get('dnsProject') or f'{purpose}-dns',
            kubeconfig=config.get_secret('kubeconfig'),
            ingress_ip=config.get('ingressIp'),
            manifests=tuple(config.get_object('manifests') or DEFAULT_MANIFESTS),
            workload_identities=tuple(WorkloadIdentitySpec.from_dict(wi) for wi in identities),
        )


def gcloud_account():
    """Account gcloud is currently authenticated as."""
    try:
        result = subprocess.run(
            ['gcloud', 'config', 'get-value', 'account'],
            check=True, capture_output=True, text=True,
        )
    except (OSError, subprocess.CalledProcessError) as e:
        raise pulumi.RunError(f'unable to look up gcloud account, set the "user" config value instead: {e}') from e
    return result.stdout.strip()


def load_config():
    return WorkloadsConfig.from_config(pulumi.Config(), pulumi.Config('gcp'))
