"""GKE workload identity service accounts"""
import json

import pulumi
from pulumi_gcp import projects, serviceaccount

ACCOUNT_ID_MAX_LENGTH = 30


def simple_role_name(role):
    """Resource-name friendly form of a GCP IAM role, e.g. roles/dns.admin -> dns-admin."""
    if role.startswith('roles/'):
        role = role[len('roles/'):]
    return role.replace('.', '-').lower()


class GkeWorkloadIdentity(object):
    def __init__(self, **kwargs):
        self.workload = kwargs.get('workload')
        self.workload_namespace = kwargs.get('workload_namespace')
        self.project_id = kwargs.get('project_id')
        self.workload_project = kwargs.get('workload_project') or self.project_id
        self.opts = kwargs.get('opts')
        self.root_resource_name = f'sa-wi-{self.workload}'
        account_id = self.root_resource_name[:ACCOUNT_ID_MAX_LENGTH]
        self.service_account = serviceaccount.Account(
            account_id,
            account_id=account_id,
            description=f'GKE Workload Identity Service Account for {self.workload_namespace}/{self.workload}',
            display_name=f'{self.workload} Workload Identity Service Account',
            project=self.workload_project,
            opts=self.opts,
        )

    @property
    def member(self):
        return pulumi.Output.concat('serviceAccount:', self.service_account.email)

    def create_role_member(self, role):
        return projects.IAMMember(
            f'{self.root_resource_name}-{simple_role_name(role)}-member',
            member=self.member,
            project=self.project_id,
            role=role,
            opts=self.opts,
        )

    def create_policy(self):
        """Let the kubernetes service account impersonate the GCP one."""
        policy_data = pulumi.Output.from_input(self.workload_project).apply(
            lambda workload_project: json.dumps({
                'bindings': [
                    {
                        'members': [
                            f'serviceAccount:{workload_project}.svc.id.goog'
                            f'[{self.workload_namespace}/{self.workload}]'
                        ],
                        'role': 'roles/iam.workloadIdentityUser',
                    }
                ]
            })
        )
        return serviceaccount.IAMPolicy(
            f'{self.root_resource_name}-policy',
            policy_data=policy_data,
            service_account_id=self.service_account.id,
            opts=self.opts,
        )


def workload_identity(workload, workload_namespace, project_id, project_roles=(), workload_project=None, opts=None):
    """Create the GCP service account a kubernetes workload runs as.

    The account lives in ``workload_project`` (``project_id`` when not
    given), is granted ``project_roles`` on ``project_id`` and can be
    impersonated by the ``workload_namespace/workload`` kubernetes service
    account.
    """
    wi = GkeWorkloadIdentity(
        workload=workload,
        workload_namespace=workload_namespace,
        project_id=project_id,
        workload_project=workload_project,
        opts=opts,
    )
    for role in project_roles:
        wi.create_role_member(role)
    wi.create_policy()
    return wi.service_account
