import pulumi
import pulumi_kubernetes as k8s
from pulumi_gcp import compute

from workloads.iam import workload_identity
from workloads.k8s import resources_from_specs
from workloads.manifests import load_spec_files
from workloads.transforms import compose, external_dns_args, load_balancer_ip, workload_identity_annotator

ROOT_RESOURCE_NAME = 'platform-k8s'


def create_workload_identities(cfg):
    return {
        wi.workload: workload_identity(
            wi.workload,
            wi.workload_namespace,
            project_id=cfg.dns_project,
            project_roles=wi.project_roles,
            workload_project=cfg.gcp_project,
        )
        for wi in cfg.workload_identities
    }


def create_ingress_address(cfg):
    return compute.Address(
        'nginx-ingress-svc-ip-address',
        address_type='EXTERNAL',
        description='nginx-ingress service load balancer IP address',
        network_tier='PREMIUM',
        project=cfg.gcp_project,
        region=cfg.region,
    )


def create_admin_binding(cfg, k8s_provider):
    return k8s.rbac.v1.ClusterRoleBinding(
        f'{ROOT_RESOURCE_NAME}-admin-cluster-role-binding',
        role_ref={
            'apiGroup': 'rbac.authorization.k8s.io',
            'kind': 'ClusterRole',
            'name': 'cluster-admin',
        },
        subjects=[
            {
                'apiGroup': 'rbac.authorization.k8s.io',
                'kind': 'User',
                'name': cfg.user,
            }
        ],
        opts=pulumi.ResourceOptions(provider=k8s_provider),
    )


def create_stack(cfg, k8s_provider):
    accounts = create_workload_identities(cfg)
    ingress_ip = cfg.ingress_ip or create_ingress_address(cfg).address
    admin_binding = create_admin_binding(cfg, k8s_provider)

    specs = load_spec_files(cfg.manifests)
    resources = resources_from_specs(
        specs,
        options=pulumi.ResourceOptions(provider=k8s_provider, depends_on=[admin_binding]),
        transform=compose(
            workload_identity_annotator(accounts),
            load_balancer_ip(ingress_ip),
            external_dns_args(cfg.dns_domain, cfg.dns_project, cfg.purpose),
        ),
    )
    pulumi.log.info(f'{len(resources)} of {len(specs)} kubernetes specs declared')

    pulumi.export(f'{ROOT_RESOURCE_NAME}_ingress_ip', ingress_ip)
    pulumi.export(f'{ROOT_RESOURCE_NAME}_workload_identity_service_accounts',
                  {workload: account.email for workload, account in accounts.items()})
    pulumi.export(f'{ROOT_RESOURCE_NAME}_k8s_resources', [r.urn for r in resources])

    return ROOT_RESOURCE_NAME, ['_ingress_ip', '_workload_identity_service_accounts', '_k8s_resources']
