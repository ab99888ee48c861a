"""Kubernetes resources from generic manifest specs"""
import re

import pulumi
from pulumi_kubernetes import (
    admissionregistration, apiextensions, apps, batch, core, networking, policy, rbac,
)

RESOURCE_NAME_PREFIX = 'k8s'
FOUNDATIONAL_KINDS = ('CustomResourceDefinition', 'Namespace')

# Keyed on kind, or on (kind, apiVersion) where a kind ships in more than
# one schema revision. Kinds missing here become custom resources.
SPEC_RESOURCE_TYPES = {
    'ConfigMap': core.v1.ConfigMap,
    'Namespace': core.v1.Namespace,
    'Secret': core.v1.Secret,
    'Service': core.v1.Service,
    'ServiceAccount': core.v1.ServiceAccount,
    'DaemonSet': apps.v1.DaemonSet,
    'Deployment': apps.v1.Deployment,
    'StatefulSet': apps.v1.StatefulSet,
    'Job': batch.v1.Job,
    'CronJob': batch.v1.CronJob,
    'PodDisruptionBudget': policy.v1.PodDisruptionBudget,
    'PodSecurityPolicy': policy.v1beta1.PodSecurityPolicy,
    'NetworkPolicy': networking.v1.NetworkPolicy,
    'Ingress': networking.v1.Ingress,
    'ClusterRole': rbac.v1.ClusterRole,
    'ClusterRoleBinding': rbac.v1.ClusterRoleBinding,
    'Role': rbac.v1.Role,
    'RoleBinding': rbac.v1.RoleBinding,
    'MutatingWebhookConfiguration': admissionregistration.v1.MutatingWebhookConfiguration,
    ('MutatingWebhookConfiguration', 'admissionregistration.k8s.io/v1beta1'):
        admissionregistration.v1beta1.MutatingWebhookConfiguration,
    'ValidatingWebhookConfiguration': admissionregistration.v1.ValidatingWebhookConfiguration,
    ('ValidatingWebhookConfiguration', 'admissionregistration.k8s.io/v1beta1'):
        admissionregistration.v1beta1.ValidatingWebhookConfiguration,
    'CustomResourceDefinition': apiextensions.v1.CustomResourceDefinition,
    ('CustomResourceDefinition', 'apiextensions.k8s.io/v1beta1'):
        apiextensions.v1beta1.CustomResourceDefinition,
}

# Populated by the API server, never an input.
OUTPUT_ONLY_FIELDS = ('status',)

_CAMEL_BOUNDARY = re.compile(r'(?<!^)(?=[A-Z])')


def resources_from_specs(specs, options=None, transform=None):
    """Create resources for all the specs.

    Custom resource definitions and namespaces are created first and every
    other resource is created depending on them. Each spec is passed through
    ``transform`` before its resource is created; a transform returning
    ``None`` drops the spec.

    Returns the created resources, foundational ones first, each group in
    the order of ``specs``.
    """
    if options is None:
        options = pulumi.ResourceOptions()
    if transform is None:
        transform = _identity

    foundational = [transform(s) for s in specs if is_foundational(s)]
    dependent = [transform(s) for s in specs if not is_foundational(s)]

    first = _create_resources(foundational, options)
    rest_options = options
    if first:
        rest_options = pulumi.ResourceOptions.merge(options, pulumi.ResourceOptions(depends_on=first))
    rest = _create_resources(dependent, rest_options)
    pulumi.log.debug(f'declared {len(first)} foundational and {len(rest)} dependent kubernetes resources')
    return first + rest


def is_foundational(spec):
    return isinstance(spec, dict) and spec.get('kind') in FOUNDATIONAL_KINDS


def create_spec_resource(spec, opts):
    """Create the resource for a single spec, or ``None`` if it has no identity."""
    resource_name = spec_resource_name(spec)
    if not resource_name:
        pulumi.log.debug(f'skipping kubernetes spec without kind or metadata.name: {spec!r:.120}')
        return None
    resource_type = spec_resource_type(spec)
    if resource_type is not None:
        return resource_type(resource_name, opts=opts, **resource_args(spec))
    if not spec.get('apiVersion'):
        pulumi.log.debug(f'skipping custom resource {resource_name} without apiVersion')
        return None
    return SpecResource(resource_name, spec, opts=opts)


def spec_resource_type(spec):
    """Typed resource class for the spec's kind, ``None`` for custom resources."""
    kind = spec.get('kind')
    return SPEC_RESOURCE_TYPES.get((kind, spec.get('apiVersion'))) or SPEC_RESOURCE_TYPES.get(kind)


def spec_resource_name(spec):
    """Pulumi resource name for the spec: k8s/<kind>[/<namespace>]/<name>."""
    if not isinstance(spec, dict):
        return None
    kind = spec.get('kind')
    metadata = spec.get('metadata')
    if not kind or not isinstance(kind, str) or not isinstance(metadata, dict):
        return None
    name = metadata.get('name')
    if not name or not isinstance(name, str):
        return None
    kind = kind.lower()
    parts = [RESOURCE_NAME_PREFIX, kind]
    namespace = metadata.get('namespace')
    if kind != 'namespace' and namespace and isinstance(namespace, str):
        parts.append(namespace)
    parts.append(name)
    return '/'.join(parts)


def resource_args(spec):
    """Top-level spec fields as keyword arguments of a typed resource class."""
    return {_snake_case(k): v for k, v in spec.items() if k not in OUTPUT_ONLY_FIELDS}


class SpecResource(pulumi.CustomResource):
    """Kubernetes object of a kind without a typed class.

    Registered as ``kubernetes:<apiVersion>:<kind>`` with every top-level
    field of the spec, so bodies outside ``spec`` (PriorityClass ``value``,
    StorageClass ``provisioner``) reach the provider unchanged.
    """

    def __init__(self, resource_name, spec, opts=None):
        props = {k: v for k, v in spec.items() if k not in OUTPUT_ONLY_FIELDS}
        super().__init__(f"kubernetes:{spec['apiVersion']}:{spec['kind']}", resource_name, props, opts)


def _create_resources(specs, opts):
    resources = []
    for spec in specs:
        if spec is None:
            continue
        resource = create_spec_resource(spec, opts)
        if resource is not None:
            resources.append(resource)
    return resources


def _snake_case(key):
    return _CAMEL_BOUNDARY.sub('_', key).lower()


def _identity(spec):
    return spec
