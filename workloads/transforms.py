"""Spec rewrites applied before kubernetes resources are created.

Every transform takes one spec and returns either the spec to create or
``None`` to leave it out. Matching specs are copied before they are
changed; all other specs are returned as they came in.
"""
import copy

WORKLOAD_IDENTITY_ANNOTATION = 'iam.gke.io/gcp-service-account'


def compose(*transforms):
    """Chain transforms left to right, stopping at the first omission."""
    def transform(spec):
        for t in transforms:
            if t is None:
                continue
            spec = t(spec)
            if spec is None:
                return None
        return spec
    return transform


def matches(spec, kind, name=None, namespace=None):
    if not isinstance(spec, dict) or spec.get('kind') != kind:
        return False
    metadata = spec.get('metadata') or {}
    if name is not None and metadata.get('name') != name:
        return False
    if namespace is not None and metadata.get('namespace') != namespace:
        return False
    return True


def omit_kinds(*kinds):
    def transform(spec):
        if isinstance(spec, dict) and spec.get('kind') in kinds:
            return None
        return spec
    return transform


def workload_identity_annotator(accounts):
    """Bind kubernetes service accounts to the GCP service accounts in ``accounts``.

    ``accounts`` maps a kubernetes service account name to the
    ``gcp.serviceaccount.Account`` it should act as.
    """
    def transform(spec):
        if not matches(spec, 'ServiceAccount'):
            return spec
        account = accounts.get((spec.get('metadata') or {}).get('name'))
        if account is None:
            return spec
        spec = copy.deepcopy(spec)
        annotations = spec['metadata'].setdefault('annotations', {})
        annotations[WORKLOAD_IDENTITY_ANNOTATION] = account.email
        return spec
    return transform


def load_balancer_ip(address, name='ingress-nginx-controller', namespace='ingress-nginx'):
    def transform(spec):
        if not matches(spec, 'Service', name, namespace):
            return spec
        spec = copy.deepcopy(spec)
        spec.setdefault('spec', {})['loadBalancerIP'] = address
        return spec
    return transform


def external_dns_args(domain, project, owner, name='external-dns', namespace='external-dns'):
    """Point the external-dns controller at our zone, DNS project and owner id."""
    values = {
        '--domain-filter': domain.rstrip('.'),
        '--google-project': project,
        '--txt-owner-id': owner,
    }

    def transform(spec):
        if not matches(spec, 'Deployment', name, namespace):
            return spec
        spec = copy.deepcopy(spec)
        container = spec['spec']['template']['spec']['containers'][0]
        container['args'] = [_rewrite_arg(a, values) for a in container.get('args') or []]
        return spec
    return transform


def _rewrite_arg(arg, values):
    flag, sep, _ = arg.partition('=')
    if sep and flag in values:
        return f'{flag}={values[flag]}'
    return arg
