"""Shared pytest fixtures for workloads tests."""

import pulumi
import pytest


class RecordingMocks(pulumi.runtime.Mocks):
    """Pulumi mocks that echo inputs back as outputs and remember every resource."""

    def __init__(self):
        self.resources = []

    def new_resource(self, args):
        self.resources.append(args)
        outputs = dict(args.inputs)
        if args.typ == 'gcp:serviceaccount/account:Account':
            project = args.inputs.get('project', 'project')
            outputs['email'] = f"{args.inputs['accountId']}@{project}.iam.gserviceaccount.com"
        if args.typ == 'gcp:compute/address:Address':
            outputs['address'] = '203.0.113.10'
        return [f'{args.name}-id', outputs]

    def call(self, args):
        return {}

    def named(self, name):
        """Recorded resource registered under ``name``."""
        for resource in self.resources:
            if resource.name == name:
                return resource
        raise KeyError(name)

    def names(self, typ_prefix=''):
        return sorted(r.name for r in self.resources if r.typ.startswith(typ_prefix))


@pytest.fixture
def mocks():
    mocks = RecordingMocks()
    pulumi.runtime.set_mocks(mocks, project='project', stack='stack', preview=False)
    return mocks
