"""In-cluster workloads of the GKE platform"""
import pulumi
import pulumi_kubernetes as k8s

import workloads.components.platform_k8s as platform_k8s
from workloads.autolabel import register_auto_labels
from workloads.config import load_config

cfg = load_config()
# Automatically inject labels.
register_auto_labels(cfg.labels)

k8s_provider = k8s.Provider('k8s-provider', kubeconfig=cfg.kubeconfig)

stack_catalog = dict()
stack_root, fields = platform_k8s.create_stack(cfg, k8s_provider)
stack_catalog[stack_root] = fields

pulumi.export('stack_catalog', stack_catalog)
