"""Kubernetes manifest streams decoded into specs"""
from pathlib import Path

import pulumi
import yaml

PROGRAM_DIR = Path(__file__).resolve().parent


def load_specs(text):
    """Decode a YAML document stream, skipping empty documents and flattening lists."""
    specs = []
    for document in yaml.safe_load_all(text):
        if document is None:
            continue
        if isinstance(document, dict) and document.get('kind') == 'List':
            specs.extend(item for item in document.get('items') or [] if item is not None)
        else:
            specs.append(document)
    return specs


def load_spec_files(paths, base_dir=None):
    base_dir = Path(base_dir) if base_dir else PROGRAM_DIR
    specs = []
    for path in paths:
        path = Path(path)
        if not path.is_absolute():
            path = base_dir / path
        file_specs = load_specs(path.read_text(encoding='utf-8'))
        pulumi.log.debug(f'loaded {len(file_specs)} kubernetes specs from {path}')
        specs.extend(file_specs)
    return specs
