"""Standard labels stamped on the labelable GCP resources the stack declares"""
import pulumi

LABELABLE_TYPES = (
    'gcp:compute/address:Address',
)


def register_auto_labels(auto_labels):
    pulumi.runtime.register_stack_transformation(lambda args: auto_label(args, auto_labels))


def auto_label(args, auto_labels):
    if args.type_ not in LABELABLE_TYPES:
        return None
    # Labels set on the resource itself take precedence.
    args.props['labels'] = {**auto_labels, **(args.props.get('labels') or {})}
    return pulumi.ResourceTransformationResult(args.props, args.opts)
