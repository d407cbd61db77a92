"""
Feature hierarchy rules.

Only ``parent`` features may have children and only ``story``, ``task`` and
``research`` features may be children, which keeps every tree at most two
levels deep. The ancestry walk below enforces the same limit against the
stored tree when a feature is created or re-parented.
"""
from typing import Optional

from featureforge.constants import FeatureTypes, HierarchyRules, ErrorMessages


class HierarchyError(ValueError):
    pass


def can_have_children(feature_type: str) -> bool:
    return feature_type in HierarchyRules.CAN_HAVE_CHILDREN

def can_be_child(feature_type: str) -> bool:
    return feature_type in HierarchyRules.CAN_BE_CHILDREN

def _label(feature_type: str) -> str:
    return FeatureTypes.LABELS.get(feature_type, feature_type)

def validate_hierarchy(parent_type: str, child_type: str) -> bool:
    """
    Validates that a feature of child_type may sit under one of parent_type.

    Raises:
        HierarchyError: If either side of the relationship is not allowed
    """
    if not can_have_children(parent_type):
        raise HierarchyError(f"{_label(parent_type)} features cannot have children")

    if not can_be_child(child_type):
        raise HierarchyError(f"{_label(child_type)} features cannot be children")

    return True

def validate_placement(parent, child_type: str, feature_id: Optional[int] = None) -> None:
    """
    Checks a prospective parent against the live tree.

    Walks up from ``parent`` so that the new node's depth stays within
    MAX_DEPTH and ``feature_id`` (when re-parenting) is not its own ancestor.

    Args:
        parent: The Feature the node will be attached to
        child_type: Type of the node being attached
        feature_id: Id of the node itself when it already exists

    Raises:
        HierarchyError: On type, depth or cycle violations
    """
    if feature_id is not None and parent.id == feature_id:
        raise HierarchyError(ErrorMessages.SELF_PARENT)

    validate_hierarchy(parent.type, child_type)

    depth = 2
    ancestor = parent.parent
    while ancestor is not None:
        if feature_id is not None and ancestor.id == feature_id:
            raise HierarchyError(ErrorMessages.CIRCULAR_HIERARCHY)
        depth += 1
        ancestor = ancestor.parent

    if depth > HierarchyRules.MAX_DEPTH:
        raise HierarchyError(ErrorMessages.MAX_DEPTH_EXCEEDED.format(depth=HierarchyRules.MAX_DEPTH))
