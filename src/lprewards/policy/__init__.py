"""Reward policy configuration."""

from lprewards.policy.resolver import PolicyResolver

__all__ = ["PolicyResolver"]
