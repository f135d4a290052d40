"""Confluent Cloud resource reconcilers and lookups."""

from confluent_ops.services.confluent.api_key_reconciler import ApiKeyReconciler, ApiKeySpec
from confluent_ops.services.confluent.base import ResourceReconciler, ResourceSpec
from confluent_ops.services.confluent.cluster_reconciler import ClusterReconciler, ClusterSpec
from confluent_ops.services.confluent.lookups import AccountLookup, ClusterLookup
from confluent_ops.services.confluent.topic_reconciler import TopicReconciler, TopicSpec

__all__ = [
    "AccountLookup",
    "ApiKeyReconciler",
    "ApiKeySpec",
    "ClusterLookup",
    "ClusterReconciler",
    "ClusterSpec",
    "ResourceReconciler",
    "ResourceSpec",
    "TopicReconciler",
    "TopicSpec",
]
