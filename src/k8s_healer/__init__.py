"""
K8s Healer - Kubernetes Pod Remediation Controller

Watches Pods across a set of namespaces and deletes the ones stuck in a
CrashLoopBackOff restart loop, letting their owning controller recreate them.
"""

__version__ = "1.0.0"
__author__ = "K8s Healer Team"
