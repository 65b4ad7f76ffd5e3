"""Reconciler for the webapp.example.com App custom resource."""

__version__ = "0.1.0"
