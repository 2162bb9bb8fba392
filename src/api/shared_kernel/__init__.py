"""Shared Kernel module.

Components every bounded context may depend on: session token
verification and the observation context carried by domain probes.
Nothing here imports from a bounded context.
"""
