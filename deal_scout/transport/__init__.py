"""
Transport layer: relay selection, cancellable fetches, failover and retry.
"""
