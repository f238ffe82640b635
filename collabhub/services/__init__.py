"""Services Layer — imperative shell around the pure core.

Invariants:
    - RequestStore is the only module that writes collaboration_requests
    - LifecycleEngine and NegotiationService hold no locks; ordering comes from the
      store's compare-and-swap
    - EngagementAggregator never writes
"""
