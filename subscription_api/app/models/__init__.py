"""
Domain records shared by the service and repository layers.
"""

from .subscription import ListFilter, Subscription, SubscriptionInput

__all__ = ["ListFilter", "Subscription", "SubscriptionInput"]
