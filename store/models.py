"""
Expose ORM models for Django's auto-discovery while keeping real definitions
under the infrastructure module.
"""

from store.infra.models import *
from store.infra.activity import ActivityEvent
