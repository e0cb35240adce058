"""CCA Hub package.

Organized by feature modules (clubs, memberships, sessions, events, attendance,
analytics, ...) around two pure cores: ``access.policy.authorize`` and
``analytics.aggregator.aggregate``. Flask controllers stay thin; services own the
use cases and repositories own storage.
"""
