"""Integration tests for the protected options protocol.

This package contains end-to-end tests that drive a deployed protocol
through complete position lifecycles.

Test categories:
- Deployment: component wiring and authorization
- Call lifecycle: create → monitor → execute
- Stop-loss lifecycle: breach → keeper cancel
- Expiry lifecycle: lazy expiry and cleanup
"""
