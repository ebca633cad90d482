"""
mockstage: Scenario-Driven Mock AI Backend.

A deterministic stand-in for a hosted AI provider. Mock services mirror the
real analysis, hackathon evaluation and Frankenstein idea generation
contracts while serving schema-validated fixtures, injecting scenario
errors and simulating network latency.

Key Features:
- Scenario selection (success, api_error, timeout, rate_limit, ...)
- TTL-bound response cache with hit/miss statistics
- Input and locale aware response customization
- Fixture schema validation at load time and from the CLI

Example:
    from mockstage.config import FeatureFlagManager
    from mockstage.services import MockServiceFactory

    factory = MockServiceFactory(FeatureFlagManager())
    service = factory.create_frankenstein_service()
    idea = await service.generate_frankenstein_idea(
        [{"name": "Slack"}, {"name": "Trello"}], "companies", "en"
    )
"""

from mockstage.version import __version__

__all__ = [
    "__version__",
]
