"""Feature packages. Each feature owns its models, repository and router."""
