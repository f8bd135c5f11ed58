from protean.domain import Domain
from sqlalchemy import create_engine

_SQL_PROVIDERS = ("sqlite", "postgresql")


def _touch_daos(domain: Domain, provider_name: str) -> None:
    """Instantiate every DAO bound to ``provider_name`` so its table is registered in metadata."""
    for registry in (domain.registry.aggregates, domain.registry.entities):
        for _, record in registry.items():
            if record.cls.meta_.provider == provider_name:
                domain.repository_for(record.cls)._dao  # noqa: B018

    # Outbox tables are registered as internal
    if hasattr(domain, "_outbox_repos") and provider_name in domain._outbox_repos:
        domain._outbox_repos[provider_name]._dao  # noqa: B018


def setup_db(domain: Domain) -> list[str]:
    """Create tables for every SQL-backed provider. Returns the providers touched."""
    touched = []
    with domain.domain_context():
        for name, provider in domain.providers.items():
            if provider.conn_info["provider"] in _SQL_PROVIDERS:
                _touch_daos(domain, name)
                engine = create_engine(provider.conn_info["database_uri"])
                provider._metadata.create_all(engine)
                touched.append(name)
    return touched


def drop_db(domain: Domain) -> list[str]:
    """Drop tables for every SQL-backed provider. Returns the providers touched."""
    touched = []
    with domain.domain_context():
        for name, provider in domain.providers.items():
            if provider.conn_info["provider"] in _SQL_PROVIDERS:
                engine = create_engine(provider.conn_info["database_uri"])
                provider._metadata.drop_all(engine)
                touched.append(name)
    return touched
