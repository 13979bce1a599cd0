"""Intermediate providers: resolve a service while still registering others.

``get_intermediate_required_service`` builds a temporary provider from the
registrations made so far and closes it when the ``with`` block ends.
"""

from __future__ import annotations

from dacia import ServiceCollection


class Settings:
    def __init__(self) -> None:
        self.use_cache = True


class RedisCache:
    pass


class MemoryCache:
    pass


def main() -> None:
    services = ServiceCollection().add_singleton(Settings)

    with services.get_intermediate_required_service(Settings) as settings:
        cache_type = RedisCache if settings.use_cache else MemoryCache
        services.add_singleton(cache_type)

    print(f"cache={cache_type.__name__}")  # => cache=RedisCache

    provider, settings = services.open_intermediate_required_service(Settings)
    with provider:
        print(f"use_cache={settings.use_cache}")  # => use_cache=True

    with services.build_service_provider() as final_provider:
        print(
            f"separate_settings={final_provider.get_required_service(Settings) is not settings}",
        )  # => separate_settings=True


if __name__ == "__main__":
    main()
