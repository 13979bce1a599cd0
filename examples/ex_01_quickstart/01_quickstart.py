"""Quickstart: describe services on a collection, then build a provider.

Registrations are plain descriptors until ``build_service_provider`` turns
them into a provider that constructs services from their type hints.
"""

from __future__ import annotations

from dacia import ServiceCollection


class Database:
    def __init__(self) -> None:
        self.host = "localhost"


class UserRepository:
    def __init__(self, database: Database) -> None:
        self.database = database


class UserService:
    def __init__(self, repository: UserRepository) -> None:
        self.repository = repository


def main() -> None:
    services = ServiceCollection()
    services.add_singleton(Database).add_singleton(UserRepository).add_transient(UserService)

    print(f"registrations={len(services)}")  # => registrations=3

    with services.build_service_provider() as provider:
        service = provider.get_required_service(UserService)

        print(f"db_host={service.repository.database.host}")  # => db_host=localhost
        print(
            f"missing={provider.get_service(int)}",
        )  # => missing=None


if __name__ == "__main__":
    main()
