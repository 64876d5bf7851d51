# Database package: ORM models, session factory and seeding.
