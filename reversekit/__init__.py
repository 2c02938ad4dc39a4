"""ReverseKit -- reverse-engineer Laravel scaffolding from existing data.

Parses JSON samples, live API endpoints, OpenAPI documents, Postman
collections or SQLite databases into entity descriptions and generates the
matching models, migrations, factories, seeders, form requests,
controllers, API resources, policies, feature tests and routes.
"""

__version__ = "0.1.0"
