"""ReverseKit input parsers.

Each parser turns one kind of input into a ``ParseResult`` holding
``Entity`` descriptions ready for the generators.

Usage::

    from reversekit.parser import JsonParser, OpenApiParser

    result = await JsonParser().parse("users.json")
    result = await OpenApiParser().parse("openapi.yaml")
    for entity in result.entities:
        print(entity.name, list(entity.fields))
"""

from reversekit.parser.api_url import ApiUrlParser
from reversekit.parser.database import DatabaseParser
from reversekit.parser.json_parser import JsonParser
from reversekit.parser.openapi import OpenApiParser
from reversekit.parser.postman import PostmanParser

__all__ = [
    "ApiUrlParser",
    "DatabaseParser",
    "JsonParser",
    "OpenApiParser",
    "PostmanParser",
]
