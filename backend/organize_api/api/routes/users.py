from strawberry.fastapi import GraphQLRouter
from organize_api.api.dependencies import get_context
from organize_api.api.schema import schema

# Serves queries/mutations on POST and the GraphiQL explorer on GET
router = GraphQLRouter(schema, context_getter=get_context)
