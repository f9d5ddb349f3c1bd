"""Resolver functions referenced by the GraphQL types, queries and mutations.

Relation fields go through the request's batch loaders; mutations go
straight to the store.
"""
