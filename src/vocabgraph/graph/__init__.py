"""Vocabulary snapshot graph.

A snapshot is a static JSON dump of Word/Synset/Example/... nodes and their
edges. It is loaded once into an in-memory index and answers the
visualization and synonym/antonym lookups without touching Neo4j.
"""
