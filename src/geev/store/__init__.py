"""Reducer-backed application state store."""
