"""Shared helpers for the iEdit package."""
