"""Joyhomes CRM booking service."""
