"""Shared domain models and utilities for the CampusCare pipeline."""
