"""Annotation clustering and cluster tier configuration."""
