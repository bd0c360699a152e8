"""Garage API route modules."""
