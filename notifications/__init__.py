"""Delivery clients for email, SMS and voice."""
